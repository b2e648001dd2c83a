import optparse
import os

import pytest

from mrcount import runner
from mrcount import tasks
from mrcount.fileformats import InputSplit, TextReader
from mrcount.mapreduce import MapReduce
from mrcount.wordcount import WordCount

FRAMEWORK = tasks.FRAMEWORK_GROUP


class LetterCount(MapReduce):
    def map(self, key, line):
        for letter in line:
            if letter.isalpha():
                yield letter, 1

    def reduce(self, key, values):
        yield sum(values)

    combine = reduce


class UncombinedLetterCount(LetterCount):
    combine = None


class FailingReduce(LetterCount):
    def reduce(self, key, values):
        raise RuntimeError('reduce failed')


class FlakyWordCount(WordCount):
    """Fails the first map attempt after emitting some output."""

    def setup(self):
        super(FlakyWordCount, self).setup()
        self.failures_left = 1

    def map(self, key, line):
        for pair in super(FlakyWordCount, self).map(key, line):
            yield pair
        if self.failures_left:
            self.failures_left -= 1
            raise RuntimeError('simulated map failure')


class LoggedFlakyWordCount(FlakyWordCount):
    """Appends the pid of each process that runs setup to a file."""

    def setup(self):
        super(LoggedFlakyWordCount, self).setup()
        with open(self.opts.setup_log, 'a') as f:
            f.write('%s\n' % os.getpid())


def whole_file(path):
    return InputSplit(path.strpath, 0, path.size())


def test_map_with_combine(tmpdir):
    path = tmpdir.join('input.txt')
    path.write('abca\nbb\n')
    program = LetterCount(None, [])

    result = tasks.MapTask(0, whole_file(path), 1).run(program)
    assert result.task == 'm_00000'
    assert result.output == [[('a', 2), ('b', 3), ('c', 1)]]

    counters = result.counters
    assert counters.value(FRAMEWORK, 'MAP_INPUT_RECORDS') == 2
    assert counters.value(FRAMEWORK, 'MAP_OUTPUT_RECORDS') == 6
    assert counters.value(FRAMEWORK, 'COMBINE_INPUT_RECORDS') == 6
    assert counters.value(FRAMEWORK, 'COMBINE_OUTPUT_RECORDS') == 3


def test_map_without_combine(tmpdir):
    path = tmpdir.join('input.txt')
    path.write('abca\nbb\n')
    program = UncombinedLetterCount(None, [])

    result = tasks.MapTask(0, whole_file(path), 1).run(program)
    assert result.output == [[('a', 1), ('b', 1), ('c', 1), ('a', 1),
        ('b', 1), ('b', 1)]]
    assert result.counters.value(FRAMEWORK, 'COMBINE_INPUT_RECORDS') == 0


def test_map_partitions(tmpdir):
    path = tmpdir.join('input.txt')
    path.write('the quick brown fox jumps over the lazy dog\n')
    program = WordCount(optparse.Values(), [])
    program.setup()

    result = tasks.MapTask(3, whole_file(path), 4).run(program)
    assert result.task == 'm_00003'
    assert len(result.output) == 4
    for index, bucket in enumerate(result.output):
        for word, count in bucket:
            assert program.partition(word, 4) == index
    merged = dict(pair for bucket in result.output for pair in bucket)
    assert merged['the'] == 2
    assert sum(merged.values()) == 9


def test_reduce(tmpdir):
    program = LetterCount(None, [])
    buckets = [[('a', 2), ('b', 1)], [('a', 1), ('c', 4)]]
    task = tasks.ReduceTask(0, buckets, tmpdir.strpath)

    result = task.run(program)
    assert result.output == os.path.join(tmpdir.strpath, 'part-r-00000')
    assert list(TextReader(result.output)) == [('a', '3'), ('b', '1'),
            ('c', '4')]
    assert tmpdir.listdir() == [tmpdir.join('part-r-00000')]

    counters = result.counters
    assert counters.value(FRAMEWORK, 'REDUCE_INPUT_RECORDS') == 4
    assert counters.value(FRAMEWORK, 'REDUCE_INPUT_GROUPS') == 3
    assert counters.value(FRAMEWORK, 'REDUCE_OUTPUT_RECORDS') == 3


def test_failed_reduce_leaves_no_output(tmpdir):
    program = FailingReduce(None, [])
    task = tasks.ReduceTask(1, [[('a', 1)]], tmpdir.strpath)

    with pytest.raises(RuntimeError):
        task.run(program)
    assert tmpdir.listdir() == []


def test_shuffle():
    results = [tasks.TaskResult('m_00000', [[('a', 1)], []], None),
            tasks.TaskResult('m_00001', [[('b', 1)], [('c', 2)]], None)]
    partitions = tasks.shuffle(results, 2)
    assert partitions == [[[('a', 1)], [('b', 1)]], [[('c', 2)]]]


def test_retry_does_not_double_count(tmpdir, datadir):
    opts = optparse.Values()
    opts.skip_stop_words = os.path.join(datadir, 'stopwords.txt')
    outdir = tmpdir.join('out')
    args = [os.path.join(datadir, 'foxes.txt'), outdir.strpath]

    job = runner.SerialRunner(FlakyWordCount, opts, args, max_attempts=2)
    assert job.run() == 0

    assert job.counters.value('WordCount', 'INPUT_WORDS') == 4
    assert job.counters.value(FRAMEWORK, 'MAP_INPUT_RECORDS') == 2
    assert job.counters.value(FRAMEWORK, 'REDUCE_OUTPUT_RECORDS') == 3
    assert outdir.join('part-r-00000').read() == 'fox\t2\nlazy\t1\nquick\t1\n'


def test_parallel_retries_and_setup_once_per_process(tmpdir, datadir):
    inputs = [os.path.join(datadir, 'dickens.txt')]

    serial_out = tmpdir.join('serial')
    serial = runner.SerialRunner(WordCount, optparse.Values(),
            inputs + [serial_out.strpath])
    assert serial.run() == 0

    setup_log = tmpdir.join('setup.log')
    opts = optparse.Values()
    opts.setup_log = setup_log.strpath
    parallel_out = tmpdir.join('parallel')
    job = runner.ParallelRunner(LoggedFlakyWordCount, opts,
            inputs + [parallel_out.strpath], workers=2, reduce_tasks=3,
            split_size=200)
    assert job.run() == 0

    words = serial.counters.value('WordCount', 'INPUT_WORDS')
    assert words > 0
    assert job.counters.value('WordCount', 'INPUT_WORDS') == words
    assert job.counters.value(FRAMEWORK, 'MAP_INPUT_RECORDS') == 17

    expected = dict(TextReader(serial_out.join('part-r-00000').strpath))
    counts = {}
    for outfile in parallel_out.listdir():
        counts.update(TextReader(outfile.strpath))
    assert len(parallel_out.listdir()) == 3
    assert counts == expected

    pids = setup_log.read().split()
    assert 1 <= len(pids) <= 2
    assert len(set(pids)) == len(pids)
    assert str(os.getpid()) not in pids


def test_exhausted_attempts_fail_job(tmpdir, datadir):
    opts = optparse.Values()
    outdir = tmpdir.join('out')
    args = [os.path.join(datadir, 'foxes.txt'), outdir.strpath]

    job = runner.SerialRunner(FlakyWordCount, opts, args, max_attempts=1)
    assert job.run() == 1
    assert outdir.listdir() == []


def test_run_task_reports_failure():
    class Broken(object):
        id = 'm_00007'

        def run(self, program):
            raise ValueError('bad record')

    failure = runner.run_task(None, Broken())
    assert isinstance(failure, tasks.TaskFailure)
    assert failure.task == 'm_00007'
    assert 'bad record' in failure.message
    assert 'ValueError' in failure.traceback

# vim: et sw=4 sts=4
