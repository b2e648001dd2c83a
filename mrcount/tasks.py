# Mrs
# Copyright 2008-2012 Brigham Young University
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""MapReduce Tasks.

A Task represents a unit of work and the mechanism for carrying it out.  A
task is run from scratch on each attempt and returns everything it produced
in a TaskResult, so a failed attempt leaves nothing behind to be counted.
"""

from collections import namedtuple
import itertools
from operator import itemgetter
import os

from . import counters
from . import fileformats

from logging import getLogger
logger = getLogger('mrcount')

FRAMEWORK_GROUP = 'Map-Reduce Framework'

TaskResult = namedtuple('TaskResult', ('task', 'output', 'counters'))


class TaskFailure(object):
    """Failed attempt of a task, as reported from a worker.

    Only the text of the exception travels, since not every exception can
    be pickled.
    """
    def __init__(self, task, message, traceback):
        self.task = task
        self.message = message
        self.traceback = traceback


class Task(object):
    """Manage input and output for a piece of a map or reduce operation."""
    kind = None

    def __init__(self, task_index, splits):
        self.task_index = task_index
        self.splits = splits

    @property
    def id(self):
        return '%s_%05d' % (self.kind, self.task_index)

    def run(self, program):
        raise NotImplementedError

    def _start(self, program):
        task_counters = counters.Counters()
        program.task_setup(task_counters)
        return task_counters

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.id)


class MapTask(Task):
    """Maps one input split into one bucket of pairs per reduce partition."""
    kind = 'm'

    def __init__(self, task_index, input_split, splits):
        super(MapTask, self).__init__(task_index, splits)
        self.input_split = input_split

    def run(self, program):
        task_counters = self._start(program)
        reader = CountingIterator(fileformats.LineReader(self.input_split))
        map_itr = CountingIterator(map_pairs(program.map, reader))

        tables = [program.combine_table() for _ in range(self.splits)]
        if tables and tables[0] is not None:
            for key, value in map_itr:
                tables[program.partition(key, self.splits)].add(key, value)
            output = [table.items() for table in tables]
            combined = True
        else:
            output = [[] for _ in range(self.splits)]
            for kvpair in map_itr:
                output[program.partition(kvpair[0], self.splits)].append(
                        kvpair)
            combiner = getattr(program, 'combine', None)
            combined = combiner is not None
            if combined:
                output = [list(reduce_pairs(combiner,
                    sorted(bucket, key=itemgetter(0)))) for bucket in output]

        inc = task_counters.increment
        inc(FRAMEWORK_GROUP, 'MAP_INPUT_RECORDS', reader.count)
        inc(FRAMEWORK_GROUP, 'MAP_OUTPUT_RECORDS', map_itr.count)
        if combined:
            inc(FRAMEWORK_GROUP, 'COMBINE_INPUT_RECORDS', map_itr.count)
            inc(FRAMEWORK_GROUP, 'COMBINE_OUTPUT_RECORDS',
                    sum(len(bucket) for bucket in output))
        return TaskResult(self.id, output, task_counters)


class ReduceTask(Task):
    """Reduces one partition, gathered from the buckets of every map task.

    Output is written to a temporary file which is renamed into place when
    the task succeeds.
    """
    kind = 'r'

    def __init__(self, task_index, buckets, outdir, splits=1):
        super(ReduceTask, self).__init__(task_index, splits)
        self.buckets = buckets
        self.outdir = outdir

    def path(self):
        return os.path.join(self.outdir,
                fileformats.output_filename(self.task_index))

    def run(self, program):
        task_counters = self._start(program)
        input_count = sum(len(bucket) for bucket in self.buckets)
        all_input = sorted(itertools.chain.from_iterable(self.buckets),
                key=itemgetter(0))

        path = self.path()
        tmp_path = '%s.%s.tmp' % (path, os.getpid())
        groups = 0
        records = 0
        try:
            with fileformats.TextWriter.open(tmp_path) as writer:
                for key, iterator in group_pairs(all_input):
                    groups += 1
                    for value in program.reduce(key, iterator):
                        writer.writepair((key, value))
                        records += 1
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        inc = task_counters.increment
        inc(FRAMEWORK_GROUP, 'REDUCE_INPUT_RECORDS', input_count)
        inc(FRAMEWORK_GROUP, 'REDUCE_INPUT_GROUPS', groups)
        inc(FRAMEWORK_GROUP, 'REDUCE_OUTPUT_RECORDS', records)
        return TaskResult(self.id, path, task_counters)


class CountingIterator(object):
    """Wraps an iterable and counts the items that pass through."""
    def __init__(self, iterable):
        self._iterator = iter(iterable)
        self.count = 0

    def __iter__(self):
        return self

    def __next__(self):
        item = next(self._iterator)
        self.count += 1
        return item


def map_pairs(mapper, input):
    """Yields map output iterating over the entries in input."""
    for inkey, invalue in input:
        for key, value in mapper(inkey, invalue):
            yield (key, value)


def group_pairs(sorted_pairs):
    """Groups sorted (key, value) pairs into (key, value iterator) pairs."""
    for key, group in itertools.groupby(sorted_pairs, key=itemgetter(0)):
        yield key, (pair[1] for pair in group)


def reduce_pairs(reducer, sorted_pairs):
    """Yields (key, value) reduce output for sorted input pairs.

    A reducer is an iterator taking a key and an iterator over values for
    that key.  It yields values for that key.
    """
    for key, iterator in group_pairs(sorted_pairs):
        for value in reducer(key, iterator):
            yield (key, value)


def shuffle(map_results, splits):
    """Gathers the buckets of each partition from successful map tasks.

    Returns a list with one list of buckets per reduce partition.
    """
    partitions = [[] for _ in range(splits)]
    for result in map_results:
        for index, bucket in enumerate(result.output):
            if bucket:
                partitions[index].append(bucket)
    return partitions

# vim: et sw=4 sts=4
