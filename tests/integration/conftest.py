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

from collections import defaultdict

import pytest

import mrcount
from mrcount.wordcount import WordCount


def pytest_generate_tests(metafunc):
    if 'mrs_impl' in metafunc.fixturenames:
        if 'mrs_reduce_tasks' in metafunc.fixturenames:
            cases = [('serial', 1)]
            cases.extend(('parallel', i) for i in (1, 3, 5))
            metafunc.parametrize(('mrs_impl', 'mrs_reduce_tasks'), cases)
        else:
            metafunc.parametrize('mrs_impl', ['serial', 'parallel'])


def run_wordcount(mrs_impl, args, reduce_tasks=1, workers=2, split_size=64):
    """Runs WordCount with the given implementation.  Returns the exit code.
    """
    if mrs_impl == 'serial':
        assert reduce_tasks == 1
        argv = ['-I', 'Serial'] + args
    elif mrs_impl == 'parallel':
        argv = ['-I', 'Parallel', '--mrs-workers', str(workers),
                '--mrs-reduce-tasks', str(reduce_tasks),
                '--mrs-split-size', str(split_size)] + args
    else:
        raise RuntimeError('Unknown mrs_impl: %s' % mrs_impl)

    with pytest.raises(SystemExit) as excinfo:
        mrcount.main(WordCount, args=argv)
    return excinfo.value.code


def read_counts(outdir):
    """Reads the word counts from every output file in a directory."""
    counts = defaultdict(int)
    for outfile in outdir.listdir():
        for line in outfile.read().splitlines():
            key, value = line.rsplit('\t', 1)
            assert key not in counts
            counts[key] += int(value)
    return dict(counts)

# vim: et sw=4 sts=4
