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

"""The MapReduce base class that programs extend.

A program supplies `map` and `reduce`, and may supply a combine pass, a
partition function, and per-process and per-task hooks.  Everything else
(splitting input, shuffling, grouping by key and writing the part-r-*
files) is the job of mrcount.runner.
"""

import sys
import zlib

from .version import __version__

DEFAULT_USAGE = (""
"""%prog [OPTION]... INPUT... OUTPUT_DIR

mrcount version """ + __version__ + """

Each INPUT is a text file or a directory of text files.  OUTPUT_DIR must not
exist yet.  Jobs run with the Serial implementation unless -I selects
another one."""
)


class MapReduce(object):
    """Base class of a MapReduce program.

    One instance is created in each process that runs tasks, and `setup` is
    called on it once before its first task.  Before every task,
    `task_setup` hands over the Counters of that task.  Nothing a task
    stores on the instance may be relied on by a later task, since tasks are
    retried and spread over processes.

    A combine pass runs over the output of each map task if the program
    defines `combine` (same signature as `reduce`) or returns a table from
    `combine_table`.

    Attributes:
        opts: parsed command-line options (an optparse.Values).
        args: positional command-line arguments, the inputs followed by the
            output directory.
        counters: Counters of the task in progress.
    """
    def __init__(self, opts, args):
        self.opts = opts
        self.args = args
        self.counters = None

    def map(self, key, value):
        """Yields (key, value) pairs for one input record.

        For text input the key is the byte offset of the line and the value
        is the line itself.
        """
        raise NotImplementedError

    def reduce(self, key, values):
        """Yields output values for a key and an iterator over its values."""
        raise NotImplementedError

    def setup(self):
        """Per-process initialization, called once before any task runs."""
        pass

    def task_setup(self, counters):
        self.counters = counters

    def combine_table(self):
        """Returns an empty table for combining map output, or None.

        A table has `add(key, value)` and `items()` methods, where items
        returns the combined (key, value) pairs sorted by key.
        """
        return None

    def input_data(self):
        """Returns the list of input paths, or None if there are none."""
        inputs = self.args[:-1]
        if not inputs:
            print('At least one input and an output directory are required.',
                    file=sys.stderr)
            return None
        return inputs

    def output_dir(self):
        """Returns the output directory, or None if none was given."""
        if not self.args:
            print('An output directory is required.', file=sys.stderr)
            return None
        return self.args[-1]

    def hash_partition(self, key, n):
        """Partitions by a CRC32 hash of the key's string form.

        Python's built-in hash of a string changes from process to process,
        so it can't be used to route keys from different workers.

        >>> MapReduce(None, []).hash_partition('fox', 1)
        0
        >>>
        """
        return zlib.crc32(str(key).encode('utf-8')) % n

    partition = hash_partition

    @classmethod
    def update_parser(cls, parser):
        """Adds program options to an OptionParser and returns it."""
        parser.usage = DEFAULT_USAGE
        return parser

# vim: et sw=4 sts=4
