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

"""Command-line entry point and the implementations it can select.

An implementation is a ParamObj chosen with -I (Serial or Parallel).  Its
parameters become --mrs-* options, and it decides which runner executes the
job.
"""

import logging
import sys
import time

from . import fileformats
from . import param
from . import runner
from .param import ParamObj, Param
from .version import __version__


USAGE = (""
"""%prog [OPTIONS] INPUT... OUTPUT_DIR

mrcount version """ + __version__ + """

Jobs run with the Serial implementation unless -I selects another one.  Give
--help after -I to see the options of that implementation."""
)

logger = logging.getLogger('mrcount')

LOG_LEVELS = (
    ('debug', logging.DEBUG),
    ('verbose', logging.INFO),
    )


def main(program_class, args=None):
    """Parses the command line, runs a job, and exits with its status.

    The program class is normally a MapReduce subclass.  Its update_parser
    classmethod, if any, may add options to the parser.  When `args` is
    None the options are taken from sys.argv.
    """
    parser = option_parser()
    update_parser = getattr(program_class, 'update_parser', None)
    if update_parser is not None:
        parser = update_parser(parser)
    opts, args = parser.parse_args(args)

    impl = param.instantiate(opts, 'mrs')
    impl.program_class = program_class

    try:
        status = impl.main(opts, args)
    except KeyboardInterrupt:
        logger.critical('Quitting due to keyboard interrupt.')
        status = 1
    sys.exit(status)


def option_parser():
    """Returns a parser with only the -I option and its suboptions.

    Conflicting options are resolved in favor of the most recent one, so a
    program can redefine any option.
    """
    parser = param.OptionParser(conflict_handler='resolve')
    parser.usage = USAGE
    parser.add_option('-I', '--mrs', dest='mrs', metavar='IMPLEMENTATION',
            action='extend', search=['mrcount.main'], default='Serial',
            help='How to run the job: Serial or Parallel (default=Serial)')
    return parser


class BaseImplementation(ParamObj):
    """Options shared by every implementation.

    Subclasses provide `_main`, which runs the job and returns an exit code.
    """
    _params = dict(
        verbose=Param(type='bool', doc='Log progress messages (INFO)'),
        debug=Param(type='bool', doc='Log everything (DEBUG)'),
        timing_file=Param(doc='File to record the wall-clock run time in'),
        )

    program_class = None

    def log_level(self):
        for attr, level in LOG_LEVELS:
            if getattr(self, attr):
                return level
        return logging.WARNING

    def main(self, opts=None, args=None):
        logger.setLevel(self.log_level())
        start = time.time()
        try:
            return self._main(opts, args or [])
        finally:
            if self.timing_file:
                self.write_timing(time.time() - start)

    def write_timing(self, elapsed):
        with open(self.timing_file, 'w') as f:
            print('total_time=%s' % elapsed, file=f)

    def _main(self, opts, args):
        raise NotImplementedError


class Implementation(BaseImplementation):
    """Runs the job with the runner named by `runner_class`."""

    runner_class = None

    def runner_options(self):
        """Keyword arguments for the runner."""
        return {}

    def _main(self, opts, args):
        job = self.runner_class(self.program_class, opts, args,
                **self.runner_options())
        return job.run()


class Serial(Implementation):
    """Runs every task in this process, with one reduce task and no retries.
    """
    runner_class = runner.SerialRunner

    def runner_options(self):
        return dict(reduce_tasks=1, max_attempts=1)


class TaskRunnerParams(ParamObj):
    _params = dict(
        reduce_tasks=Param(default=1, type='int',
            doc='Number of reduce tasks (and output files)'),
        split_size=Param(default=fileformats.DEFAULT_SPLIT_SIZE, type='int',
            doc='Largest number of input bytes per map task'),
        max_attempts=Param(default=runner.DEFAULT_MAX_ATTEMPTS, type='int',
            doc='Attempts per task before the job fails'),
        )


class Parallel(Implementation, TaskRunnerParams):
    """Runs tasks in a pool of worker processes on this host.

    Every worker process loads the program's per-process state (such as the
    stop-word list) once.  The shuffle between the map and reduce phases
    goes through the parent process.
    """
    _params = dict(
        workers=Param(default=0, type='int', shortopt='-N',
            doc='Number of worker processes (0 means one per CPU)'),
        )

    runner_class = runner.ParallelRunner

    def runner_options(self):
        options = dict(workers=self.workers)
        for attr in TaskRunnerParams._params:
            options[attr] = getattr(self, attr)
        return options

# vim: et sw=4 sts=4
