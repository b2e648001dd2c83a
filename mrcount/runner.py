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

"""Runners: execute the map, shuffle and reduce phases of a job.

SerialRunner does everything in the calling process.  ParallelRunner runs
tasks in a pool of worker processes, each of which creates its own program
instance and calls its `setup` method once.
"""

import multiprocessing
import os
import sys
import time
import traceback

from . import counters
from . import fileformats
from . import tasks

import logging
logger = logging.getLogger('mrcount')
del logging

DEFAULT_MAX_ATTEMPTS = 4
PROGRESS_INTERVAL = 0.25


class JobFailed(Exception):
    """Raised when a task has failed on every allowed attempt."""


class BaseRunner(object):
    """Runs a single MapReduce job and keeps track of its counters.

    BaseRunner is abstract: subclasses decide where tasks execute by
    implementing `start`, `submit`, `wait` and `finish`.

    Arguments:
        program_class: class (inheriting from MapReduce) which defines
            methods such as map, reduce, partition, etc.
        opts: command-line options which are given to each program instance
        args: command-line arguments which are given to each program instance
        reduce_tasks: number of reduce partitions (and output files)
        split_size: largest number of input bytes given to one map task
        max_attempts: number of times a task is tried before the job fails
    """
    def __init__(self, program_class, opts, args, reduce_tasks=1,
            split_size=fileformats.DEFAULT_SPLIT_SIZE,
            max_attempts=DEFAULT_MAX_ATTEMPTS):
        self.program_class = program_class
        self.opts = opts
        self.args = args
        self.reduce_tasks = max(1, reduce_tasks)
        self.split_size = split_size
        self.max_attempts = max(1, max_attempts)

        self.counters = counters.Counters()
        self.progress = {'Map': 0.0, 'Reduce': 0.0}
        self._last_progress = 0.0

    def run(self):
        """Runs the job.  Returns an exit code."""
        try:
            program = self.program_class(self.opts, self.args)
        except Exception:
            logger.critical('Exception while instantiating the program: %s'
                    % traceback.format_exc())
            return 1

        inputs = program.input_data()
        if inputs is None:
            return 1
        outdir = program.output_dir()
        if outdir is None:
            return 1

        try:
            splits = fileformats.input_splits(inputs, self.split_size)
        except IOError as e:
            logger.critical('Unable to read input: %s' % e)
            return 1
        if os.path.exists(outdir):
            logger.critical('Output directory %s already exists' % outdir)
            return 1
        os.makedirs(outdir)

        success = False
        try:
            self.start(program)
            map_tasks = [tasks.MapTask(i, split, self.reduce_tasks)
                    for i, split in enumerate(splits)]
            map_results = self.run_phase('Map', map_tasks)

            partitions = tasks.shuffle(map_results, self.reduce_tasks)
            reduce_tasks = [tasks.ReduceTask(i, buckets, outdir)
                    for i, buckets in enumerate(partitions)]
            self.run_phase('Reduce', reduce_tasks)
            success = True
        except JobFailed as e:
            logger.critical('Job execution failed: %s' % e)
            return 1
        except KeyboardInterrupt:
            logger.critical('Quitting due to keyboard interrupt.')
            return 1
        finally:
            self.finish(success)

        print(self.counters.format())
        sys.stdout.flush()
        return 0

    def run_phase(self, name, task_list):
        """Runs every task of a phase, retrying failed attempts.

        Returns the TaskResults in task order.  Raises JobFailed if a task
        runs out of attempts.
        """
        logger.info('%s phase: %s tasks' % (name, len(task_list)))
        results = [None] * len(task_list)
        attempts = [0] * len(task_list)
        pending = {}
        for index, task in enumerate(task_list):
            attempts[index] += 1
            pending[index] = self.submit(task)

        done = 0
        while pending:
            index, outcome = self.wait(pending)
            del pending[index]
            task = task_list[index]
            if isinstance(outcome, tasks.TaskFailure):
                logger.error('Task %s failed (attempt %s of %s):\n%s'
                        % (task.id, attempts[index], self.max_attempts,
                            outcome.traceback))
                if attempts[index] >= self.max_attempts:
                    raise JobFailed('task %s failed %s times'
                            % (task.id, attempts[index]))
                attempts[index] += 1
                pending[index] = self.submit(task)
                continue

            results[index] = outcome
            self.counters.merge(outcome.counters)
            done += 1
            self.progress[name] = done / len(task_list)
            self.print_progress(force=(done == len(task_list)))
        return results

    def print_progress(self, force=False):
        now = time.time()
        if not force and now - self._last_progress < PROGRESS_INTERVAL:
            return
        self._last_progress = now
        print('Map: %.1f%% complete. Reduce: %.1f%% complete.'
                % (100 * self.progress['Map'], 100 * self.progress['Reduce']))
        sys.stdout.flush()

    def start(self, program):
        raise NotImplementedError

    def submit(self, task):
        """Starts an attempt of a task and returns a handle for `wait`."""
        raise NotImplementedError

    def wait(self, pending):
        """Waits for one pending attempt.

        Takes a dict mapping task indices to handles.  Returns an (index,
        outcome) pair, where the outcome is a TaskResult or a TaskFailure.
        """
        raise NotImplementedError

    def finish(self, success=True):
        pass


def run_task(program, task):
    """Runs a task, converting any exception into a TaskFailure."""
    try:
        return task.run(program)
    except Exception as e:
        return tasks.TaskFailure(task.id, repr(e), traceback.format_exc())


class SerialRunner(BaseRunner):
    """Runs every task, one at a time, in the current process."""

    def start(self, program):
        self.program = program
        try:
            program.setup()
        except Exception:
            raise JobFailed('program setup failed:\n%s'
                    % traceback.format_exc())

    def submit(self, task):
        return task

    def wait(self, pending):
        index = min(pending)
        return index, run_task(self.program, pending[index])


# The program instance of a pool worker process.
_worker_state = {}


def _init_worker(program_class, opts, args):
    _worker_state['factory'] = (program_class, opts, args)
    _worker_state['program'] = None


def _run_in_worker(task):
    program = _worker_state.get('program')
    if program is None:
        try:
            program_class, opts, args = _worker_state['factory']
            program = program_class(opts, args)
            program.setup()
        except Exception as e:
            return tasks.TaskFailure(task.id, repr(e), traceback.format_exc())
        _worker_state['program'] = program
    return run_task(program, task)


class ParallelRunner(BaseRunner):
    """Runs tasks in a multiprocessing Pool of worker processes.

    Each worker process builds its own program instance the first time it is
    given a task, so filters and other per-process state are loaded once per
    process.
    """
    def __init__(self, *args, **kwds):
        self.workers = kwds.pop('workers', 0) or os.cpu_count() or 1
        super(ParallelRunner, self).__init__(*args, **kwds)
        self.pool = None

    def start(self, program):
        self.pool = multiprocessing.Pool(self.workers,
                initializer=_init_worker,
                initargs=(self.program_class, self.opts, self.args))

    def submit(self, task):
        return self.pool.apply_async(_run_in_worker, (task,))

    def wait(self, pending):
        while True:
            for index, async_result in pending.items():
                if async_result.ready():
                    try:
                        return index, async_result.get()
                    except Exception as e:
                        # The result itself could not be sent back.
                        return index, tasks.TaskFailure(None, repr(e),
                                traceback.format_exc())
            # Block briefly on the oldest attempt rather than spinning.
            next(iter(pending.values())).wait(PROGRESS_INTERVAL)

    def finish(self, success=True):
        if self.pool is not None:
            if success:
                self.pool.close()
            else:
                self.pool.terminate()
            self.pool.join()
            self.pool = None

# vim: et sw=4 sts=4
