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

"""Job counters.

A Counters instance belongs to a single task attempt.  Counters only ever
increase, and the runner merges the counters of every successful attempt to
produce the totals for the job.
"""

import collections


class Counters(object):
    """Named integer counters, organized in groups.

    >>> c = Counters()
    >>> c.increment('WordCount', 'INPUT_WORDS')
    >>> c.increment('WordCount', 'INPUT_WORDS', 2)
    >>> c.value('WordCount', 'INPUT_WORDS')
    3
    >>> c.value('WordCount', 'MISSING')
    0
    >>>
    """
    def __init__(self):
        self._counts = collections.defaultdict(int)

    def increment(self, group, name, amount=1):
        if amount < 0:
            raise ValueError('Counters cannot be decremented')
        self._counts[(group, name)] += amount

    def value(self, group, name):
        return self._counts.get((group, name), 0)

    def merge(self, other):
        """Adds the counts of another Counters instance to this one."""
        for key, count in other._counts.items():
            self._counts[key] += count

    def groups(self):
        """Returns a dict mapping each group to sorted (name, count) pairs."""
        result = collections.defaultdict(list)
        for (group, name), count in sorted(self._counts.items()):
            result[group].append((name, count))
        return dict(result)

    def format(self):
        lines = ['Counters: %s' % len(self._counts)]
        for group, entries in sorted(self.groups().items()):
            lines.append('\t%s' % group)
            for name, count in entries:
                lines.append('\t\t%s=%s' % (name, count))
        return '\n'.join(lines)

    def __len__(self):
        return len(self._counts)

    def __iter__(self):
        return iter(sorted(self._counts.items()))

    def __eq__(self, other):
        if not isinstance(other, Counters):
            return NotImplemented
        return dict(self._counts) == dict(other._counts)

    def __repr__(self):
        return 'Counters(%r)' % dict(self._counts)

# vim: et sw=4 sts=4
