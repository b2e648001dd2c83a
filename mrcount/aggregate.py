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

"""Count aggregation shared by the combine and reduce passes.

Summing is commutative and associative, so partial sums may be taken in any
order, any number of times, on any grouping of the counts for a word, and the
final total is unchanged.
"""

import collections


def sum_counts(word, counts):
    """Returns (word, total) for an iterable of counts.

    >>> sum_counts('fox', [1, 1, 3])
    ('fox', 5)
    >>> sum_counts('fox', iter([]))
    ('fox', 0)
    >>>
    """
    total = 0
    for count in counts:
        total += count
    return word, total


class SumTable(object):
    """A mapping from each word to its running total.

    A map task keeps one SumTable per reduce partition as its local combine
    pass.  Tables can be merged in any order.

    >>> a = SumTable([('fox', 1), ('dog', 1), ('fox', 1)])
    >>> b = SumTable([('fox', 4)])
    >>> a.merge(b)
    >>> list(a)
    [('dog', 1), ('fox', 6)]
    >>>
    """
    def __init__(self, pairs=()):
        self._totals = collections.defaultdict(int)
        self.update(pairs)

    def add(self, word, count):
        self._totals[word] += count

    def update(self, pairs):
        """Adds every (word, count) pair of an iterable."""
        totals = self._totals
        for word, count in pairs:
            totals[word] += count

    def merge(self, other):
        """Adds the totals of another table into this one."""
        self.update(other._totals.items())

    def get(self, word):
        return self._totals.get(word, 0)

    def total(self):
        return sum(self._totals.values())

    def items(self):
        """Returns (word, total) pairs sorted by word."""
        return sorted(self._totals.items())

    def __iter__(self):
        return iter(self.items())

    def __len__(self):
        return len(self._totals)

    def __contains__(self, word):
        return word in self._totals

    def __eq__(self, other):
        if not isinstance(other, SumTable):
            return NotImplemented
        return dict(self._totals) == dict(other._totals)

    def __repr__(self):
        return 'SumTable(%r)' % self.items()


def merge_tables(tables):
    """Merges any number of SumTables into a new one."""
    result = SumTable()
    for table in tables:
        result.merge(table)
    return result

# vim: et sw=4 sts=4
