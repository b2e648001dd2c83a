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

"""Stop-word and skip-pattern filters.

The two filter files are read once per worker process, before any input is
processed.  Loading is best effort: a file that can't be read is logged and
treated as empty, and the job goes on with less filtering.
"""

from collections import namedtuple

from logging import getLogger
logger = getLogger('mrcount')


_FilterSetBase = namedtuple('FilterSet', ('skip_patterns', 'stop_words'))


class FilterSet(_FilterSetBase):
    """The loaded filters of one worker process.

    Attributes:
        skip_patterns: frozenset of lines from the skip-pattern file.  These
            are loaded but no tokenization decision depends on them.
        stop_words: frozenset of lower-case tokens to drop.
    """
    __slots__ = ()

    def __new__(cls, skip_patterns=(), stop_words=()):
        return super(FilterSet, cls).__new__(cls, frozenset(skip_patterns),
                frozenset(stop_words))


EMPTY_FILTERS = FilterSet()


def load(skip_path, stop_words_path, config):
    """Reads the filter files enabled by `config` into a FilterSet."""
    if config.use_skip_patterns:
        skip_patterns = read_entries(skip_path, 'skip-pattern')
    else:
        skip_patterns = frozenset()

    if config.use_stop_words:
        stop_words = read_entries(stop_words_path, 'stop-word')
    else:
        stop_words = frozenset()

    filters = FilterSet(skip_patterns, stop_words)
    logger.debug('Loaded %s skip patterns and %s stop words'
            % (len(filters.skip_patterns), len(filters.stop_words)))
    return filters


def read_entries(path, kind='filter'):
    """Returns the set of lines in a file, or an empty set on failure.

    Only the line terminator is removed from each line.
    """
    if not path:
        logger.warning('No %s file was given; using an empty set' % kind)
        return frozenset()

    try:
        with open(path, encoding='utf-8') as f:
            return frozenset(line.rstrip('\n') for line in f)
    except (IOError, UnicodeDecodeError) as e:
        logger.error('Caught exception while parsing the %s file %r: %s'
                % (kind, path, e))
        return frozenset()

# vim: et sw=4 sts=4
