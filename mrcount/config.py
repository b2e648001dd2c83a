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

"""Word count job configuration."""

from collections import namedtuple

from logging import getLogger
logger = getLogger('mrcount')

CASE_SENSITIVE_PROPERTY = 'wordcount.case.sensitive'
SKIP_PATTERNS_PROPERTY = 'wordcount.skip.patterns'
SKIP_STOPWORDS_PROPERTY = 'wordcount.skip.stopwords'

PROPERTY_FIELDS = {
    CASE_SENSITIVE_PROPERTY: 'case_sensitive',
    SKIP_PATTERNS_PROPERTY: 'use_skip_patterns',
    SKIP_STOPWORDS_PROPERTY: 'use_stop_words',
}


_JobConfigBase = namedtuple('JobConfig',
        ('case_sensitive', 'use_skip_patterns', 'use_stop_words'))


class JobConfig(_JobConfigBase):
    """Immutable flags for a word count run.

    >>> JobConfig()
    JobConfig(case_sensitive=False, use_skip_patterns=True, use_stop_words=True)
    >>> JobConfig().with_properties({'wordcount.case.sensitive': 'TRUE'})
    JobConfig(case_sensitive=True, use_skip_patterns=True, use_stop_words=True)
    >>>
    """
    __slots__ = ()

    def __new__(cls, case_sensitive=False, use_skip_patterns=True,
            use_stop_words=True):
        return super(JobConfig, cls).__new__(cls, case_sensitive,
                use_skip_patterns, use_stop_words)

    def with_properties(self, properties):
        """Returns a copy with `wordcount.*` properties applied.

        Boolean values are parsed the way Hadoop's Configuration does: "true"
        and "false" in any case, anything else keeps the current value.
        Unknown property names are ignored with a warning.
        """
        updates = {}
        for name, value in properties.items():
            field = PROPERTY_FIELDS.get(name)
            if field is None:
                logger.warning('Ignoring unknown property: %s' % name)
                continue
            updates[field] = parse_bool(value, getattr(self, field))
        return self._replace(**updates)


def parse_bool(value, default):
    text = str(value).strip().lower()
    if text == 'true':
        return True
    elif text == 'false':
        return False
    logger.warning('Invalid boolean value %r; using %s' % (value, default))
    return default


def parse_property(text):
    """Parses a NAME=VALUE string as given to -D.

    >>> parse_property('wordcount.skip.patterns=false')
    ('wordcount.skip.patterns', 'false')
    >>>
    """
    name, sep, value = text.partition('=')
    if not sep or not name:
        raise ValueError('Property must be given as NAME=VALUE: %r' % text)
    return name.strip(), value

# vim: et sw=4 sts=4
