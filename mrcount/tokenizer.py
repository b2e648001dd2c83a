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

"""Line tokenizer for word counting.

A line is case folded (unless case matters), stripped of everything but
letters, apostrophes and whitespace, cleaned of apostrophes that hang off the
edge of a word, and split on single whitespace characters.  Tokens found in
the stop-word set are dropped.

Each run of stripped characters becomes one whitespace character, taken
from the whitespace around the run when there is any, so punctuation next
to a space does not leave an empty token behind.  This differs from turning
each run into a plain space, which would make "a , b" give an empty token on
each side of the comma.

>>> from mrcount.filters import FilterSet
>>> list(tokenize("Hello, world!!", FilterSet()))
['hello', 'world']
>>> list(tokenize("'Tis the sailors' don't", FilterSet(stop_words=['the'])))
['tis', 'sailors', "don't"]
>>>
"""

import re

# The ASCII flag keeps \s, \b and \B to their ASCII meanings.
NON_WORD_RUN = re.compile(r"(\s?)[^a-zA-Z'\s]+(\s?)", re.ASCII)
EDGE_APOSTROPHE = re.compile(r"\B'\b|\b'\B", re.ASCII)
WHITESPACE = re.compile(r'\s', re.ASCII)


def _separator(match):
    return match.group(1) or match.group(2) or ' '


def normalize(line, case_sensitive=False):
    """Applies case folding and character normalization to a line.

    >>> normalize("It's 10 o'clock, Jim.")
    "it's o'clock jim "
    >>>
    """
    if not case_sensitive:
        line = line.lower()
    line = NON_WORD_RUN.sub(_separator, line)
    return EDGE_APOSTROPHE.sub('', line)


def split(line):
    """Splits on every single whitespace character.

    Runs of whitespace give empty tokens.  Empty tokens at the end of the
    line are dropped, but a line with no whitespace is always returned as a
    single token, even if it is empty.

    >>> split('a  b')
    ['a', '', 'b']
    >>> split(' a  ')
    ['', 'a']
    >>> split('')
    ['']
    >>> split('   ')
    []
    >>>
    """
    tokens = WHITESPACE.split(line)
    if len(tokens) > 1:
        while tokens and not tokens[-1]:
            tokens.pop()
    return tokens


def tokenize(line, filters, case_sensitive=False):
    """Yields the accepted tokens of a line, in order.

    The skip patterns in `filters` have no effect here.
    """
    stop_words = filters.stop_words
    for token in split(normalize(line, case_sensitive)):
        if token.lower() in stop_words:
            continue
        yield token

# vim: et sw=4 sts=4
