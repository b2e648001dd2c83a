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

"""Word count with stop words and case folding.

Usage looks something like this:

    python -m mrcount --skip-stop-words stopwords.txt INPUT... OUTPUT_DIR
"""

from . import aggregate
from . import config
from . import filters
from . import mapreduce
from . import param
from . import tokenizer
from .main import main
from .param import Param, ParamObj

COUNTER_GROUP = 'WordCount'
INPUT_WORDS = 'INPUT_WORDS'


class Mapper(object):
    """Turns lines into (word, 1) pairs.

    The filters and configuration are fixed for the life of the mapper.
    Every emitted pair increments the INPUT_WORDS counter.
    """
    def __init__(self, filter_set, job_config, counters):
        self.filters = filter_set
        self.config = job_config
        self.counters = counters

    def process_record(self, line):
        case_sensitive = self.config.case_sensitive
        for token in tokenizer.tokenize(line, self.filters, case_sensitive):
            self.counters.increment(COUNTER_GROUP, INPUT_WORDS)
            yield token, 1


class WordCountParams(ParamObj):
    _params = dict(
        case_sensitive=Param(type='bool',
            doc='Count words with different case separately'),
        skip_patterns=Param(type='bool', default=True,
            doc='Load the skip-pattern file'),
        stop_words=Param(type='bool', default=True,
            doc='Drop the words listed in the stop-word file'),
        )


class WordCount(mapreduce.MapReduce):
    """Count the occurrences of each word in a set of documents.

    Lines are case folded (unless --case-sensitive is given), stripped of
    everything but letters and apostrophes, and filtered against the
    stop-word file.  The stop-word and skip-pattern files are loaded once in
    each worker process.
    """
    def __init__(self, opts, args):
        super(WordCount, self).__init__(opts, args)
        self.config = job_config(opts)
        self.skip_path = getattr(opts, 'skip', None)
        self.stop_words_path = getattr(opts, 'skip_stop_words', None)
        self.filters = filters.EMPTY_FILTERS
        self.mapper = None

    def setup(self):
        self.filters = filters.load(self.skip_path, self.stop_words_path,
                self.config)

    def task_setup(self, counters):
        super(WordCount, self).task_setup(counters)
        self.mapper = Mapper(self.filters, self.config, counters)

    def map(self, key, line):
        return self.mapper.process_record(line)

    def reduce(self, word, counts):
        word, total = aggregate.sum_counts(word, counts)
        yield total

    def combine_table(self):
        return aggregate.SumTable()

    @classmethod
    def update_parser(cls, parser):
        parser = super(WordCount, cls).update_parser(parser)
        parser.add_option('--skip', dest='skip', metavar='FILE',
                help='File of skip patterns (loaded but not applied)')
        parser.add_option('--skip-stop-words', dest='skip_stop_words',
                metavar='FILE', help='File of stop words, one per line')
        parser.add_option('-D', dest='properties', metavar='NAME=VALUE',
                action='append',
                help='Set a wordcount.* property, e.g. '
                    'wordcount.case.sensitive=true')
        for attr, p in sorted(WordCountParams._params.items()):
            param.add_param_option(parser, attr, p)
        return parser


def run(args=None):
    """Runs the WordCount program from the command line."""
    main(WordCount, args)


def job_config(opts):
    """Builds the JobConfig from parsed options.

    The -D properties are applied after the flags, so they win.
    """
    defaults = config.JobConfig()
    job_conf = config.JobConfig(
        case_sensitive=getattr(opts, 'case_sensitive',
            defaults.case_sensitive),
        use_skip_patterns=getattr(opts, 'skip_patterns',
            defaults.use_skip_patterns),
        use_stop_words=getattr(opts, 'stop_words', defaults.use_stop_words))
    properties = dict(config.parse_property(text)
            for text in (getattr(opts, 'properties', None) or []))
    return job_conf.with_properties(properties)

# vim: et sw=4 sts=4
