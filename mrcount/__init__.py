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

"""mrcount: word counting with MapReduce

Run the word count job from the command line:

    python -m mrcount --skip-stop-words stop.txt INPUT... OUTPUT_DIR

or write your own program in the same framework:

import mrcount

class Program(mrcount.MapReduce):
    def map(self, key, value):
        yield newkey, newvalue

    def reduce(self, key, values):
        yield newvalue

if __name__ == '__main__':
    mrcount.main(Program)
"""

# Set up the default logging configuration.
import logging, sys
logger = logging.getLogger('mrcount')
logger.setLevel(logging.WARNING)
handler = logging.StreamHandler(sys.stderr)
format = '%(asctime)s: %(levelname)s: %(message)s'
formatter = logging.Formatter(format)
handler.setFormatter(formatter)
logger.addHandler(handler)

from . import version
from .aggregate import SumTable, sum_counts
from .config import JobConfig
from .counters import Counters
from .filters import FilterSet
from .main import main
from .mapreduce import MapReduce
from .tokenizer import tokenize
from .wordcount import Mapper, WordCount

__version__ = version.__version__

__all__ = ['MapReduce', 'WordCount', 'Mapper', 'main', 'logger',
    'tokenize', 'FilterSet', 'JobConfig', 'Counters', 'SumTable',
    'sum_counts']

# vim: et sw=4 sts=4
