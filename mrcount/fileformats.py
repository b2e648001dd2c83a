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

"""Input splits, line readers and text writers."""

from collections import namedtuple
import io
import os

DEFAULT_SPLIT_SIZE = 64 * 1024 * 1024
OUTPUT_PREFIX = 'part-r-'

InputSplit = namedtuple('InputSplit', ('path', 'start', 'end'))


def expand_paths(paths):
    """Returns the input files named by a list of files and directories.

    Directories contribute their regular files, skipping names that start
    with '.' or '_' (such as _SUCCESS markers).  A path that does not exist
    raises IOError.
    """
    files = []
    for path in paths:
        if os.path.isdir(path):
            for name in sorted(os.listdir(path)):
                full = os.path.join(path, name)
                if name[0] in '._' or not os.path.isfile(full):
                    continue
                files.append(full)
        elif os.path.isfile(path):
            files.append(path)
        else:
            raise IOError('Input path does not exist: %s' % path)
    return files


def input_splits(paths, split_size=DEFAULT_SPLIT_SIZE):
    """Divides the input files into byte ranges of at most split_size.

    Every file, even an empty one, gets at least one split.
    """
    if split_size < 1:
        raise ValueError('split_size must be positive')
    splits = []
    for path in expand_paths(paths):
        size = os.path.getsize(path)
        start = 0
        while True:
            end = min(start + split_size, size)
            splits.append(InputSplit(path, start, end))
            start = end
            if start >= size:
                break
    return splits


class LineReader(object):
    """Reads (offset, line) pairs from one input split.

    A line belongs to the split that contains its first byte, so a set of
    adjacent splits reads every line of the file exactly once.  Keys are
    byte offsets.  Values are decoded as UTF-8 (invalid bytes are replaced
    with u'\\ufffd') and have their line terminator removed.
    """
    def __init__(self, split):
        self.split = split

    def __iter__(self):
        path, start, end = self.split
        with open(path, 'rb') as f:
            if start > 0:
                # Back up one byte so that a line starting exactly at `start`
                # is not mistaken for the tail of the previous line.
                f.seek(start - 1)
                f.readline()
            offset = f.tell()
            while offset < end:
                data = f.readline()
                if not data:
                    break
                yield offset, decode_line(data)
                offset = f.tell()


def decode_line(data):
    if data.endswith(b'\n'):
        data = data[:-1]
        if data.endswith(b'\r'):
            data = data[:-1]
    return data.decode('utf-8', 'replace')


def output_filename(index):
    """Returns the name of the output file of a reduce task.

    >>> output_filename(3)
    'part-r-00003'
    >>>
    """
    return '%s%05d' % (OUTPUT_PREFIX, index)


class TextWriter(object):
    """Writes key-value pairs as tab-separated UTF-8 text, one per line.

    The writer closes the file when used as a context manager.
    """

    def __init__(self, fileobj):
        self.fileobj = io.TextIOWrapper(fileobj, encoding='utf-8',
                newline='\n')

    @classmethod
    def open(cls, path):
        return cls(open(path, 'wb'))

    def writepair(self, kvpair):
        key, value = kvpair
        self.fileobj.write('%s\t%s\n' % (key, value))

    def close(self):
        self.fileobj.close()

    def __enter__(self):
        return self

    def __exit__(self, type, value, traceback):
        self.close()


class TextReader(object):
    """Reads the (key, value) pairs written by a TextWriter.

    Values are returned as strings.
    """
    def __init__(self, path):
        self.path = path

    def __iter__(self):
        with open(self.path, encoding='utf-8', newline='\n') as f:
            for line in f:
                key, _, value = line.rstrip('\n').rpartition('\t')
                yield key, value

# vim: et sw=4 sts=4
