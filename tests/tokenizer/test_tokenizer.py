from mrcount.filters import FilterSet
from mrcount import tokenizer


def tokens(line, stop_words=(), case_sensitive=False):
    filters = FilterSet(stop_words=stop_words)
    return list(tokenizer.tokenize(line, filters, case_sensitive))


def test_stop_words_are_removed():
    assert tokens("The cat and the dog", ['the', 'and']) == ['cat', 'dog']


def test_stop_words_match_case_insensitively():
    assert tokens("The cat", ['the'], case_sensitive=True) == ['cat']


def test_internal_apostrophe_kept():
    assert tokens("don't stop") == ["don't", 'stop']


def test_edge_apostrophes_removed():
    assert tokens("'quoted' dogs' o'er") == ['quoted', 'dogs', "o'er"]


def test_punctuation_stripped():
    assert tokens("Hello, world!!") == ['hello', 'world']


def test_punctuation_between_spaces():
    assert tokens("a , b") == ['a', 'b']
    assert tokens("a ,b") == ['a', 'b']
    assert tokenizer.normalize("a , b") == 'a b'


def test_digits_are_not_words():
    assert tokens("route 66 west") == ['route', 'west']
    assert tokens("abc123def") == ['abc', 'def']


def test_case_toggle():
    assert tokens("Cat cat") == ['cat', 'cat']
    assert tokens("Cat cat", case_sensitive=True) == ['Cat', 'cat']


def test_non_ascii_letters_stripped():
    assert tokens(u"caf\xe9 ol\xe9") == ['caf', 'ol']


def test_consecutive_whitespace_gives_empty_tokens():
    assert tokens("a  b") == ['a', '', 'b']
    assert tokens("\ta") == ['', 'a']


def test_trailing_whitespace_dropped():
    assert tokens("a b   ") == ['a', 'b']
    assert tokens("   ") == []


def test_empty_line():
    assert tokens("") == ['']


def test_skip_patterns_ignored():
    filters = FilterSet(skip_patterns=['cat', r'\w+'], stop_words=[])
    assert list(tokenizer.tokenize("cat dog", filters)) == ['cat', 'dog']


def test_normalize():
    assert tokenizer.normalize("A-B") == 'a b'
    assert tokenizer.normalize("A - B") == 'a b'
    assert tokenizer.normalize("Rock'n'Roll!", True) == "Rock'n'Roll "

# vim: et sw=4 sts=4
