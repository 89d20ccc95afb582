import pytest

from minilux.errors import RegexCompileError
from minilux.patterns import compile_regex


def test_match_searches_anywhere():
    assert compile_regex('wor').matches('hello world')
    assert not compile_regex('^wor').matches('hello world')


def test_case_insensitive_flag():
    assert compile_regex('WORLD', 'i').matches('hello world')
    assert not compile_regex('WORLD').matches('hello world')


def test_multiline_and_dotall_flags():
    assert compile_regex('^b', 'm').matches('a\nb')
    assert compile_regex('a.b', 's').matches('a\nb')


@pytest.mark.parametrize('pattern, replacement, flags, text, expected', [
    ('o', 'O', 'g', 'foo', 'fOO'),
    ('([0-9]+)', '<$1>', 'g', 'a1b22', 'a<1>b<22>'),
    ('z', 'Z', 'g', 'abc', 'abc'),
    ('o', 'O', '', 'foo', 'fOo'),
    ('(a)|(b)', '[$2]', 'g', 'ab', '[][b]'),
    ('b', '<$0$0>', '', 'abc', 'a<bb>c'),
    ('x', '$9', '', 'axb', 'ab'),
])
def test_substitute(pattern, replacement, flags, text, expected):
    assert compile_regex(pattern, flags, replacement).substitute(text) == expected


def test_rendering():
    assert str(compile_regex('a+', 'i')) == '/a+/'
    assert str(compile_regex('a', 'g', 'b')) == 's/a/b/g'
    assert compile_regex('a', 'g', 'b').is_substitution
    assert not compile_regex('a').is_substitution


def test_equal_patterns_compare_equal():
    assert compile_regex('a', 'i') == compile_regex('a', 'i')


@pytest.mark.parametrize('pattern, flags', [('(', ''), ('a', 'q')])
def test_compile_errors(pattern, flags):
    with pytest.raises(RegexCompileError):
        compile_regex(pattern, flags)
