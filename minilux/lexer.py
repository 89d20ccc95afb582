"""Tokenizer for the Minilux language.

The lexer turns source text into a flat list of immutable tokens. It
recognizes variables (``$name``), identifiers and keywords, integer
literals, double-quoted strings, regex literals (``/pattern/flags``),
substitution literals (``s/pattern/replacement/flags``), operators and
punctuation. Whitespace is skipped and ``#`` starts a comment that runs to
the end of the line, which also takes care of a leading shebang line.

String bodies are kept in their raw source form (escapes validated but not
decoded) so the parser can split them into interpolation segments without
confusing an escaped ``\\$`` with a variable reference.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import LexError


@dataclass(frozen=True)
class Token:
    type: str
    value: str
    line: int
    column: int
    flags: str = ''
    replacement: Optional[str] = None


KEYWORDS = {
    'if', 'elseif', 'else', 'while', 'function', 'return', 'AND', 'OR',
    'push', 'pop', 'shift', 'unshift', 'inc', 'dec',
}

TWO_CHAR_OPS = {'==', '!=', '>=', '<=', '=~', '&&', '||'}
SINGLE_CHAR_OPS = {'=', '<', '>', '+', '-', '*', '/', '%', '!', '(', ')', '{', '}', '[', ']', ','}

# Token types after which a '/' is division rather than the start of a regex.
OPERAND_END = {'INT', 'STRING', 'VAR', 'IDENT', 'REGEX', 'SUBST', ')', ']'}

STRING_ESCAPES = {'n', 't', '\\', '"', '$'}

INT64_MAX = 2 ** 63 - 1
DIGITS = '0123456789'


def is_ident_start(c: str) -> bool:
    return c.isalpha() or c == '_'


def is_ident_char(c: str) -> bool:
    return c.isalnum() or c == '_'


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens.

    Raises LexError with the offending line and column on an unterminated
    string or regex, an invalid escape sequence, an out-of-range integer or
    a character that cannot start any token.
    """
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    length = len(source)

    def advance(n: int = 1):
        nonlocal i, col, line
        for _ in range(n):
            if i < length and source[i] == '\n':
                line += 1
                col = 1
            else:
                col += 1
            i += 1

    def scan_delimited(what: str, start_line: int, start_col: int) -> str:
        # Reads up to the next unescaped '/', which is consumed. '\/' yields a
        # literal slash; every other escape passes through untouched.
        chars: List[str] = []
        while i < length:
            ch = source[i]
            if ch == '\n':
                break
            if ch == '\\' and i + 1 < length and source[i + 1] != '\n':
                nxt = source[i + 1]
                chars.append('/' if nxt == '/' else '\\' + nxt)
                advance(2)
                continue
            if ch == '/':
                advance()
                return ''.join(chars)
            chars.append(ch)
            advance()
        raise LexError(f"unterminated {what}", start_line, start_col)

    def scan_flags() -> str:
        start = i
        while i < length and source[i].isalpha():
            advance()
        return source[start:i]

    def previous_type() -> Optional[str]:
        return tokens[-1].type if tokens else None

    while i < length:
        c = source[i]
        if c.isspace():
            advance()
            continue
        # Comments, including the shebang line
        if c == '#':
            while i < length and source[i] != '\n':
                advance()
            continue
        start_line, start_col = line, col
        # Substitution literal: s/pattern/replacement/flags
        if c == 's' and i + 1 < length and source[i + 1] == '/':
            advance(2)
            pattern = scan_delimited('substitution pattern', start_line, start_col)
            replacement = scan_delimited('substitution replacement', start_line, start_col)
            flags = scan_flags()
            tokens.append(Token('SUBST', pattern, start_line, start_col, flags, replacement))
            continue
        # Identifiers and keywords
        if is_ident_start(c):
            start_i = i
            while i < length and is_ident_char(source[i]):
                advance()
            value = source[start_i:i]
            kind = 'KEYWORD' if value in KEYWORDS else 'IDENT'
            tokens.append(Token(kind, value, start_line, start_col))
            continue
        # Variables
        if c == '$':
            if i + 1 < length and is_ident_start(source[i + 1]):
                advance()
                start_i = i
                while i < length and is_ident_char(source[i]):
                    advance()
                tokens.append(Token('VAR', source[start_i:i], start_line, start_col))
                continue
            raise LexError("expected variable name after '$'", start_line, start_col)
        # Integers
        if c in DIGITS:
            start_i = i
            while i < length and source[i] in DIGITS:
                advance()
            value = source[start_i:i]
            if int(value) > INT64_MAX:
                raise LexError(f"integer literal {value} out of range", start_line, start_col)
            tokens.append(Token('INT', value, start_line, start_col))
            continue
        # Strings
        if c == '"':
            advance()
            start_i = i
            while i < length:
                ch = source[i]
                if ch == '\\':
                    if i + 1 >= length or source[i + 1] not in STRING_ESCAPES:
                        bad = source[i + 1] if i + 1 < length else ''
                        raise LexError(f"invalid escape sequence '\\{bad}'", line, col)
                    advance(2)
                    continue
                if ch == '"':
                    break
                advance()
            else:
                raise LexError("unterminated string literal", start_line, start_col)
            value = source[start_i:i]
            advance()  # closing quote
            tokens.append(Token('STRING', value, start_line, start_col))
            continue
        # Regex literal, unless the slash follows an operand (division)
        if c == '/' and previous_type() not in OPERAND_END:
            advance()
            pattern = scan_delimited('regex literal', start_line, start_col)
            flags = scan_flags()
            tokens.append(Token('REGEX', pattern, start_line, start_col, flags))
            continue
        if i + 1 < length:
            pair = source[i:i + 2]
            if pair in TWO_CHAR_OPS:
                tokens.append(Token(pair, pair, start_line, start_col))
                advance(2)
                continue
        if c in SINGLE_CHAR_OPS:
            tokens.append(Token(c, c, start_line, start_col))
            advance()
            continue
        raise LexError(f"unexpected character {c!r}", start_line, start_col)
    return tokens


def decode_escape(raw: str, pos: int) -> Tuple[str, int]:
    """Decode the string escape starting at ``raw[pos]`` (a backslash).

    Returns the decoded character and the index just past the escape.
    """
    code = raw[pos + 1]
    if code == 'n':
        return '\n', pos + 2
    if code == 't':
        return '\t', pos + 2
    return code, pos + 2
