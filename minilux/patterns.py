"""Regex support for Minilux.

Regex literals (``/pattern/flags``) and substitution literals
(``s/pattern/replacement/flags``) both compile to a ``CompiledRegex``. The
same object answers ``=~`` matches and, when it carries a replacement
template, is callable on a Text to produce the substituted Text.

Flags: ``i`` ignore case, ``m`` multi-line anchors, ``s`` dot matches
newline, ``g`` replace every match instead of only the first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from .errors import RegexCompileError

FLAG_BITS = {
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
}
VALID_FLAGS = set(FLAG_BITS) | {'g'}
DIGITS = '0123456789'


@dataclass(frozen=True)
class CompiledRegex:
    source: str
    flags: str
    replacement: Optional[str] = None
    compiled: re.Pattern = field(default=None, compare=False, repr=False)

    @property
    def is_substitution(self) -> bool:
        return self.replacement is not None

    @property
    def is_global(self) -> bool:
        return 'g' in self.flags

    def matches(self, text: str) -> bool:
        return self.compiled.search(text) is not None

    def substitute(self, text: str) -> str:
        """Replace the first match (every match with ``g``) in ``text``."""
        pieces = []
        last = 0
        for m in self.compiled.finditer(text):
            pieces.append(text[last:m.start()])
            pieces.append(self.expand(m))
            last = m.end()
            if not self.is_global:
                break
        if not pieces:
            return text
        pieces.append(text[last:])
        return ''.join(pieces)

    def expand(self, m: re.Match) -> str:
        # $N is capture group N ($0 the whole match); groups that did not
        # take part, or do not exist, expand to nothing.
        template = self.replacement or ''
        out = []
        i = 0
        while i < len(template):
            ch = template[i]
            if ch == '$' and i + 1 < len(template) and template[i + 1] in DIGITS:
                j = i + 1
                while j < len(template) and template[j] in DIGITS:
                    j += 1
                group = int(template[i + 1:j])
                if group <= self.compiled.groups:
                    out.append(m.group(group) or '')
                i = j
                continue
            out.append(ch)
            i += 1
        return ''.join(out)

    def __str__(self) -> str:
        if self.is_substitution:
            return f"s/{self.source}/{self.replacement}/{self.flags}"
        return f"/{self.source}/"


def compile_regex(source: str, flags: str = '', replacement: Optional[str] = None) -> CompiledRegex:
    """Compile a pattern and its flag letters into a CompiledRegex.

    Raises RegexCompileError for an unknown flag letter or a pattern the
    regex engine rejects.
    """
    bits = 0
    for letter in flags:
        if letter not in VALID_FLAGS:
            raise RegexCompileError(f"unknown regex flag {letter!r} in /{source}/")
        bits |= FLAG_BITS.get(letter, 0)
    try:
        compiled = re.compile(source, bits)
    except re.error as e:
        raise RegexCompileError(f"invalid regex /{source}/: {e}")
    return CompiledRegex(source, flags, replacement, compiled)
