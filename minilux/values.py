"""Runtime values for Minilux.

A Minilux value is one of four kinds, represented directly by Python
objects:

* Integer -- ``int`` (never ``bool``), kept within signed 64-bit range
* Text    -- ``str``
* Array   -- ``ArrayVal``, a mutable list of values
* Regex   -- ``CompiledRegex`` from ``minilux.patterns``

Comparisons and logical operators produce a Python ``bool``. Those are
conditions, not values: they drive ``if``/``while`` and never end up in a
variable or in output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from .patterns import CompiledRegex

INT_BITS = 64
INT_MIN = -(2 ** (INT_BITS - 1))
INT_MAX = 2 ** (INT_BITS - 1) - 1


@dataclass
class ArrayVal:
    """An ordered, growable sequence of values.

    Arrays bound to a variable are mutated in place by ``push``, ``pop``,
    ``shift``, ``unshift`` and element assignment; everything else works on
    copies (see ``copy_value``).
    """
    items: List[Any] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return f"Array({self.items!r})"


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def wrap_int(n: int) -> int:
    """Wrap an arbitrary Python int into signed 64-bit range."""
    n &= (1 << INT_BITS) - 1
    if n > INT_MAX:
        n -= 1 << INT_BITS
    return n


def type_name(value: Any) -> str:
    if isinstance(value, bool):
        return 'Condition'
    if isinstance(value, int):
        return 'Integer'
    if isinstance(value, str):
        return 'Text'
    if isinstance(value, ArrayVal):
        return 'Array'
    if isinstance(value, CompiledRegex):
        return 'Regex'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Render a value the way print, printf and interpolation show it."""
    if isinstance(value, str):
        return value
    if is_integer(value):
        return str(value)
    if isinstance(value, ArrayVal):
        return f"[Array({len(value.items)})]"
    if isinstance(value, CompiledRegex):
        return str(value)
    return str(value)


def copy_value(value: Any) -> Any:
    """Copy a value for storage so that no two variables share an Array."""
    if isinstance(value, ArrayVal):
        return ArrayVal([copy_value(item) for item in value.items])
    return value


def is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0
    if isinstance(value, ArrayVal):
        return len(value.items) > 0
    return True
