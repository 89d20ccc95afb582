from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from minilux.errors import ArityMismatch, UnknownFunction


@dataclass
class BuiltinFunction:
    name: str
    arity: Optional[int]  # None means variadic
    fn: Callable[[List[Any]], Any]

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


@dataclass
class BuiltinTable:
    """Routes calls to runtime-implemented functions by name."""
    functions: Dict[str, BuiltinFunction] = field(default_factory=dict)

    def register(self, builtin: BuiltinFunction):
        self.functions[builtin.name] = builtin

    def update(self, other: 'BuiltinTable'):
        self.functions.update(other.functions)

    def __contains__(self, name: str) -> bool:
        return name in self.functions

    def dispatch(self, name: str, args: List[Any]) -> Any:
        builtin = self.functions.get(name)
        if builtin is None:
            raise UnknownFunction(f"unknown function {name}")
        if builtin.arity is not None and len(args) != builtin.arity:
            raise ArityMismatch(f"{name} expects {builtin.arity} arguments, got {len(args)}")
        return builtin.fn(args)
