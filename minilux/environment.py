from typing import Any, Dict, Optional

from minilux.errors import UndefinedVariable, TypeMismatch
from minilux.values import ArrayVal, copy_value, type_name


class Environment:
    """A scope mapping variable names to their values.

    The global scope has no parent. A function activation gets a fresh
    scope whose parent is the global scope: lookups fall back to globals,
    but every write stays in the activation.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def get(self, name: str) -> Any:
        if name in self.values:
            return self.values[name]
        if self.parent:
            return self.parent.get(name)
        raise UndefinedVariable(f'undefined variable ${name}')

    def set(self, name: str, value: Any):
        self.values[name] = value

    def has(self, name: str) -> bool:
        if name in self.values:
            return True
        return self.parent.has(name) if self.parent else False

    def has_local(self, name: str) -> bool:
        return name in self.values

    def array(self, name: str) -> ArrayVal:
        """Return the Array bound to ``name`` in this scope for in-place mutation.

        An Array only visible through the parent is first copied into this
        scope, so the mutation never reaches the global binding.
        """
        value = self.get(name)
        if not isinstance(value, ArrayVal):
            raise TypeMismatch(f'${name} is {type_name(value)}, not Array')
        if name not in self.values:
            value = copy_value(value)
            self.values[name] = value
        return value
