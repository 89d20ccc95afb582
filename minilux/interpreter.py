"""Tree-walking interpreter for the Minilux language.

The interpreter runs a parsed ``Program`` in two passes: every top-level
function definition is registered first, then the top-level statements
execute in order against the global scope. Statement execution returns
``None`` to continue or a ``ReturnSignal`` to unwind to the enclosing
function call. Any ``MiniluxError`` aborts the program.
"""

from __future__ import annotations

from typing import Any, List, Optional

from .ast import (
    Program, Block, FuncDecl, IfStmt, WhileStmt, Assign, IndexAssign,
    ReturnStmt, IncDec, ArrayMutation, ReadStmt, SocketStmt, ExprStmt,
    Literal, Interpolation, Variable, ArrayLit, Index, UnaryOp, BinaryOp,
    Call, RegexLit, Apply, Node,
)
from .environment import Environment
from .errors import (
    MiniluxError, MiniluxRuntimeError, ReturnSignal, TypeMismatch,
    IndexOutOfBounds, ArrayUnderflow, DivisionByZero, UnknownFunction,
    ArityMismatch,
)
from .parser import parse_program
from .patterns import CompiledRegex
from .runtime import Runtime
from .std.io import BasicIO
from .values import (
    ArrayVal, copy_value, is_integer, is_truthy, to_string, type_name, wrap_int,
)

# Value returned by a function that ends without `return <expr>`.
EMPTY = ''


class Interpreter:
    """Core interpreter that executes Minilux ASTs."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt', basic_io: Optional[BasicIO] = None):
        self.runtime = Runtime(basic_io)
        self.global_env = self.runtime.globals
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> Any:
        if env is None:
            env = self.global_env
        self.load_functions(program)
        try:
            self.execute_block(program.body, env)
        except RecursionError:
            raise MiniluxRuntimeError('maximum recursion depth exceeded', kind='RecursionError')
        return None

    def close(self):
        self.runtime.close()
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def __enter__(self) -> 'Interpreter':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def load_functions(self, program: Program):
        for stmt in program.body:
            if isinstance(stmt, FuncDecl):
                self.runtime.define_function(stmt)
                if self.debug_level >= 2:
                    self.debug(f"define function {stmt.name}({', '.join('$' + p for p in stmt.params)})")

    def execute_block(self, statements: List[Node], env: Environment) -> Any:
        for stmt in statements:
            try:
                result = self.execute(stmt, env)
            except MiniluxError as e:
                e.locate(stmt.line, stmt.column)
                raise
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Node, env: Environment) -> Any:
        if isinstance(node, Assign):
            value = copy_value(self.value(node.value, env))
            env.set(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"assign ${node.name} = {value!r}")
            return None
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr, env)
            return None
        if isinstance(node, IfStmt):
            for condition, block in node.branches:
                truthy = self.test(condition, env)
                if self.debug_level >= 3:
                    self.debug(f"if condition at line {condition.line} -> {truthy}")
                if truthy:
                    return self.execute_block(block.statements, env)
            if node.else_block is not None:
                return self.execute_block(node.else_block.statements, env)
            return None
        if isinstance(node, WhileStmt):
            while True:
                truthy = self.test(node.condition, env)
                if self.debug_level >= 3:
                    self.debug(f"while condition at line {node.line} -> {truthy}")
                if not truthy:
                    break
                res = self.execute_block(node.body.statements, env)
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, ReturnStmt):
            value = self.value(node.value, env) if node.value is not None else EMPTY
            return ReturnSignal(value)
        if isinstance(node, IncDec):
            current = env.get(node.name)
            amount = self.value(node.amount, env)
            if not is_integer(current) or not is_integer(amount):
                raise TypeMismatch(f"{node.op} needs Integer operands, got {type_name(current)} and {type_name(amount)}")
            result = current + amount if node.op == 'inc' else current - amount
            env.set(node.name, wrap_int(result))
            return None
        if isinstance(node, ArrayMutation):
            self.mutate_array(node, env)
            return None
        if isinstance(node, IndexAssign):
            array = env.array(node.name)
            position = self.position(node.index, len(array.items), env)
            array.items[position] = copy_value(self.value(node.value, env))
            return None
        if isinstance(node, ReadStmt):
            env.set(node.name, self.runtime.io.read_line())
            return None
        if isinstance(node, SocketStmt):
            args = [self.value(arg, env) for arg in node.args]
            result = self.runtime.builtins.dispatch(node.op, args)
            if node.target is not None:
                env.set(node.target, result)
            return None
        if isinstance(node, Block):
            return self.execute_block(node.statements, env)
        if isinstance(node, FuncDecl):
            # registered before execution started
            return None
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def value(self, node: Node, env: Environment) -> Any:
        """Evaluate an expression whose result must be a storable value."""
        result = self.evaluate(node, env)
        if isinstance(result, bool):
            raise TypeMismatch("the result of a comparison is not a value")
        return result

    def test(self, node: Node, env: Environment) -> bool:
        """Evaluate an expression used as a condition."""
        return is_truthy(self.evaluate(node, env))

    def evaluate(self, node: Node, env: Environment) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            return env.get(node.name)
        if isinstance(node, BinaryOp):
            if node.op == 'AND':
                return self.test(node.left, env) and self.test(node.right, env)
            if node.op == 'OR':
                return self.test(node.left, env) or self.test(node.right, env)
            left = self.value(node.left, env)
            right = self.value(node.right, env)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Call):
            args = [self.value(arg, env) for arg in node.args]
            return self.call_function(node.name, args)
        if isinstance(node, Interpolation):
            return ''.join(to_string(self.value(part, env)) for part in node.parts)
        if isinstance(node, ArrayLit):
            return ArrayVal([copy_value(self.value(el, env)) for el in node.elements])
        if isinstance(node, Index):
            target = self.value(node.target, env)
            if isinstance(target, ArrayVal):
                return target.items[self.position(node.index, len(target.items), env)]
            if isinstance(target, str):
                return target[self.position(node.index, len(target), env)]
            raise TypeMismatch(f'cannot index {type_name(target)}')
        if isinstance(node, UnaryOp):
            if node.op == '!':
                return not self.test(node.operand, env)
            operand = self.value(node.operand, env)
            if not is_integer(operand):
                raise TypeMismatch(f'unary - expects Integer, got {type_name(operand)}')
            return wrap_int(-operand)
        if isinstance(node, RegexLit):
            return node.regex
        if isinstance(node, Apply):
            callee = self.value(node.callee, env)
            if not isinstance(callee, CompiledRegex) or not callee.is_substitution:
                raise TypeMismatch(f'{type_name(callee)} is not a substitution')
            text = self.value(node.arg, env)
            if not isinstance(text, str):
                raise TypeMismatch(f'substitution expects Text, got {type_name(text)}')
            return callee.substitute(text)
        if isinstance(node, ArrayMutation):
            return self.mutate_array(node, env)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def position(self, index_node: Node, length: int, env: Environment) -> int:
        index = self.value(index_node, env)
        if not is_integer(index):
            raise TypeMismatch(f'index must be Integer, got {type_name(index)}')
        if index < 0 or index >= length:
            raise IndexOutOfBounds(f'index {index} out of range for length {length}')
        return index

    def mutate_array(self, node: ArrayMutation, env: Environment) -> Any:
        if node.op in ('push', 'unshift'):
            value = copy_value(self.value(node.value, env))
            if not env.has(node.name):
                env.set(node.name, ArrayVal([value]))
                return None
            array = env.array(node.name)
            if node.op == 'push':
                array.items.append(value)
            else:
                array.items.insert(0, value)
            return None
        array = env.array(node.name)
        if not array.items:
            raise ArrayUnderflow(f'{node.op} on empty array ${node.name}')
        return array.items.pop() if node.op == 'pop' else array.items.pop(0)

    def call_function(self, name: str, args: List[Any]) -> Any:
        func = self.runtime.get_function(name)
        if func is not None:
            return self.call_user_function(func, args)
        if name in self.runtime.builtins:
            return self.runtime.builtins.dispatch(name, args)
        raise UnknownFunction(f'unknown function {name}')

    def call_user_function(self, func: FuncDecl, args: List[Any]) -> Any:
        if len(args) != len(func.params):
            raise ArityMismatch(f"{func.name} expects {len(func.params)} arguments, got {len(args)}")
        call_env = Environment(parent=self.global_env)
        for param, arg in zip(func.params, args):
            call_env.set(param, copy_value(arg))
        if self.debug_level >= 1:
            self.debug(f"call {func.name}({', '.join(repr(a) for a in args)})")
        res = self.execute_block(func.body.statements, call_env)
        ret_val = res.value if isinstance(res, ReturnSignal) else EMPTY
        if self.debug_level >= 1:
            self.debug(f"return {func.name} -> {ret_val!r}")
        return ret_val

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op in ('+', '-', '*', '/', '%'):
            if not is_integer(a) or not is_integer(b):
                raise TypeMismatch(f'unsupported {op} for {type_name(a)} and {type_name(b)}')
            if op == '+':
                return wrap_int(a + b)
            if op == '-':
                return wrap_int(a - b)
            if op == '*':
                return wrap_int(a * b)
            if b == 0:
                raise DivisionByZero('division by zero' if op == '/' else 'modulo by zero')
            # truncate toward zero; the remainder takes the dividend's sign
            quotient = abs(a) // abs(b)
            if (a < 0) != (b < 0):
                quotient = -quotient
            if op == '/':
                return wrap_int(quotient)
            return wrap_int(a - b * quotient)
        if op in ('==', '!=', '<', '>', '<=', '>='):
            if not ((is_integer(a) and is_integer(b)) or (isinstance(a, str) and isinstance(b, str))):
                raise TypeMismatch(f'cannot compare {type_name(a)} with {type_name(b)}')
            if op == '==':
                return a == b
            if op == '!=':
                return a != b
            if op == '<':
                return a < b
            if op == '>':
                return a > b
            if op == '<=':
                return a <= b
            return a >= b
        if op == '=~':
            if not isinstance(a, str):
                raise TypeMismatch(f'=~ expects Text on the left, got {type_name(a)}')
            if not isinstance(b, CompiledRegex):
                raise TypeMismatch(f'=~ expects a Regex on the right, got {type_name(b)}')
            return b.matches(a)
        raise TypeMismatch(f'unknown operator {op}')


def run_program(source: str, debug_level: int = 0, basic_io: Optional[BasicIO] = None) -> Interpreter:
    """Parse and run a Minilux program from a source string.

    Returns the interpreter so callers can inspect the global scope.
    """
    ast_program = parse_program(source)
    with Interpreter(debug_level=debug_level, basic_io=basic_io) as interpreter:
        interpreter.run(ast_program)
    return interpreter


def compile_module(file_path: str, debug_level: int = 0) -> Interpreter:
    """Compile and execute a Minilux file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level)
