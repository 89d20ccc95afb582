"""Parser for the Minilux language.

A recursive-descent parser over the token list produced by
``minilux.lexer.tokenize``. Expressions are parsed by precedence climbing,
from lowest to highest binding:

    OR / ||  ->  AND / &&  ->  == !=  ->  < <= > >=  ->  =~
        ->  + -  ->  * / %  ->  unary ! -  ->  postfix / primary

Conditions of ``if``, ``elseif`` and ``while`` are written inside one pair
of parentheses. A compound condition must additionally wrap each side of
AND/OR in its own parentheses::

    if (($age >= 18) AND ($name == "Alexia")) { ... }

``if ($age >= 18 AND $name == "Alexia")`` is rejected with a ParseError.

The parser either returns a complete ``Program`` or raises; no partial
tree is ever executed.
"""

from __future__ import annotations

from typing import List, Optional, Set, Union

from .ast import (
    Program, Block, FuncDecl, IfStmt, WhileStmt, Assign, IndexAssign,
    ReturnStmt, IncDec, ArrayMutation, ReadStmt, SocketStmt, ExprStmt,
    Literal, Interpolation, Variable, ArrayLit, Index, UnaryOp, BinaryOp,
    Call, RegexLit, Apply, Node,
)
from .errors import ParseError, RegexCompileError
from .lexer import Token, tokenize, decode_escape, is_ident_start, is_ident_char
from .patterns import compile_regex

TOKEN_TYPES = {'IDENT', 'VAR', 'INT', 'STRING', 'REGEX', 'SUBST', 'KEYWORD'}
LOGICAL_OPS = {'AND': 'AND', '&&': 'AND', 'OR': 'OR', '||': 'OR'}

# Builtins that bind a variable or a connection and are therefore statements.
SOCKET_ARITY = {'sockopen': 3, 'sockwrite': 2, 'sockread': 2, 'sockclose': 1}


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.functions: Set[str] = set()
        self.in_function = False
        # Names the script defines itself; those shadow read/sock* statements.
        self.user_functions = {
            tokens[k + 1].value
            for k in range(len(tokens) - 1)
            if tokens[k].type == 'KEYWORD' and tokens[k].value == 'function' and tokens[k + 1].type == 'IDENT'
        }

    # Token helpers

    def peek(self, offset: int = 0) -> Optional[Token]:
        if self.pos + offset < len(self.tokens):
            return self.tokens[self.pos + offset]
        return None

    @staticmethod
    def is_a(token: Optional[Token], expected: Union[str, List[str]]) -> bool:
        if token is None:
            return False
        options = expected if isinstance(expected, list) else [expected]
        for option in options:
            if token.type == option:
                return True
            if token.type in ('KEYWORD', 'IDENT') and token.value == option and option not in TOKEN_TYPES:
                return True
        return False

    def match(self, expected: Union[str, List[str]]) -> bool:
        return self.is_a(self.peek(), expected)

    def consume(self, expected: Union[str, List[str]]) -> Token:
        token = self.peek()
        if token is None:
            raise self.error(f"unexpected end of input, expected {describe(expected)}")
        if not self.is_a(token, expected):
            raise self.error(f"expected {describe(expected)}, got {token.value!r}", token)
        self.pos += 1
        return token

    def error(self, message: str, token: Optional[Token] = None) -> ParseError:
        if token is None:
            token = self.peek() or (self.tokens[-1] if self.tokens else None)
        if token is None:
            return ParseError(message, 1, 1)
        return ParseError(message, token.line, token.column)

    # Statements

    def parse_program(self) -> Program:
        statements: List[Node] = []
        while self.peek() is not None:
            statements.append(self.parse_statement(top_level=True))
        return Program(statements, line=1, column=1)

    def parse_statement(self, top_level: bool = False) -> Node:
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of input")
        if token.type == 'KEYWORD':
            if token.value == 'function':
                if not top_level:
                    raise self.error("functions can only be defined at the top level", token)
                return self.parse_func_decl()
            if token.value == 'if':
                return self.parse_if_stmt()
            if token.value == 'while':
                return self.parse_while_stmt()
            if token.value == 'return':
                if not self.in_function:
                    raise self.error("return outside of a function", token)
                return self.parse_return_stmt()
            if token.value in ('inc', 'dec'):
                return self.parse_inc_dec()
            if token.value in ('push', 'unshift', 'pop', 'shift'):
                return self.parse_array_mutation()
        if token.type == 'IDENT' and token.value not in self.user_functions and self.is_a(self.peek(1), '('):
            if token.value == 'read':
                return self.parse_read_stmt()
            if token.value in SOCKET_ARITY:
                return self.parse_socket_stmt()
        if token.type == '}':
            raise self.error("unexpected '}' without matching '{'", token)
        expr = self.parse_expression()
        if self.match('='):
            return self.parse_assignment(expr)
        return ExprStmt(expr, line=token.line, column=token.column)

    def parse_assignment(self, target: Node) -> Node:
        eq = self.consume('=')
        value = self.parse_expression()
        if isinstance(target, Variable) and not target.grouped:
            return Assign(target.name, value, line=target.line, column=target.column)
        if isinstance(target, Index) and isinstance(target.target, Variable) and not target.grouped:
            return IndexAssign(target.target.name, target.index, value, line=target.line, column=target.column)
        raise self.error("invalid assignment target", eq)

    def parse_func_decl(self) -> FuncDecl:
        start = self.consume('function')
        name_token = self.consume('IDENT')
        if name_token.value in self.functions:
            raise self.error(f"function {name_token.value} is already defined", name_token)
        self.functions.add(name_token.value)
        self.consume('(')
        params: List[str] = []
        if not self.match(')'):
            while True:
                param = self.consume('VAR')
                if param.value in params:
                    raise self.error(f"duplicate parameter ${param.value}", param)
                params.append(param.value)
                if not self.match(','):
                    break
                self.consume(',')
        self.consume(')')
        self.in_function = True
        try:
            body = self.parse_block()
        finally:
            self.in_function = False
        return FuncDecl(name_token.value, params, body, line=start.line, column=start.column)

    def parse_block(self) -> Block:
        brace = self.consume('{')
        statements: List[Node] = []
        while not self.match('}'):
            if self.peek() is None:
                raise self.error("unterminated block, missing '}'", brace)
            statements.append(self.parse_statement())
        self.consume('}')
        return Block(statements, line=brace.line, column=brace.column)

    def parse_condition(self) -> Node:
        self.consume('(')
        condition = self.parse_expression()
        self.consume(')')
        if self.match(list(LOGICAL_OPS)):
            raise self.error("compound conditions must be written as ((a) AND (b))")
        return condition

    def parse_if_stmt(self) -> IfStmt:
        start = self.consume('if')
        branches = [(self.parse_condition(), self.parse_block())]
        while self.match('elseif'):
            self.consume('elseif')
            branches.append((self.parse_condition(), self.parse_block()))
        else_block = None
        if self.match('else'):
            self.consume('else')
            else_block = self.parse_block()
        return IfStmt(branches, else_block, line=start.line, column=start.column)

    def parse_while_stmt(self) -> WhileStmt:
        start = self.consume('while')
        condition = self.parse_condition()
        body = self.parse_block()
        return WhileStmt(condition, body, line=start.line, column=start.column)

    def parse_return_stmt(self) -> ReturnStmt:
        start = self.consume('return')
        nxt = self.peek()
        # The returned expression must start on the same line as `return`.
        if nxt is None or nxt.line != start.line or nxt.type == '}':
            return ReturnStmt(None, line=start.line, column=start.column)
        return ReturnStmt(self.parse_expression(), line=start.line, column=start.column)

    def parse_inc_dec(self) -> IncDec:
        keyword = self.consume(['inc', 'dec'])
        var = self.consume('VAR')
        self.consume('+' if keyword.value == 'inc' else '-')
        amount = self.parse_expression()
        return IncDec(keyword.value, var.value, amount, line=keyword.line, column=keyword.column)

    def parse_array_mutation(self) -> ArrayMutation:
        keyword = self.consume(['push', 'unshift', 'pop', 'shift'])
        var = self.consume('VAR')
        value = None
        if keyword.value in ('push', 'unshift'):
            self.consume(',')
            value = self.parse_expression()
        return ArrayMutation(keyword.value, var.value, value, line=keyword.line, column=keyword.column)

    def parse_read_stmt(self) -> ReadStmt:
        start = self.consume('read')
        self.consume('(')
        var = self.consume('VAR')
        self.consume(')')
        return ReadStmt(var.value, line=start.line, column=start.column)

    def parse_socket_stmt(self) -> SocketStmt:
        start = self.consume('IDENT')
        op = start.value
        if op == 'sockread':
            # sockread(name, $var)
            self.consume('(')
            name = self.parse_expression()
            self.consume(',')
            target = self.consume('VAR').value
            self.consume(')')
            return SocketStmt(op, [name], target, line=start.line, column=start.column)
        args = self.parse_arguments()
        if len(args) != SOCKET_ARITY[op]:
            raise self.error(f"{op} expects {SOCKET_ARITY[op]} arguments, got {len(args)}", start)
        return SocketStmt(op, args, line=start.line, column=start.column)

    # Expressions

    def parse_expression(self) -> Node:
        return self.parse_logic_or()

    def check_logical_operand(self, node: Node, op_token: Token):
        if node.grouped:
            return
        if isinstance(node, BinaryOp) and node.op in ('AND', 'OR'):
            return
        if isinstance(node, UnaryOp) and node.op == '!':
            return self.check_logical_operand(node.operand, op_token)
        op = LOGICAL_OPS[op_token.value]
        raise self.error(f"each side of {op} must be in its own parentheses: ((a) {op} (b))", op_token)

    def parse_logic_or(self) -> Node:
        node = self.parse_logic_and()
        while self.match(['OR', '||']):
            op_token = self.consume(['OR', '||'])
            right = self.parse_logic_and()
            self.check_logical_operand(node, op_token)
            self.check_logical_operand(right, op_token)
            node = BinaryOp('OR', node, right, line=op_token.line, column=op_token.column)
        return node

    def parse_logic_and(self) -> Node:
        node = self.parse_equality()
        while self.match(['AND', '&&']):
            op_token = self.consume(['AND', '&&'])
            right = self.parse_equality()
            self.check_logical_operand(node, op_token)
            self.check_logical_operand(right, op_token)
            node = BinaryOp('AND', node, right, line=op_token.line, column=op_token.column)
        return node

    def parse_binary(self, operators: List[str], operand) -> Node:
        node = operand()
        while self.match(operators):
            op_token = self.consume(operators)
            right = operand()
            node = BinaryOp(op_token.value, node, right, line=op_token.line, column=op_token.column)
        return node

    def parse_equality(self) -> Node:
        return self.parse_binary(['==', '!='], self.parse_comparison)

    def parse_comparison(self) -> Node:
        return self.parse_binary(['<', '<=', '>', '>='], self.parse_match)

    def parse_match(self) -> Node:
        return self.parse_binary(['=~'], self.parse_term)

    def parse_term(self) -> Node:
        return self.parse_binary(['+', '-'], self.parse_factor)

    def parse_factor(self) -> Node:
        return self.parse_binary(['*', '/', '%'], self.parse_unary)

    def parse_unary(self) -> Node:
        if self.match(['!', '-']):
            op_token = self.consume(['!', '-'])
            operand = self.parse_unary()
            return UnaryOp(op_token.value, operand, line=op_token.line, column=op_token.column)
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        node = self.parse_primary()
        while True:
            if self.match('['):
                bracket = self.consume('[')
                index_expr = self.parse_expression()
                self.consume(']')
                node = Index(node, index_expr, line=bracket.line, column=bracket.column)
                continue
            # The argument list must open on the line the callee ends on.
            if self.match('(') and self.is_callable(node) and self.peek().line == self.tokens[self.pos - 1].line:
                paren = self.consume('(')
                arg = self.parse_expression()
                if self.match(','):
                    raise self.error("a substitution takes exactly one argument")
                self.consume(')')
                node = Apply(node, arg, line=paren.line, column=paren.column)
                continue
            break
        return node

    @staticmethod
    def is_callable(node: Node) -> bool:
        if isinstance(node, RegexLit):
            return node.replacement is not None
        return isinstance(node, Variable) and not node.grouped

    def parse_primary(self) -> Node:
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of input in expression")
        if token.type == 'INT':
            self.consume('INT')
            return Literal(int(token.value), 'Integer', line=token.line, column=token.column)
        if token.type == 'STRING':
            self.consume('STRING')
            return self.parse_interpolation(token)
        if token.type in ('REGEX', 'SUBST'):
            self.pos += 1
            replacement = token.replacement if token.type == 'SUBST' else None
            try:
                regex = compile_regex(token.value, token.flags, replacement)
            except RegexCompileError as e:
                e.locate(token.line, token.column)
                raise
            return RegexLit(token.value, token.flags, replacement, regex, line=token.line, column=token.column)
        if token.type == 'VAR':
            self.consume('VAR')
            return Variable(token.value, line=token.line, column=token.column)
        if token.type == 'IDENT':
            self.consume('IDENT')
            if not self.match('('):
                raise self.error(f"unexpected identifier {token.value!r}", token)
            return Call(token.value, self.parse_arguments(), line=token.line, column=token.column)
        if self.is_a(token, ['pop', 'shift']) and token.type == 'KEYWORD':
            return self.parse_array_mutation()
        if token.type == '[':
            self.consume('[')
            elements: List[Node] = []
            if not self.match(']'):
                elements.append(self.parse_expression())
                while self.match(','):
                    self.consume(',')
                    elements.append(self.parse_expression())
            self.consume(']')
            return ArrayLit(elements, line=token.line, column=token.column)
        if token.type == '(':
            self.consume('(')
            expr = self.parse_expression()
            self.consume(')')
            expr.grouped = True
            return expr
        raise self.error(f"unexpected token {token.value!r}", token)

    def parse_arguments(self) -> List[Node]:
        self.consume('(')
        args: List[Node] = []
        if not self.match(')'):
            args.append(self.parse_expression())
            while self.match(','):
                self.consume(',')
                args.append(self.parse_expression())
        self.consume(')')
        return args

    def parse_interpolation(self, token: Token) -> Node:
        """Split a raw string body into literal text and variable references."""
        raw = token.value
        parts: List[Node] = []
        text: List[str] = []
        i = 0
        while i < len(raw):
            ch = raw[i]
            if ch == '\\':
                decoded, i = decode_escape(raw, i)
                text.append(decoded)
                continue
            if ch == '$' and i + 1 < len(raw) and is_ident_start(raw[i + 1]):
                if text:
                    parts.append(Literal(''.join(text), 'Text', line=token.line, column=token.column))
                    text = []
                j = i + 1
                while j < len(raw) and is_ident_char(raw[j]):
                    j += 1
                parts.append(Variable(raw[i + 1:j], line=token.line, column=token.column))
                i = j
                continue
            text.append(ch)
            i += 1
        if not any(isinstance(p, Variable) for p in parts):
            return Literal(''.join(text), 'Text', line=token.line, column=token.column)
        if text:
            parts.append(Literal(''.join(text), 'Text', line=token.line, column=token.column))
        return Interpolation(parts, line=token.line, column=token.column)


def describe(expected: Union[str, List[str]]) -> str:
    if isinstance(expected, list):
        return 'one of ' + ', '.join(repr(e) for e in expected)
    return repr(expected)


def parse_program(source: str) -> Program:
    """Parse Minilux source code into a Program AST.

    Raises LexError or ParseError (or RegexCompileError for a malformed
    regex literal) before anything runs.
    """
    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse_program()
