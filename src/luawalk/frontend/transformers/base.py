"""
Lua AST Transformer
Converts the Lark parse tree to luawalk AST nodes
"""

from typing import Any, List, Optional, Tuple

from lark import Transformer, v_args
from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared.errors import ParseError, describe
from ...shared.nodes import (
    ASTNode, Block, Break, Call, Do, Forin, Fornum, Function, Identifier, If, Index, Invoke,
    Literal, Local, NodeKind, Pair, Paren, Repeat, Return, Table, Vararg, While, BinaryOp,
    UnaryOp, Assign,
)
from ...shared.source_location import SourceLocation
from ...utils.config import DEFAULT_SOURCE_NAME
from .functions import FunctionDefinitionParser, VarargParam
from .literals import LiteralParser

LarkMeta: TypeAlias = Any  # Lark's internal Meta object


_ASSIGNABLE = (NodeKind.IDENTIFIER, NodeKind.INDEX)
_CALLS = (NodeKind.CALL, NodeKind.INVOKE)


@v_args(inline=True, meta=True)
class LuaTransformer(Transformer):
    """
    Lua AST Transformer

    Statement-level checks the grammar leaves open (assignment targets and
    expression statements) are made here and reported as ParseError.
    """

    def __init__(self, source_file: str = DEFAULT_SOURCE_NAME) -> None:
        super().__init__()
        self.current_file = source_file

    @property
    def current_file(self) -> str:
        return self._current_file

    @current_file.setter
    def current_file(self, source_file: str) -> None:
        self._current_file = source_file
        self.literal_parser = LiteralParser(source_file)
        self.function_parser = FunctionDefinitionParser(self._token_location, source_file)

    def _extract_location(self, meta: LarkMeta) -> Optional[SourceLocation]:
        return SourceLocation.from_meta(meta, self.current_file)

    def _token_location(self, token: Token) -> Optional[SourceLocation]:
        if getattr(token, "line", None) is None:
            return None
        return SourceLocation(
            file=self.current_file,
            line=token.line,
            column=token.column,
            end_line=token.end_line or 0,
            end_column=token.end_column or 0,
        )

    def _error(self, message: str, location: Optional[SourceLocation]) -> ParseError:
        return ParseError(message, self.current_file, location)

    # =========================================================================
    # Chunks and blocks
    # =========================================================================

    def start(self, meta: LarkMeta, block: Block) -> Block:
        return block

    def block(self, meta: LarkMeta, *statements: ASTNode) -> Block:
        return Block(list(statements), location=self._extract_location(meta))

    def retstat(self, meta: LarkMeta, values: Optional[List[ASTNode]] = None) -> Return:
        return Return(values or [], location=self._extract_location(meta))

    # =========================================================================
    # Statements
    # =========================================================================

    def assign_stat(self, meta: LarkMeta, *parts: Any) -> Assign:
        *targets, values = parts
        for target in targets:
            if target.kind not in _ASSIGNABLE:
                raise self._error(f"cannot assign to {describe(target)}", target.location)
        return Assign(list(targets), values, location=self._extract_location(meta))

    def call_stat(self, meta: LarkMeta, expr: ASTNode) -> ASTNode:
        if expr.kind not in _CALLS:
            raise self._error(f"syntax error: {describe(expr)} is not a statement",
                              self._extract_location(meta))
        return expr

    def do_stat(self, meta: LarkMeta, body: Block) -> Do:
        return Do(body, location=self._extract_location(meta))

    def while_stat(self, meta: LarkMeta, condition: ASTNode, body: Block) -> While:
        return While(condition, body, location=self._extract_location(meta))

    def repeat_stat(self, meta: LarkMeta, body: Block, condition: ASTNode) -> Repeat:
        return Repeat(body, condition, location=self._extract_location(meta))

    def if_stat(self, meta: LarkMeta, condition: ASTNode, body: Block, *clauses: Any) -> If:
        conditions = [condition]
        bodies = [body]
        orelse = None
        for clause in clauses:
            if isinstance(clause, tuple):
                conditions.append(clause[0])
                bodies.append(clause[1])
            else:
                orelse = clause
        return If(conditions, bodies, orelse, location=self._extract_location(meta))

    def elseif_clause(self, meta: LarkMeta, condition: ASTNode, body: Block) -> Tuple[ASTNode, Block]:
        return condition, body

    def else_clause(self, meta: LarkMeta, body: Block) -> Block:
        return body

    def fornum_stat(self, meta: LarkMeta, name: Token, start: ASTNode, stop: ASTNode,
                    *rest: ASTNode) -> Fornum:
        step = rest[0] if len(rest) == 2 else None
        var = Identifier(str(name), location=self._token_location(name))
        return Fornum(var, start, stop, rest[-1], step=step, location=self._extract_location(meta))

    def forin_stat(self, meta: LarkMeta, names: List[Identifier], iterators: List[ASTNode],
                   body: Block) -> Forin:
        return Forin(names, iterators, body, location=self._extract_location(meta))

    def function_stat(self, meta: LarkMeta, funcname: Tuple[List[Token], Optional[Token]],
                      function: Function) -> Assign:
        dotted, method = funcname
        return self.function_parser.function_statement(dotted, method, function,
                                                       self._extract_location(meta))

    def local_function_stat(self, meta: LarkMeta, name: Token, function: Function):
        return self.function_parser.local_function(name, function, self._extract_location(meta))

    def local_stat(self, meta: LarkMeta, names: List[Identifier],
                   values: Optional[List[ASTNode]] = None) -> Local:
        return Local(names, values or [], location=self._extract_location(meta))

    def break_stat(self, meta: LarkMeta) -> Break:
        return Break(location=self._extract_location(meta))

    # =========================================================================
    # Lists and names
    # =========================================================================

    def funcname(self, meta: LarkMeta, dotted: List[Token],
                 method: Optional[Token] = None) -> Tuple[List[Token], Optional[Token]]:
        return dotted, method

    def dotted_name(self, meta: LarkMeta, *names: Token) -> List[Token]:
        return list(names)

    def namelist(self, meta: LarkMeta, *names: Token) -> List[Identifier]:
        return [Identifier(str(n), location=self._token_location(n)) for n in names]

    def explist(self, meta: LarkMeta, *exprs: ASTNode) -> List[ASTNode]:
        return list(exprs)

    def funcbody(self, meta: LarkMeta, *parts: Any) -> Function:
        body = parts[-1]
        params, is_vararg = parts[0] if len(parts) == 2 else ([], False)
        return Function(params, body, is_vararg, location=self._extract_location(meta))

    def parlist(self, meta: LarkMeta, *params: Any) -> Tuple[List[Identifier], bool]:
        return self.function_parser.parameters(params)

    def param(self, meta: LarkMeta, name: Token) -> Identifier:
        return Identifier(str(name), location=self._token_location(name))

    def dots_param(self, meta: LarkMeta) -> VarargParam:
        return VarargParam(self._extract_location(meta))

    # =========================================================================
    # Expressions
    # =========================================================================

    def binop(self, meta: LarkMeta, left: ASTNode, op: str, right: ASTNode) -> BinaryOp:
        return BinaryOp(op, left, right, location=self._extract_location(meta))

    def unop(self, meta: LarkMeta, op: str, operand: ASTNode) -> UnaryOp:
        return UnaryOp(op, operand, location=self._extract_location(meta))

    def _operator(self, meta: LarkMeta, token: Token) -> str:
        return str(token)

    or_op = and_op = cmp_op = concat_op = add_op = mul_op = unary_op = pow_op = _operator

    def nil(self, meta: LarkMeta) -> Literal:
        return Literal(None, location=self._extract_location(meta))

    def true(self, meta: LarkMeta) -> Literal:
        return Literal(True, location=self._extract_location(meta))

    def false(self, meta: LarkMeta) -> Literal:
        return Literal(False, location=self._extract_location(meta))

    def number(self, meta: LarkMeta, token: Token) -> Literal:
        return self.literal_parser.number(str(token), self._token_location(token))

    def string(self, meta: LarkMeta, token: Token) -> Literal:
        return self.literal_parser.string(str(token), self._token_location(token))

    def vararg(self, meta: LarkMeta) -> Vararg:
        return Vararg(location=self._extract_location(meta))

    def function_exp(self, meta: LarkMeta, function: Function) -> Function:
        function.location = self._extract_location(meta) or function.location
        return function

    def table(self, meta: LarkMeta, entries: Optional[List[Any]] = None) -> Table:
        return Table(entries or [], location=self._extract_location(meta))

    def fieldlist(self, meta: LarkMeta, *entries: Any) -> List[Any]:
        return list(entries)

    def keyed_field(self, meta: LarkMeta, key: ASTNode, value: ASTNode) -> Pair:
        return Pair(key, value)

    def named_field(self, meta: LarkMeta, name: Token, value: ASTNode) -> Pair:
        return Pair(Literal(str(name), location=self._token_location(name)), value)

    def positional_field(self, meta: LarkMeta, value: ASTNode) -> ASTNode:
        return value

    def name(self, meta: LarkMeta, token: Token) -> Identifier:
        return Identifier(str(token), location=self._token_location(token))

    def index(self, meta: LarkMeta, obj: ASTNode, key: ASTNode) -> Index:
        return Index(obj, key, location=self._extract_location(meta))

    def dot_index(self, meta: LarkMeta, obj: ASTNode, name: Token) -> Index:
        key = Literal(str(name), location=self._token_location(name))
        return Index(obj, key, location=self._extract_location(meta))

    def call(self, meta: LarkMeta, func: ASTNode, args: List[ASTNode]) -> Call:
        return Call(func, args, location=self._extract_location(meta))

    def invoke(self, meta: LarkMeta, obj: ASTNode, method: Token, args: List[ASTNode]) -> Invoke:
        return Invoke(obj, str(method), args, location=self._extract_location(meta))

    def paren(self, meta: LarkMeta, expr: ASTNode) -> Paren:
        return Paren(expr, location=self._extract_location(meta))

    def paren_args(self, meta: LarkMeta, args: Optional[List[ASTNode]] = None) -> List[ASTNode]:
        return args or []

    def table_args(self, meta: LarkMeta, table: Table) -> List[ASTNode]:
        return [table]

    def string_args(self, meta: LarkMeta, token: Token) -> List[ASTNode]:
        return [self.literal_parser.string(str(token), self._token_location(token))]
