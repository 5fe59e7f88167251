from typing import Callable, TypeVar

from laurelion.core.codec.tags import (
    TagTable, TYPES, OPERATIONS, CONTRACTS, STMTS, BODIES, TYPE_DEFINITIONS, DECLARATIONS,
)
from laurelion.core.models.ast import (
    HighType, TVoid, TBool, TInt, TFloat64, UserDefined, Applied, Pure, Intersection,
    Operation, ContractType, StmtExpr,
    IfThenElse, Block, LocalVariable, While, Exit, Return,
    LiteralInt, LiteralBool, Identifier, Assign, FieldSelect, PureFieldUpdate,
    StaticCall, PrimitiveOp, This, ReferenceEquals, AsType, IsType, InstanceCall,
    Forall, Exists, Assigned, Old, Fresh, Assert, Assume, ProveBy, ContractOf,
    Abstract, All, Hole,
    Body, Transparent, Opaque, AbstractBody,
    TypeDefinition, Composite, Constrained,
    Program, Procedure, Parameter, Field, CompositeType, ConstrainedType,
)
from laurelion.core.helpers.utils import ensure_recursion_limit
from laurelion.core.models.errors import (
    ArityError, UnknownTagError, TypeMismatchError, ShapeError, DepthError,
)
from laurelion.core.models.wire import (
    IDENT, OP, STRLIT, NUM, OPTION, SEQ, TRUE, FALSE, Symbol, WireValue, is_qualified,
)

T = TypeVar("T")
K = TypeVar("K")

Node = tuple[WireValue, ...]


def describe(value: WireValue) -> str:
    """Short human-readable description of a wire value for error messages."""
    if isinstance(value, tuple):
        if not value:
            return "an empty s-expression"
        head = value[0]
        if isinstance(head, Symbol):
            return f"an s-expression headed by '{head.text}' with {len(value)} elements"
        return f"an s-expression with {len(value)} elements"
    if isinstance(value, Symbol):
        return f"symbol '{value.text}'"
    if value is None:
        return "null"
    if isinstance(value, str):
        return "a string"
    if isinstance(value, bool):
        return "a boolean"
    if isinstance(value, int):
        return "an integer"
    return f"a {type(value).__name__}"


class Decoder:
    """
    Rebuilds a Laurel AST from a symbol-resolved wire tree.

    Decoding is a recursive-descent parse parameterized by the category the
    caller expects (type, statement/expression, body, ...). For every
    composite node the decoder checks the category's minimum arity, resolves
    the tag against the category's tag table, then hands the node to the
    variant parser, which checks the exact arity and decodes each field.

    The first violation raises a DecodeError subclass and aborts the whole
    decode; nothing is recovered or defaulted. The decoder keeps no state
    between calls and a single instance can be shared freely.

    Every public ``decode_*`` entry point first checks the s-expression
    nesting against ``max_depth``. The check runs iteratively over the whole
    tree before any recursion starts, and the interpreter recursion limit is
    raised to fit ``max_depth`` levels of descent.

    The encoder spends at least one interpreter frame per wire level, so
    under the default recursion limit of 1000 it cannot emit a tree deeper
    than ``DEFAULT_MAX_DEPTH``.
    """
    DEFAULT_MAX_DEPTH = 1024

    # deepest descent per wire level: _decode_stmt -> lambda -> _unary_stmt
    FRAMES_PER_LEVEL = 3
    STACK_HEADROOM = 1000

    STMT_MIN_ARITY = 2
    TYPE_MIN_ARITY = 3
    BODY_MIN_ARITY = 3
    TYPE_DEFINITION_MIN_ARITY = 3

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._max_depth = max_depth

        self._type_parsers: dict[type, Callable[[Node], HighType]] = {
            TVoid: lambda node: self._nullary_type(node, TVoid),
            TBool: lambda node: self._nullary_type(node, TBool),
            TInt: lambda node: self._nullary_type(node, TInt),
            TFloat64: lambda node: self._nullary_type(node, TFloat64),
            UserDefined: self._user_defined,
            Applied: self._applied,
            Pure: self._pure,
            Intersection: self._intersection,
        }

        self._stmt_parsers: dict[type, Callable[[Node], StmtExpr]] = {
            IfThenElse: self._if_then_else,
            Block: self._block,
            LocalVariable: self._local_variable,
            While: self._while,
            Exit: self._exit,
            Return: self._return,
            LiteralInt: self._literal_int,
            LiteralBool: self._literal_bool,
            Identifier: self._identifier,
            Assign: self._assign,
            FieldSelect: self._field_select,
            PureFieldUpdate: self._pure_field_update,
            StaticCall: self._static_call,
            PrimitiveOp: self._primitive_op,
            This: lambda node: self._nullary_stmt(node, This),
            ReferenceEquals: self._reference_equals,
            AsType: self._as_type,
            IsType: self._is_type,
            InstanceCall: self._instance_call,
            Forall: lambda node: self._quantifier(node, Forall),
            Exists: lambda node: self._quantifier(node, Exists),
            Assigned: lambda node: self._unary_stmt(node, Assigned),
            Old: lambda node: self._unary_stmt(node, Old),
            Fresh: lambda node: self._unary_stmt(node, Fresh),
            Assert: lambda node: self._unary_stmt(node, Assert),
            Assume: lambda node: self._unary_stmt(node, Assume),
            ProveBy: self._prove_by,
            ContractOf: self._contract_of,
            Abstract: lambda node: self._nullary_stmt(node, Abstract),
            All: lambda node: self._nullary_stmt(node, All),
            Hole: lambda node: self._nullary_stmt(node, Hole),
        }

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def decode(self, root: WireValue) -> Program:
        return self.decode_program(root)

    def ensure_stack(self) -> None:
        """Make room on the interpreter stack for ``max_depth`` levels of descent."""
        ensure_recursion_limit(self._max_depth * self.FRAMES_PER_LEVEL + self.STACK_HEADROOM)

    def check_depth(self, root: WireValue, construct: str = DECLARATIONS.tag(Program)) -> None:
        stack: list[tuple[WireValue, int]] = [(root, 1)]
        while stack:
            value, depth = stack.pop()
            if not isinstance(value, tuple):
                continue
            if depth > self._max_depth:
                raise DepthError(construct, self._max_depth)
            stack.extend((child, depth + 1) for child in value)

    def _guarded(self, node: WireValue, parse: Callable[[WireValue], T], construct: str) -> T:
        self.check_depth(node, construct)
        self.ensure_stack()
        return parse(node)

    # ---------- entry points ----------

    def decode_program(self, node: WireValue) -> Program:
        return self._guarded(node, self._decode_program, DECLARATIONS.tag(Program))

    def decode_type(self, node: WireValue) -> HighType:
        return self._guarded(node, self._decode_type, TYPES.category)

    def decode_operation(self, node: WireValue) -> Operation:
        return self._guarded(node, self._decode_operation, OPERATIONS.category)

    def decode_contract_type(self, node: WireValue) -> ContractType:
        return self._guarded(node, self._decode_contract_type, CONTRACTS.category)

    def decode_stmt(self, node: WireValue) -> StmtExpr:
        return self._guarded(node, self._decode_stmt, STMTS.category)

    def decode_parameter(self, node: WireValue) -> Parameter:
        return self._guarded(node, self._decode_parameter, DECLARATIONS.tag(Parameter))

    def decode_field(self, node: WireValue) -> Field:
        return self._guarded(node, self._decode_field, DECLARATIONS.tag(Field))

    def decode_body(self, node: WireValue) -> Body:
        return self._guarded(node, self._decode_body, BODIES.category)

    def decode_procedure(self, node: WireValue) -> Procedure:
        return self._guarded(node, self._decode_procedure, DECLARATIONS.tag(Procedure))

    def decode_composite_type(self, node: WireValue) -> CompositeType:
        return self._guarded(node, self._decode_composite_type, DECLARATIONS.tag(CompositeType))

    def decode_constrained_type(self, node: WireValue) -> ConstrainedType:
        return self._guarded(node, self._decode_constrained_type, DECLARATIONS.tag(ConstrainedType))

    def decode_type_definition(self, node: WireValue) -> TypeDefinition:
        return self._guarded(node, self._decode_type_definition, TYPE_DEFINITIONS.category)

    # ---------- structural helpers ----------

    @staticmethod
    def _expect(node: WireValue, construct: str, min_arity: int) -> Node:
        if not isinstance(node, tuple):
            raise TypeMismatchError(construct, f"expected an s-expression, found {describe(node)}")
        if len(node) < min_arity:
            raise ArityError(construct, f"at least {min_arity}", len(node))
        return node

    @staticmethod
    def _arity(node: Node, construct: str, arity: int) -> None:
        if len(node) != arity:
            raise ArityError(construct, str(arity), len(node))

    @staticmethod
    def _min_arity(node: Node, construct: str, arity: int) -> None:
        if len(node) < arity:
            raise ArityError(construct, f"at least {arity}", len(node))

    @staticmethod
    def _tag(value: WireValue, construct: str) -> str:
        if not isinstance(value, Symbol):
            raise TypeMismatchError(construct, f"expected a tag symbol, found {describe(value)}")
        if not is_qualified(value.text):
            raise UnknownTagError(construct, value.text)
        return value.text

    def _lookup(self, table: TagTable[K], value: WireValue) -> tuple[K, str]:
        tag = self._tag(value, table.category)
        key = table.lookup(tag)
        if key is None:
            raise UnknownTagError(table.category, tag)
        return key, tag

    @staticmethod
    def _keyword(node: WireValue, keyword: str, construct: str) -> Node:
        if not isinstance(node, tuple) or not node:
            raise TypeMismatchError(construct, f"expected '{keyword}' node, found {describe(node)}")
        head = node[0]
        if not isinstance(head, Symbol) or head.text != keyword:
            raise TypeMismatchError(construct, f"expected '{keyword}' node, found {describe(node)}")
        return node

    # ---------- primitives ----------

    def _strlit(self, node: WireValue, construct: str) -> str:
        node = self._keyword(node, STRLIT, construct)
        self._arity(node, f"{construct} ({STRLIT})", 3)
        value = node[2]
        if not isinstance(value, str):
            raise TypeMismatchError(construct, f"'{STRLIT}' payload must be a string, found {describe(value)}")
        return value

    def _num(self, node: WireValue, construct: str) -> int:
        node = self._keyword(node, NUM, construct)
        self._arity(node, f"{construct} ({NUM})", 3)
        value = node[2]
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeMismatchError(construct, f"'{NUM}' payload must be an integer, found {describe(value)}")
        return value

    def _bool(self, node: WireValue, construct: str) -> bool:
        node = self._keyword(node, OP, construct)
        self._arity(node, f"{construct} ({OP})", 2)
        inner = node[1]
        if not isinstance(inner, tuple):
            raise TypeMismatchError(construct, f"'{OP}' must wrap a boolean tag, found {describe(inner)}")
        self._arity(inner, f"{construct} ({OP})", 2)
        tag = self._tag(inner[0], construct)
        if tag == TRUE:
            return True
        if tag == FALSE:
            return False
        raise UnknownTagError(construct, tag)

    def _option(self, node: WireValue, decode: Callable[[WireValue], T], construct: str) -> T | None:
        if not isinstance(node, tuple) or not node or node[0] != Symbol(OPTION):
            raise ShapeError(construct, f"expected '{OPTION}' node, found {describe(node)}")
        if len(node) == 2:
            return None
        if len(node) == 3:
            return decode(node[2])
        raise ShapeError(construct, f"'{OPTION}' must have 2 or 3 elements, found {len(node)}")

    def _seq(self, node: WireValue, decode: Callable[[WireValue], T], construct: str) -> tuple[T, ...]:
        if not isinstance(node, tuple) or not node or node[0] != Symbol(SEQ):
            raise ShapeError(construct, f"expected '{SEQ}' node, found {describe(node)}")
        if len(node) < 2:
            raise ShapeError(construct, f"'{SEQ}' is missing its annotation slot")
        return tuple([decode(item) for item in node[2:]])

    def _option_stmt(self, node: WireValue, construct: str) -> StmtExpr | None:
        return self._option(node, self._decode_stmt, construct)

    def _stmt_seq(self, node: WireValue, construct: str) -> tuple[StmtExpr, ...]:
        return self._seq(node, self._decode_stmt, construct)

    # ---------- types ----------

    def _decode_type(self, node: WireValue) -> HighType:
        node = self._expect(node, TYPES.category, self.TYPE_MIN_ARITY)
        self._keyword(node, IDENT, TYPES.category)
        cls, _ = self._lookup(TYPES, node[2])
        return self._type_parsers[cls](node)

    def _nullary_type(self, node: Node, cls: type[HighType]) -> HighType:
        self._arity(node, TYPES.tag(cls), 3)
        return cls()

    def _user_defined(self, node: Node) -> HighType:
        construct = TYPES.tag(UserDefined)
        self._arity(node, construct, 4)
        return UserDefined(self._strlit(node[3], construct))

    def _applied(self, node: Node) -> HighType:
        self._min_arity(node, TYPES.tag(Applied), 4)
        return Applied(
            base=self._decode_type(node[3]),
            type_arguments=tuple([self._decode_type(arg) for arg in node[4:]]),
        )

    def _pure(self, node: Node) -> HighType:
        self._arity(node, TYPES.tag(Pure), 4)
        return Pure(self._decode_type(node[3]))

    def _intersection(self, node: Node) -> HighType:
        return Intersection(tuple([self._decode_type(member) for member in node[3:]]))

    def _decode_operation(self, node: WireValue) -> Operation:
        return self._ident_enum(node, OPERATIONS)

    def _decode_contract_type(self, node: WireValue) -> ContractType:
        return self._ident_enum(node, CONTRACTS)

    def _ident_enum(self, node: WireValue, table: TagTable[K]) -> K:
        node = self._expect(node, table.category, 3)
        self._keyword(node, IDENT, table.category)
        member, tag = self._lookup(table, node[2])
        self._arity(node, tag, 3)
        return member

    # ---------- statements / expressions ----------

    def _decode_stmt(self, node: WireValue) -> StmtExpr:
        node = self._expect(node, STMTS.category, self.STMT_MIN_ARITY)
        cls, _ = self._lookup(STMTS, node[0])
        return self._stmt_parsers[cls](node)

    def _variant(self, node: Node, cls: type, arity: int) -> str:
        construct = STMTS.tag(cls)
        self._arity(node, construct, arity)
        return construct

    def _nullary_stmt(self, node: Node, cls: type[StmtExpr]) -> StmtExpr:
        self._variant(node, cls, 2)
        return cls()

    def _unary_stmt(self, node: Node, cls: type[StmtExpr]) -> StmtExpr:
        self._variant(node, cls, 3)
        return cls(self._decode_stmt(node[2]))

    def _if_then_else(self, node: Node) -> StmtExpr:
        construct = self._variant(node, IfThenElse, 5)
        return IfThenElse(
            cond=self._decode_stmt(node[2]),
            then_branch=self._decode_stmt(node[3]),
            else_branch=self._option_stmt(node[4], construct),
        )

    def _block(self, node: Node) -> StmtExpr:
        construct = self._variant(node, Block, 4)
        return Block(
            statements=self._stmt_seq(node[2], construct),
            label=self._option(node[3], lambda n: self._strlit(n, construct), construct),
        )

    def _local_variable(self, node: Node) -> StmtExpr:
        construct = self._variant(node, LocalVariable, 5)
        return LocalVariable(
            name=self._strlit(node[2], construct),
            type=self._decode_type(node[3]),
            initializer=self._option_stmt(node[4], construct),
        )

    def _while(self, node: Node) -> StmtExpr:
        construct = self._variant(node, While, 6)
        return While(
            cond=self._decode_stmt(node[2]),
            invariant=self._option_stmt(node[3], construct),
            decreases=self._option_stmt(node[4], construct),
            body=self._decode_stmt(node[5]),
        )

    def _exit(self, node: Node) -> StmtExpr:
        construct = self._variant(node, Exit, 3)
        return Exit(self._strlit(node[2], construct))

    def _return(self, node: Node) -> StmtExpr:
        construct = self._variant(node, Return, 3)
        return Return(self._option_stmt(node[2], construct))

    def _literal_int(self, node: Node) -> StmtExpr:
        construct = self._variant(node, LiteralInt, 3)
        return LiteralInt(self._num(node[2], construct))

    def _literal_bool(self, node: Node) -> StmtExpr:
        construct = self._variant(node, LiteralBool, 3)
        return LiteralBool(self._bool(node[2], construct))

    def _identifier(self, node: Node) -> StmtExpr:
        construct = self._variant(node, Identifier, 3)
        return Identifier(self._strlit(node[2], construct))

    def _assign(self, node: Node) -> StmtExpr:
        self._variant(node, Assign, 4)
        return Assign(self._decode_stmt(node[2]), self._decode_stmt(node[3]))

    def _field_select(self, node: Node) -> StmtExpr:
        construct = self._variant(node, FieldSelect, 4)
        return FieldSelect(self._decode_stmt(node[2]), self._strlit(node[3], construct))

    def _pure_field_update(self, node: Node) -> StmtExpr:
        construct = self._variant(node, PureFieldUpdate, 5)
        return PureFieldUpdate(
            target=self._decode_stmt(node[2]),
            field_name=self._strlit(node[3], construct),
            new_value=self._decode_stmt(node[4]),
        )

    def _static_call(self, node: Node) -> StmtExpr:
        construct = self._variant(node, StaticCall, 4)
        return StaticCall(self._strlit(node[2], construct), self._stmt_seq(node[3], construct))

    def _primitive_op(self, node: Node) -> StmtExpr:
        construct = self._variant(node, PrimitiveOp, 4)
        return PrimitiveOp(self._decode_operation(node[2]), self._stmt_seq(node[3], construct))

    def _reference_equals(self, node: Node) -> StmtExpr:
        self._variant(node, ReferenceEquals, 4)
        return ReferenceEquals(self._decode_stmt(node[2]), self._decode_stmt(node[3]))

    def _as_type(self, node: Node) -> StmtExpr:
        self._variant(node, AsType, 4)
        return AsType(self._decode_stmt(node[2]), self._decode_type(node[3]))

    def _is_type(self, node: Node) -> StmtExpr:
        self._variant(node, IsType, 4)
        return IsType(self._decode_stmt(node[2]), self._decode_type(node[3]))

    def _instance_call(self, node: Node) -> StmtExpr:
        construct = self._variant(node, InstanceCall, 5)
        return InstanceCall(
            target=self._decode_stmt(node[2]),
            callee=self._strlit(node[3], construct),
            arguments=self._stmt_seq(node[4], construct),
        )

    def _quantifier(self, node: Node, cls: type[Forall] | type[Exists]) -> StmtExpr:
        construct = self._variant(node, cls, 5)
        return cls(
            name=self._strlit(node[2], construct),
            type=self._decode_type(node[3]),
            body=self._decode_stmt(node[4]),
        )

    def _prove_by(self, node: Node) -> StmtExpr:
        self._variant(node, ProveBy, 4)
        return ProveBy(self._decode_stmt(node[2]), self._decode_stmt(node[3]))

    def _contract_of(self, node: Node) -> StmtExpr:
        self._variant(node, ContractOf, 4)
        return ContractOf(self._decode_contract_type(node[2]), self._decode_stmt(node[3]))

    # ---------- declarations ----------

    def _declaration(self, node: WireValue, cls: type, arity: int) -> tuple[Node, str]:
        construct = DECLARATIONS.tag(cls)
        node = self._expect(node, construct, 2)
        tag = self._tag(node[0], construct)
        if tag != construct:
            raise UnknownTagError(construct, tag)
        self._arity(node, construct, arity)
        return node, construct

    def _decode_parameter(self, node: WireValue) -> Parameter:
        node, construct = self._declaration(node, Parameter, 4)
        return Parameter(name=self._strlit(node[2], construct), type=self._decode_type(node[3]))

    def _decode_field(self, node: WireValue) -> Field:
        node, construct = self._declaration(node, Field, 5)
        return Field(
            name=self._strlit(node[2], construct),
            is_mutable=self._bool(node[3], construct),
            type=self._decode_type(node[4]),
        )

    def _decode_body(self, node: WireValue) -> Body:
        node = self._expect(node, BODIES.category, self.BODY_MIN_ARITY)
        cls, tag = self._lookup(BODIES, node[0])

        if cls is Transparent:
            self._arity(node, tag, 3)
            return Transparent(self._decode_stmt(node[2]))
        if cls is Opaque:
            self._arity(node, tag, 4)
            return Opaque(
                postcondition=self._decode_stmt(node[2]),
                implementation=self._option_stmt(node[3], tag),
            )
        self._arity(node, tag, 3)
        return AbstractBody(self._decode_stmt(node[2]))

    def _decode_procedure(self, node: WireValue) -> Procedure:
        node, construct = self._declaration(node, Procedure, 11)
        return Procedure(
            name=self._strlit(node[2], construct),
            inputs=self._seq(node[3], self._decode_parameter, construct),
            output=self._decode_type(node[4]),
            precondition=self._decode_stmt(node[5]),
            decreases=self._decode_stmt(node[6]),
            deterministic=self._bool(node[7], construct),
            reads=self._option_stmt(node[8], construct),
            modifies=self._decode_stmt(node[9]),
            body=self._decode_body(node[10]),
        )

    def _decode_composite_type(self, node: WireValue) -> CompositeType:
        node, construct = self._declaration(node, CompositeType, 6)
        return CompositeType(
            name=self._strlit(node[2], construct),
            extending=self._seq(node[3], lambda n: self._strlit(n, construct), construct),
            fields=self._seq(node[4], self._decode_field, construct),
            instance_procedures=self._seq(node[5], self._decode_procedure, construct),
        )

    def _decode_constrained_type(self, node: WireValue) -> ConstrainedType:
        node, construct = self._declaration(node, ConstrainedType, 7)
        return ConstrainedType(
            name=self._strlit(node[2], construct),
            base=self._decode_type(node[3]),
            value_name=self._strlit(node[4], construct),
            constraint=self._decode_stmt(node[5]),
            witness=self._decode_stmt(node[6]),
        )

    def _decode_type_definition(self, node: WireValue) -> TypeDefinition:
        node = self._expect(node, TYPE_DEFINITIONS.category, self.TYPE_DEFINITION_MIN_ARITY)
        cls, tag = self._lookup(TYPE_DEFINITIONS, node[0])
        self._arity(node, tag, 3)
        if cls is Composite:
            return Composite(self._decode_composite_type(node[2]))
        return Constrained(self._decode_constrained_type(node[2]))

    def _decode_program(self, node: WireValue) -> Program:
        node, construct = self._declaration(node, Program, 5)
        return Program(
            static_procedures=self._seq(node[2], self._decode_procedure, construct),
            static_fields=self._seq(node[3], self._decode_field, construct),
            types=self._seq(node[4], self._decode_type_definition, construct),
        )
