from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from laurelion.core.codec.interner import SymbolInterner
from laurelion.core.codec.tags import (
    TYPES, OPERATIONS, CONTRACTS, STMTS, BODIES, TYPE_DEFINITIONS, DECLARATIONS,
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
from laurelion.core.models.wire import (
    ANNOTATION, IDENT, OP, STRLIT, NUM, OPTION, SEQ, TRUE, FALSE, Symbol, WireValue,
)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class EncodedProgram:
    """
    Output of one encode session: the wire tree and the symbols it uses, in
    the order they were first emitted. The symbol list is the header handed
    to the container together with the tree.
    """
    root: WireValue
    symbols: tuple[str, ...]


class Encoder:
    """
    Walks a Laurel AST and produces its wire tree.

    Every ``encode`` call is one encode session with a fresh SymbolInterner
    that records each tag and keyword as it is emitted, so an instance can
    be reused across programs. Symbols are interned in pre-order, fields
    left to right, which is exactly the order in which they appear in the
    resulting tree. The per-category ``encode_*`` methods intern into the
    current session, exposed as ``interner``.

    Encoding is total over well-formed ASTs. Passing an object that is not a
    Laurel node raises TypeError.
    """
    def __init__(self) -> None:
        self._interner = SymbolInterner()

    @property
    def interner(self) -> SymbolInterner:
        return self._interner

    def encode(self, program: Program) -> EncodedProgram:
        self._interner = SymbolInterner()
        root = self.encode_program(program)
        return EncodedProgram(root=root, symbols=self._interner.symbols())

    # ---------- primitives ----------

    def _symbol(self, text: str) -> Symbol:
        self._interner.intern(text)
        return Symbol(text)

    def _strlit(self, value: str) -> WireValue:
        return self._symbol(STRLIT), ANNOTATION, value

    def _num(self, value: int) -> WireValue:
        return self._symbol(NUM), ANNOTATION, value

    def _bool(self, value: bool) -> WireValue:
        return self._symbol(OP), (self._symbol(TRUE if value else FALSE), ANNOTATION)

    def _option(self, value: T | None, encode: Callable[[T], WireValue]) -> WireValue:
        if value is None:
            return self._symbol(OPTION), ANNOTATION
        return self._symbol(OPTION), ANNOTATION, encode(value)

    def _seq(self, items: Iterable[T], encode: Callable[[T], WireValue]) -> WireValue:
        return (self._symbol(SEQ), ANNOTATION, *[encode(item) for item in items])

    def _ident(self, tag: str) -> tuple[WireValue, ...]:
        return self._symbol(IDENT), ANNOTATION, self._symbol(tag)

    # ---------- types ----------

    def encode_type(self, t: HighType) -> WireValue:
        # the ident head is built before the arguments so the tag is interned first
        match t:
            case TVoid() | TBool() | TInt() | TFloat64():
                return self._ident(TYPES.tag(type(t)))
            case UserDefined(name):
                return self._ident(TYPES.tag(UserDefined)) + (self._strlit(name),)
            case Applied(base, type_arguments):
                return self._ident(TYPES.tag(Applied)) + (
                    self.encode_type(base),
                    *[self.encode_type(arg) for arg in type_arguments],
                )
            case Pure(base):
                return self._ident(TYPES.tag(Pure)) + (self.encode_type(base),)
            case Intersection(types):
                return self._ident(TYPES.tag(Intersection)) + tuple([
                    self.encode_type(member) for member in types
                ])
            case _:
                raise TypeError(f"Not a Laurel type: {t!r}")

    def encode_operation(self, op: Operation) -> WireValue:
        return self._ident(OPERATIONS.tag(op))

    def encode_contract_type(self, ct: ContractType) -> WireValue:
        return self._ident(CONTRACTS.tag(ct))

    # ---------- statements / expressions ----------

    def encode_stmt(self, e: StmtExpr) -> WireValue:
        if type(e) not in STMTS:
            raise TypeError(f"Not a Laurel statement/expression: {e!r}")

        head = self._symbol(STMTS.tag(type(e)))
        stmt = self.encode_stmt
        opt = self._option_stmt

        match e:
            # statement-like
            case IfThenElse(cond, then_branch, else_branch):
                return head, ANNOTATION, stmt(cond), stmt(then_branch), opt(else_branch)
            case Block(statements, label):
                return head, ANNOTATION, self._seq(statements, stmt), self._option(label, self._strlit)
            case LocalVariable(name, ty, initializer):
                return head, ANNOTATION, self._strlit(name), self.encode_type(ty), opt(initializer)
            case While(cond, invariant, decreases, body):
                return head, ANNOTATION, stmt(cond), opt(invariant), opt(decreases), stmt(body)
            case Exit(target):
                return head, ANNOTATION, self._strlit(target)
            case Return(value):
                return head, ANNOTATION, opt(value)

            # expression-like
            case LiteralInt(value):
                return head, ANNOTATION, self._num(value)
            case LiteralBool(value):
                return head, ANNOTATION, self._bool(value)
            case Identifier(name):
                return head, ANNOTATION, self._strlit(name)
            case Assign(target, value):
                return head, ANNOTATION, stmt(target), stmt(value)
            case FieldSelect(target, field_name):
                return head, ANNOTATION, stmt(target), self._strlit(field_name)
            case PureFieldUpdate(target, field_name, new_value):
                return head, ANNOTATION, stmt(target), self._strlit(field_name), stmt(new_value)
            case StaticCall(callee, arguments):
                return head, ANNOTATION, self._strlit(callee), self._seq(arguments, stmt)
            case PrimitiveOp(operator, arguments):
                return head, ANNOTATION, self.encode_operation(operator), self._seq(arguments, stmt)

            # instance-related
            case ReferenceEquals(lhs, rhs):
                return head, ANNOTATION, stmt(lhs), stmt(rhs)
            case AsType(target, target_type):
                return head, ANNOTATION, stmt(target), self.encode_type(target_type)
            case IsType(target, ty):
                return head, ANNOTATION, stmt(target), self.encode_type(ty)
            case InstanceCall(target, callee, arguments):
                return head, ANNOTATION, stmt(target), self._strlit(callee), self._seq(arguments, stmt)

            # verification-specific
            case Forall(name, ty, body) | Exists(name, ty, body):
                return head, ANNOTATION, self._strlit(name), self.encode_type(ty), stmt(body)
            case Assigned(value) | Old(value) | Fresh(value):
                return head, ANNOTATION, stmt(value)

            # proof-related
            case Assert(condition) | Assume(condition):
                return head, ANNOTATION, stmt(condition)
            case ProveBy(value, proof):
                return head, ANNOTATION, stmt(value), stmt(proof)
            case ContractOf(ct, function):
                return head, ANNOTATION, self.encode_contract_type(ct), stmt(function)

            # nullary
            case This() | Abstract() | All() | Hole():
                return head, ANNOTATION

        raise TypeError(f"Unhandled statement/expression variant: {type(e).__name__}")

    def _option_stmt(self, e: StmtExpr | None) -> WireValue:
        return self._option(e, self.encode_stmt)

    # ---------- declarations ----------

    def encode_parameter(self, param: Parameter) -> WireValue:
        return (
            self._symbol(DECLARATIONS.tag(Parameter)),
            ANNOTATION,
            self._strlit(param.name),
            self.encode_type(param.type),
        )

    def encode_field(self, f: Field) -> WireValue:
        return (
            self._symbol(DECLARATIONS.tag(Field)),
            ANNOTATION,
            self._strlit(f.name),
            self._bool(f.is_mutable),
            self.encode_type(f.type),
        )

    def encode_body(self, body: Body) -> WireValue:
        match body:
            case Transparent(impl):
                return self._symbol(BODIES.tag(Transparent)), ANNOTATION, self.encode_stmt(impl)
            case Opaque(postcondition, implementation):
                return (
                    self._symbol(BODIES.tag(Opaque)),
                    ANNOTATION,
                    self.encode_stmt(postcondition),
                    self._option_stmt(implementation),
                )
            case AbstractBody(postcondition):
                return self._symbol(BODIES.tag(AbstractBody)), ANNOTATION, self.encode_stmt(postcondition)
            case _:
                raise TypeError(f"Not a Laurel body: {body!r}")

    def encode_procedure(self, proc: Procedure) -> WireValue:
        return (
            self._symbol(DECLARATIONS.tag(Procedure)),
            ANNOTATION,
            self._strlit(proc.name),
            self._seq(proc.inputs, self.encode_parameter),
            self.encode_type(proc.output),
            self.encode_stmt(proc.precondition),
            self.encode_stmt(proc.decreases),
            self._bool(proc.deterministic),
            self._option_stmt(proc.reads),
            self.encode_stmt(proc.modifies),
            self.encode_body(proc.body),
        )

    def encode_composite_type(self, ct: CompositeType) -> WireValue:
        return (
            self._symbol(DECLARATIONS.tag(CompositeType)),
            ANNOTATION,
            self._strlit(ct.name),
            self._seq(ct.extending, self._strlit),
            self._seq(ct.fields, self.encode_field),
            self._seq(ct.instance_procedures, self.encode_procedure),
        )

    def encode_constrained_type(self, ct: ConstrainedType) -> WireValue:
        return (
            self._symbol(DECLARATIONS.tag(ConstrainedType)),
            ANNOTATION,
            self._strlit(ct.name),
            self.encode_type(ct.base),
            self._strlit(ct.value_name),
            self.encode_stmt(ct.constraint),
            self.encode_stmt(ct.witness),
        )

    def encode_type_definition(self, td: TypeDefinition) -> WireValue:
        match td:
            case Composite(ct):
                return self._symbol(TYPE_DEFINITIONS.tag(Composite)), ANNOTATION, self.encode_composite_type(ct)
            case Constrained(ct):
                return self._symbol(TYPE_DEFINITIONS.tag(Constrained)), ANNOTATION, self.encode_constrained_type(ct)
            case _:
                raise TypeError(f"Not a Laurel type definition: {td!r}")

    def encode_program(self, program: Program) -> WireValue:
        return (
            self._symbol(DECLARATIONS.tag(Program)),
            ANNOTATION,
            self._seq(program.static_procedures, self.encode_procedure),
            self._seq(program.static_fields, self.encode_field),
            self._seq(program.types, self.encode_type_definition),
        )


def encode_program(program: Program) -> EncodedProgram:
    """Encode ``program`` in a fresh session."""
    return Encoder().encode(program)
