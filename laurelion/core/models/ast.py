from dataclasses import dataclass
from enum import StrEnum


class HighType:
    """
    Base of the type hierarchy.

    The set of subclasses below is closed: the encoder, the decoder and the
    tag table all enumerate exactly these variants.
    """
    __slots__ = ()


@dataclass(frozen=True, slots=True)
class TVoid(HighType):
    pass


@dataclass(frozen=True, slots=True)
class TBool(HighType):
    pass


@dataclass(frozen=True, slots=True)
class TInt(HighType):
    pass


@dataclass(frozen=True, slots=True)
class TFloat64(HighType):
    pass


@dataclass(frozen=True, slots=True)
class UserDefined(HighType):
    """A reference to a composite or constrained type by name."""
    name: str


@dataclass(frozen=True, slots=True)
class Applied(HighType):
    """A generic type applied to type arguments, e.g. ``Map<int, bool>``."""
    base: HighType
    type_arguments: tuple[HighType, ...] = ()


@dataclass(frozen=True, slots=True)
class Pure(HighType):
    base: HighType


@dataclass(frozen=True, slots=True)
class Intersection(HighType):
    types: tuple[HighType, ...] = ()


class Operation(StrEnum):
    """
    Primitive operators usable in a PrimitiveOp node.
    The value is the unqualified wire name of the operator.
    """
    EQ = "Eq"
    NEQ = "Neq"
    AND = "And"
    OR = "Or"
    NOT = "Not"
    NEG = "Neg"
    ADD = "Add"
    SUB = "Sub"
    MUL = "Mul"
    DIV = "Div"
    MOD = "Mod"
    LT = "Lt"
    LEQ = "Leq"
    GT = "Gt"
    GEQ = "Geq"


class ContractType(StrEnum):
    """Which clause of a procedure contract a ContractOf node refers to."""
    READS = "Reads"
    MODIFIES = "Modifies"
    PRECONDITION = "Precondition"
    POSTCONDITION = "PostCondition"


class StmtExpr:
    """
    Base of the statement/expression hierarchy.

    Laurel does not separate statements from expressions: a Block is an
    expression whose value is its last statement, an Assign can be nested in
    a call argument, and so on.
    """
    __slots__ = ()


# --- Statement-like ---

@dataclass(frozen=True, slots=True)
class IfThenElse(StmtExpr):
    cond: StmtExpr
    then_branch: StmtExpr
    else_branch: StmtExpr | None = None


@dataclass(frozen=True, slots=True)
class Block(StmtExpr):
    statements: tuple[StmtExpr, ...] = ()
    label: str | None = None


@dataclass(frozen=True, slots=True)
class LocalVariable(StmtExpr):
    name: str
    type: HighType
    initializer: StmtExpr | None = None


@dataclass(frozen=True, slots=True)
class While(StmtExpr):
    cond: StmtExpr
    invariant: StmtExpr | None
    decreases: StmtExpr | None
    body: StmtExpr


@dataclass(frozen=True, slots=True)
class Exit(StmtExpr):
    """Leaves the enclosing block carrying the given label."""
    target: str


@dataclass(frozen=True, slots=True)
class Return(StmtExpr):
    value: StmtExpr | None = None


# --- Expression-like ---

@dataclass(frozen=True, slots=True)
class LiteralInt(StmtExpr):
    value: int


@dataclass(frozen=True, slots=True)
class LiteralBool(StmtExpr):
    value: bool


@dataclass(frozen=True, slots=True)
class Identifier(StmtExpr):
    name: str


@dataclass(frozen=True, slots=True)
class Assign(StmtExpr):
    target: StmtExpr
    value: StmtExpr


@dataclass(frozen=True, slots=True)
class FieldSelect(StmtExpr):
    target: StmtExpr
    field_name: str


@dataclass(frozen=True, slots=True)
class PureFieldUpdate(StmtExpr):
    """Returns a copy of ``target`` with one field replaced."""
    target: StmtExpr
    field_name: str
    new_value: StmtExpr


@dataclass(frozen=True, slots=True)
class StaticCall(StmtExpr):
    callee: str
    arguments: tuple[StmtExpr, ...] = ()


@dataclass(frozen=True, slots=True)
class PrimitiveOp(StmtExpr):
    operator: Operation
    arguments: tuple[StmtExpr, ...] = ()


# --- Instance-related ---

@dataclass(frozen=True, slots=True)
class This(StmtExpr):
    pass


@dataclass(frozen=True, slots=True)
class ReferenceEquals(StmtExpr):
    lhs: StmtExpr
    rhs: StmtExpr


@dataclass(frozen=True, slots=True)
class AsType(StmtExpr):
    target: StmtExpr
    target_type: HighType


@dataclass(frozen=True, slots=True)
class IsType(StmtExpr):
    target: StmtExpr
    type: HighType


@dataclass(frozen=True, slots=True)
class InstanceCall(StmtExpr):
    target: StmtExpr
    callee: str
    arguments: tuple[StmtExpr, ...] = ()


# --- Verification-specific ---

@dataclass(frozen=True, slots=True)
class Forall(StmtExpr):
    name: str
    type: HighType
    body: StmtExpr


@dataclass(frozen=True, slots=True)
class Exists(StmtExpr):
    name: str
    type: HighType
    body: StmtExpr


@dataclass(frozen=True, slots=True)
class Assigned(StmtExpr):
    name: StmtExpr


@dataclass(frozen=True, slots=True)
class Old(StmtExpr):
    value: StmtExpr


@dataclass(frozen=True, slots=True)
class Fresh(StmtExpr):
    value: StmtExpr


# --- Proof-related ---

@dataclass(frozen=True, slots=True)
class Assert(StmtExpr):
    condition: StmtExpr


@dataclass(frozen=True, slots=True)
class Assume(StmtExpr):
    condition: StmtExpr


@dataclass(frozen=True, slots=True)
class ProveBy(StmtExpr):
    value: StmtExpr
    proof: StmtExpr


@dataclass(frozen=True, slots=True)
class ContractOf(StmtExpr):
    type: ContractType
    function: StmtExpr


@dataclass(frozen=True, slots=True)
class Abstract(StmtExpr):
    pass


@dataclass(frozen=True, slots=True)
class All(StmtExpr):
    pass


@dataclass(frozen=True, slots=True)
class Hole(StmtExpr):
    pass


# --- Declarations ---

@dataclass(frozen=True, slots=True)
class Parameter:
    name: str
    type: HighType


@dataclass(frozen=True, slots=True)
class Field:
    name: str
    is_mutable: bool
    type: HighType


class Body:
    """Base of the procedure body variants."""
    __slots__ = ()


@dataclass(frozen=True, slots=True)
class Transparent(Body):
    """Implementation visible to callers."""
    body: StmtExpr


@dataclass(frozen=True, slots=True)
class Opaque(Body):
    """
    Callers only see the postcondition. The optional implementation is used
    to verify the procedure itself.
    """
    postcondition: StmtExpr
    implementation: StmtExpr | None = None


@dataclass(frozen=True, slots=True)
class AbstractBody(Body):
    """No implementation; subtypes must provide one."""
    postcondition: StmtExpr


@dataclass(frozen=True, slots=True)
class Procedure:
    name: str
    inputs: tuple[Parameter, ...]
    output: HighType
    precondition: StmtExpr
    decreases: StmtExpr
    deterministic: bool
    reads: StmtExpr | None
    modifies: StmtExpr
    body: Body


@dataclass(frozen=True, slots=True)
class CompositeType:
    name: str
    extending: tuple[str, ...] = ()
    fields: tuple[Field, ...] = ()
    instance_procedures: tuple[Procedure, ...] = ()


@dataclass(frozen=True, slots=True)
class ConstrainedType:
    """
    A refinement of ``base``: values ``value_name`` of the base type for which
    ``constraint`` holds. ``witness`` proves the type is inhabited.
    """
    name: str
    base: HighType
    value_name: str
    constraint: StmtExpr
    witness: StmtExpr


class TypeDefinition:
    __slots__ = ()


@dataclass(frozen=True, slots=True)
class Composite(TypeDefinition):
    type: CompositeType


@dataclass(frozen=True, slots=True)
class Constrained(TypeDefinition):
    type: ConstrainedType


@dataclass(frozen=True, slots=True)
class Program:
    """Root of a Laurel AST."""
    static_procedures: tuple[Procedure, ...] = ()
    static_fields: tuple[Field, ...] = ()
    types: tuple[TypeDefinition, ...] = ()

    @classmethod
    def empty(cls) -> "Program":
        return cls()
