"""
Static tag table shared by the encoder and the decoder.

Every AST variant maps to exactly one fully qualified wire tag, per category.
The encoder reads the table forwards (variant -> tag) and the decoder reads
it backwards (tag -> variant), so a variant cannot be known to one side only.
"""
from typing import Generic, Hashable, Iterator, TypeVar

from laurelion.core.models.ast import (
    HighType, TVoid, TBool, TInt, TFloat64, UserDefined, Applied, Pure, Intersection,
    Operation, ContractType,
    IfThenElse, Block, LocalVariable, While, Exit, Return,
    LiteralInt, LiteralBool, Identifier, Assign, FieldSelect, PureFieldUpdate,
    StaticCall, PrimitiveOp, This, ReferenceEquals, AsType, IsType, InstanceCall,
    Forall, Exists, Assigned, Old, Fresh, Assert, Assume, ProveBy, ContractOf,
    Abstract, All, Hole,
    Transparent, Opaque, AbstractBody,
    Composite, Constrained,
    Program, Procedure, Parameter, Field, CompositeType, ConstrainedType,
)

LAUREL = "Laurel"

K = TypeVar("K", bound=Hashable)


def laurel(name: str) -> str:
    return f"{LAUREL}.{name}"


class TagTable(Generic[K]):
    """
    Bidirectional mapping between the variants of one category and their
    wire tags. Tags must be unique inside a category; the same tag may be
    reused across categories (``Laurel.Abstract`` is both a statement and a
    body variant) because the decoder always knows which category it expects.
    """
    def __init__(self, category: str, entries: dict[K, str]) -> None:
        self.category = category
        self._by_key: dict[K, str] = dict(entries)
        self._by_tag: dict[str, K] = {}

        for key, tag in self._by_key.items():
            if tag in self._by_tag:
                raise ValueError(f"Duplicate tag '{tag}' in category '{category}'")
            self._by_tag[tag] = key

    def tag(self, key: K) -> str:
        return self._by_key[key]

    def lookup(self, tag: str) -> K | None:
        return self._by_tag.get(tag)

    def tags(self) -> list[str]:
        return list(self._by_tag)

    def __iter__(self) -> Iterator[K]:
        return iter(self._by_key)

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key


TYPES: TagTable[type[HighType]] = TagTable("type", {
    TVoid: laurel("TVoid"),
    TBool: laurel("TBool"),
    TInt: laurel("TInt"),
    TFloat64: laurel("TFloat64"),
    UserDefined: laurel("UserDefined"),
    Applied: laurel("Applied"),
    Pure: laurel("Pure"),
    Intersection: laurel("Intersection"),
})

OPERATIONS: TagTable[Operation] = TagTable(
    "operation", {op: laurel(op.value) for op in Operation}
)

CONTRACTS: TagTable[ContractType] = TagTable(
    "contract type", {ct: laurel(ct.value) for ct in ContractType}
)

STMTS: TagTable[type] = TagTable("statement/expression", {
    IfThenElse: laurel("IfThenElse"),
    Block: laurel("Block"),
    LocalVariable: laurel("LocalVariable"),
    While: laurel("While"),
    Exit: laurel("Exit"),
    Return: laurel("Return"),
    LiteralInt: laurel("LiteralInt"),
    LiteralBool: laurel("LiteralBool"),
    Identifier: laurel("Identifier"),
    Assign: laurel("Assign"),
    FieldSelect: laurel("FieldSelect"),
    PureFieldUpdate: laurel("PureFieldUpdate"),
    StaticCall: laurel("StaticCall"),
    PrimitiveOp: laurel("PrimitiveOp"),
    This: laurel("This"),
    ReferenceEquals: laurel("ReferenceEquals"),
    AsType: laurel("AsType"),
    IsType: laurel("IsType"),
    InstanceCall: laurel("InstanceCall"),
    Forall: laurel("Forall"),
    Exists: laurel("Exists"),
    Assigned: laurel("Assigned"),
    Old: laurel("Old"),
    Fresh: laurel("Fresh"),
    Assert: laurel("Assert"),
    Assume: laurel("Assume"),
    ProveBy: laurel("ProveBy"),
    ContractOf: laurel("ContractOf"),
    Abstract: laurel("Abstract"),
    All: laurel("All"),
    Hole: laurel("Hole"),
})

BODIES: TagTable[type] = TagTable("body", {
    Transparent: laurel("Transparent"),
    Opaque: laurel("Opaque"),
    AbstractBody: laurel("Abstract"),
})

TYPE_DEFINITIONS: TagTable[type] = TagTable("type definition", {
    Composite: laurel("Composite"),
    # Spelled as the Lean reader defines it. Do not correct.
    Constrained: laurel("Constrainted"),
})

DECLARATIONS: TagTable[type] = TagTable("declaration", {
    Program: laurel("Program"),
    Procedure: laurel("Procedure"),
    Parameter: laurel("Parameter"),
    Field: laurel("Field"),
    CompositeType: laurel("CompositeType"),
    ConstrainedType: laurel("ConstrainedType"),
})
