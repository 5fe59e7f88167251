from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class Symbol:
    """
    A symbol on the wire. Containers transmit symbols through their symbol
    table; by the time a tree reaches the decoder every symbol carries its
    resolved text.
    """
    text: str

    def __str__(self) -> str:
        return self.text


WireValue: TypeAlias = "Symbol | str | int | None | tuple[WireValue, ...]"
"""
A node of the wire tree:
    Symbol  -> symbol (tag or keyword)
    str     -> string leaf payload
    int     -> integer leaf payload
    None    -> annotation slot
    tuple   -> s-expression

A container may also hand back plain Python values for data outside this
vocabulary (bool, float, Decimal, bytes, list, dict). The decoder ignores
them in the annotation slot and rejects them anywhere else.
"""

ANNOTATION: None = None
"""
Value emitted in the annotation slot of every shape. Readers accept any
value in that position and never interpret it.
"""

IDENT = "ident"
OP = "op"
STRLIT = "strlit"
NUM = "num"
OPTION = "option"
SEQ = "seq"

TRUE = "Init.true"
FALSE = "Init.false"

KEYWORDS: frozenset[str] = frozenset({IDENT, OP, STRLIT, NUM, OPTION, SEQ, TRUE, FALSE})


def is_qualified(text: str) -> bool:
    """Tags are two-part dotted names such as ``Laurel.Block``."""
    head, sep, tail = text.partition(".")
    return bool(sep and head and tail and "." not in tail)


def render(value: WireValue) -> str:
    """
    Text form of a wire tree, in Ion text notation for s-expressions.
    Used for diagnostics and the ``dump`` command.
    """
    if isinstance(value, tuple):
        return "(" + " ".join(render(v) for v in value) + ")"
    if isinstance(value, Symbol):
        return value.text
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(render(v) for v in value) + "]"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{k}: {render(v)}" for k, v in value.items()) + "}"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)
