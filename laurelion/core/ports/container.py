from typing import Protocol, Sequence

from laurelion.core.models.wire import WireValue


class Container(Protocol):
    """
    Defines the binary envelope around an encoded Laurel tree.

    Implementations must be:
    - deterministic: the same symbols and tree always give the same bytes
    - self-contained: the symbol table travels with the value and precedes it
    - strict on read: damaged framing raises ContainerError, never a partial tree
    """

    name: str

    def write(self, symbols: Sequence[str], root: WireValue) -> bytes:
        """Frame the symbol table and the wire tree into one blob."""

    def read(self, data: bytes) -> WireValue:
        """Parse a blob into a wire tree whose symbols are resolved to text."""
