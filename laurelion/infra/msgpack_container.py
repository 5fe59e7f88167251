import logging
from typing import Any, Sequence

import msgpack

from laurelion.core.models.errors import ContainerError
from laurelion.core.models.wire import Symbol, WireValue
from laurelion.core.ports.container import Container


class MsgPackContainer(Container):
    """
    MsgPack-based implementation of the Container interface.

    Layout:
        blob = msgpack(symbols) || msgpack(tree)

    - the header is the array of interned symbol texts, in id order
    - s-expressions are msgpack arrays
    - symbols are extension values (code SYMBOL_EXT) holding the packed id
    - strings, integers and nulls use the native msgpack types

    Compact and fast, but only understood by laurelion: use the Ion container
    to exchange trees with the Lean and Java implementations.
    """
    name = "msgpack"

    SYMBOL_EXT: int = 1

    def __init__(self) -> None:
        self._logger = logging.getLogger("infra.msgpack_container")

    def write(self, symbols: Sequence[str], root: WireValue) -> bytes:
        ids = {text: sid for sid, text in enumerate(symbols)}

        def default(obj: Any) -> Any:
            if isinstance(obj, Symbol):
                sid = ids.get(obj.text)
                if sid is None:
                    raise ContainerError(f"Symbol '{obj.text}' is missing from the symbol table")
                return msgpack.ExtType(self.SYMBOL_EXT, msgpack.packb(sid))
            raise TypeError(f"Cannot serialize {type(obj).__name__}")

        try:
            header = msgpack.packb(list(symbols), use_bin_type=True)
            body = msgpack.packb(root, default=default, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as ex:
            raise ContainerError(f"Failed to write msgpack container: {ex}") from ex

        self._logger.debug(f"Wrote {len(symbols)} symbols, {len(header) + len(body)} bytes")
        return header + body

    def read(self, data: bytes) -> WireValue:
        unpacker = msgpack.Unpacker(raw=False, use_list=False)
        unpacker.feed(data)

        try:
            header = unpacker.unpack()
        except msgpack.OutOfData as ex:
            raise ContainerError("Truncated msgpack container: missing symbol table") from ex
        except (msgpack.UnpackException, ValueError) as ex:
            raise ContainerError(f"Malformed msgpack symbol table: {ex}") from ex

        if not isinstance(header, tuple) or not all(isinstance(s, str) for s in header):
            raise ContainerError("The msgpack symbol table must be an array of strings")

        symbols: tuple[str, ...] = header

        def ext_hook(code: int, payload: bytes) -> Symbol:
            if code != self.SYMBOL_EXT:
                raise ContainerError(f"Unknown msgpack extension type {code}")
            sid = msgpack.unpackb(payload)
            if not isinstance(sid, int) or isinstance(sid, bool) or not 0 <= sid < len(symbols):
                raise ContainerError(f"Symbol id {sid!r} is outside the symbol table")
            return Symbol(symbols[sid])

        try:
            return msgpack.unpackb(
                data[unpacker.tell():],
                raw=False,
                use_list=False,
                ext_hook=ext_hook,
            )
        except ContainerError:
            raise
        except msgpack.ExtraData as ex:
            raise ContainerError("Trailing data after the msgpack tree") from ex
        except (msgpack.UnpackException, ValueError) as ex:
            raise ContainerError(f"Malformed msgpack tree: {ex}") from ex
