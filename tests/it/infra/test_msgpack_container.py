import msgpack
import pytest

from laurelion.core.codec.encoder import encode_program
from laurelion.core.models.errors import ContainerError
from laurelion.core.models.wire import Symbol
from tests.generators import sample_program

S = Symbol


def symbol_ext(sid: int) -> msgpack.ExtType:
    return msgpack.ExtType(1, msgpack.packb(sid))


@pytest.mark.it
def test_roundtrip_wire_tree(msgpack_container):
    encoded = encode_program(sample_program())
    data = msgpack_container.write(encoded.symbols, encoded.root)

    assert msgpack_container.read(data) == encoded.root


@pytest.mark.it
def test_header_is_the_symbol_table(msgpack_container):
    encoded = encode_program(sample_program())
    data = msgpack_container.write(encoded.symbols, encoded.root)

    unpacker = msgpack.Unpacker(raw=False)
    unpacker.feed(data)

    assert unpacker.unpack() == list(encoded.symbols)


@pytest.mark.it
def test_symbols_are_written_by_id(msgpack_container):
    data = msgpack_container.write(("a", "b"), (S("b"), None, "b"))

    assert data == msgpack.packb(["a", "b"]) + msgpack.packb([symbol_ext(1), None, "b"])


@pytest.mark.it
def test_symbol_missing_from_table(msgpack_container):
    with pytest.raises(ContainerError, match="missing from the symbol table"):
        msgpack_container.write(("a",), (S("b"),))


@pytest.mark.it
def test_unknown_symbol_id(msgpack_container):
    data = msgpack.packb(["a"]) + msgpack.packb([symbol_ext(5)])

    with pytest.raises(ContainerError, match="outside the symbol table"):
        msgpack_container.read(data)


@pytest.mark.it
def test_unknown_extension(msgpack_container):
    data = msgpack.packb(["a"]) + msgpack.packb([msgpack.ExtType(9, b"\x00")])

    with pytest.raises(ContainerError, match="extension type 9"):
        msgpack_container.read(data)


@pytest.mark.it
def test_trailing_bytes(msgpack_container):
    data = msgpack_container.write(("a",), (S("a"),)) + msgpack.packb(None)

    with pytest.raises(ContainerError, match="Trailing data"):
        msgpack_container.read(data)


@pytest.mark.it
def test_truncated_tree(msgpack_container):
    data = msgpack_container.write(("a",), (S("a"), None, "text"))

    with pytest.raises(ContainerError):
        msgpack_container.read(data[:-2])


@pytest.mark.it
def test_empty_blob(msgpack_container):
    with pytest.raises(ContainerError, match="missing symbol table"):
        msgpack_container.read(b"")


@pytest.mark.it
def test_header_must_be_strings(msgpack_container):
    data = msgpack.packb([1, 2]) + msgpack.packb(None)

    with pytest.raises(ContainerError, match="array of strings"):
        msgpack_container.read(data)
