import logging

import pytest

from laurelion.core.codec.encoder import encode_program
from laurelion.core.models.ast import Program
from laurelion.core.models.errors import DepthError, UnknownTagError
from laurelion.core.models.wire import Symbol
from laurelion.core.serializer import LaurelSerializer
from tests.fake.fake_container import FakeContainer


@pytest.fixture
def container() -> FakeContainer:
    return FakeContainer()


@pytest.mark.ut
def test_serialize_hands_symbols_and_tree_to_container(container, program):
    data = LaurelSerializer(container).serialize(program)
    expected = encode_program(program)

    assert container.frames == [(expected.symbols, expected.root)]
    assert data.startswith(b"(Laurel.Program null")


@pytest.mark.ut
def test_every_call_starts_a_fresh_session(container):
    serializer = LaurelSerializer(container)
    serializer.serialize(Program.empty())
    serializer.serialize(Program.empty())

    first, second = container.frames
    assert first == second
    assert first[0] == ("Laurel.Program", "seq")


@pytest.mark.ut
def test_deserialize(container, program):
    serializer = LaurelSerializer(container)
    assert serializer.deserialize(serializer.serialize(program)) == program


@pytest.mark.ut
def test_decode_errors_propagate(container, caplog):
    container.next_read = (Symbol("Laurel.Nope"), None)

    with caplog.at_level(logging.DEBUG, logger="core.serializer"):
        with pytest.raises(UnknownTagError):
            LaurelSerializer(container).deserialize(b"")

    assert "Rejected fake tree" in caplog.text


@pytest.mark.ut
def test_serialize_logs_sizes(container, caplog):
    with caplog.at_level(logging.DEBUG, logger="core.serializer"):
        LaurelSerializer(container).serialize(Program.empty())

    assert "2 symbols" in caplog.text
    assert "(fake)" in caplog.text


@pytest.mark.ut
def test_max_depth_is_forwarded(container, program):
    serializer = LaurelSerializer(container, max_depth=3)
    serializer.serialize(program)

    with pytest.raises(DepthError) as ex:
        serializer.deserialize(b"")
    assert "maximum depth of 3" in str(ex.value)
