from laurelion.core.models.ast import Program
from laurelion.core.serializer import LaurelSerializer
from laurelion.infra.ion_container import IonContainer

_serializer = LaurelSerializer(IonContainer())


def encode(program: Program) -> bytes:
    """Serialize a program into an Amazon Ion binary stream."""
    return _serializer.serialize(program)


def decode(data: bytes) -> Program:
    """
    Parse an Amazon Ion stream back into a program.

    Raises ContainerError when the stream itself is damaged and a DecodeError
    subclass when the tree does not follow the Laurel wire convention.
    """
    return _serializer.deserialize(data)
