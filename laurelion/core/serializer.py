import logging

from laurelion.core.codec.decoder import Decoder
from laurelion.core.codec.encoder import Encoder, EncodedProgram
from laurelion.core.models.ast import Program
from laurelion.core.models.errors import DecodeError
from laurelion.core.models.wire import WireValue
from laurelion.core.ports.container import Container


class LaurelSerializer:
    """
    Turns Laurel programs into bytes and back.

    Producer side:
        Program -> Encoder -> (wire tree, symbols) -> Container -> bytes
    Consumer side:
        bytes -> Container -> wire tree -> Decoder -> Program

    Every ``serialize`` call opens a fresh encode session, so one serializer
    can be shared between threads. Errors are never swallowed: container
    failures raise ContainerError and structural failures raise a DecodeError
    subclass naming the construct that could not be parsed.
    """
    def __init__(self, container: Container, max_depth: int = Decoder.DEFAULT_MAX_DEPTH) -> None:
        self._container = container
        self._decoder = Decoder(max_depth=max_depth)
        self._logger = logging.getLogger("core.serializer")

    @property
    def container(self) -> Container:
        return self._container

    def encode(self, program: Program) -> EncodedProgram:
        return Encoder().encode(program)

    def serialize(self, program: Program) -> bytes:
        encoded = self.encode(program)
        self._decoder.ensure_stack()
        data = self._container.write(encoded.symbols, encoded.root)
        self._logger.debug(
            f"Serialized program: {len(encoded.symbols)} symbols, "
            f"{len(data)} bytes ({self._container.name})"
        )
        return data

    def read_tree(self, data: bytes) -> WireValue:
        self._decoder.ensure_stack()
        return self._container.read(data)

    def decode_tree(self, root: WireValue) -> Program:
        try:
            return self._decoder.decode(root)
        except DecodeError as ex:
            self._logger.debug(f"Rejected {self._container.name} tree: {ex}")
            raise

    def deserialize(self, data: bytes) -> Program:
        program = self.decode_tree(self.read_tree(data))
        self._logger.debug(
            f"Deserialized program from {len(data)} bytes: "
            f"{len(program.static_procedures)} procedures, "
            f"{len(program.static_fields)} fields, {len(program.types)} types"
        )
        return program
