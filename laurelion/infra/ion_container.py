import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Sequence

from amazon.ion import simpleion
from amazon.ion.core import IonType
from amazon.ion.exceptions import IonException
from amazon.ion.simple_types import IonPyList, IonPyNull, IonPySymbol

from laurelion.core.models.errors import ContainerError
from laurelion.core.models.wire import Symbol, WireValue
from laurelion.core.ports.container import Container


class IonContainer(Container):
    """
    Amazon Ion binary implementation of the Container interface.

    This is the interchange format shared with the Lean and Java sides:
    - a binary Ion stream holding exactly one top-level s-expression
    - the local symbol table is written by the Ion writer ahead of the value,
      listing symbols in first-use order, which is the order the encoder
      interned them
    - strings, integers and nulls map to the native Ion types

    Reading accepts binary or text Ion and resolves every symbol id back to
    its text before the tree is returned. Ion values outside that vocabulary
    (bools, floats, decimals, timestamps, lobs, lists, structs) come back as
    plain Python values. Lists stay Python lists so they are never mistaken
    for s-expressions. The decoder ignores them in the annotation slot and
    rejects them everywhere else.
    """
    name = "ion"

    def __init__(self) -> None:
        self._logger = logging.getLogger("infra.ion_container")

    def write(self, symbols: Sequence[str], root: WireValue) -> bytes:
        self._logger.debug(f"Writing Ion stream with {len(symbols)} local symbols")
        try:
            return simpleion.dumps(self._to_ion(root), binary=True)
        except (IonException, TypeError, ValueError) as ex:
            raise ContainerError(f"Failed to write Ion stream: {ex}") from ex

    def read(self, data: bytes) -> WireValue:
        try:
            values = simpleion.loads(data, single_value=False)
        except (IonException, ValueError) as ex:
            raise ContainerError(f"Malformed Ion stream: {ex}") from ex

        if len(values) != 1:
            raise ContainerError(f"Expected exactly one top-level Ion value, found {len(values)}")

        return self._from_ion(values[0])

    def _to_ion(self, value: Any) -> Any:
        if isinstance(value, tuple):
            return IonPyList.from_value(IonType.SEXP, [self._to_ion(v) for v in value])
        if isinstance(value, Symbol):
            return IonPySymbol.from_value(IonType.SYMBOL, value.text)
        if isinstance(value, list):
            return [self._to_ion(v) for v in value]
        if isinstance(value, dict):
            return {key: self._to_ion(v) for key, v in value.items()}
        if value is None or isinstance(value, (str, int, float, Decimal, bytes, datetime)):
            return value
        raise ContainerError(f"Cannot write {type(value).__name__} as an Ion value")

    def _from_ion(self, value: Any) -> Any:
        if value is None or isinstance(value, IonPyNull):
            return None

        ion_type = getattr(value, "ion_type", None)

        match ion_type:
            case IonType.SEXP:
                return tuple([self._from_ion(v) for v in value])
            case IonType.SYMBOL:
                if value.text is None:
                    raise ContainerError("Ion symbol without resolvable text")
                return Symbol(value.text)
            case IonType.STRING:
                return str(value)
            case IonType.BOOL:
                return bool(value)
            case IonType.INT:
                return int(value)
            case IonType.FLOAT:
                return float(value)
            case IonType.DECIMAL:
                return Decimal(value)
            case IonType.TIMESTAMP:
                return value
            case IonType.CLOB | IonType.BLOB:
                return bytes(value)
            case IonType.LIST:
                return [self._from_ion(v) for v in value]
            case IonType.STRUCT:
                return {key: self._from_ion(v) for key, v in value.items()}
            case _:
                raise ContainerError(f"Unexpected value in Ion stream: {value!r}")
