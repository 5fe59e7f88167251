class LaurelIonError(Exception):
    """Base class for every failure raised by laurelion."""


class ContainerError(LaurelIonError):
    """
    The binary container could not be written or parsed: damaged framing,
    an unreadable symbol table, trailing data or an unsupported value type.
    """


class DecodeError(LaurelIonError):
    """
    The container was well formed but the tree it holds does not follow the
    Laurel wire convention. ``construct`` names what was being parsed.
    """
    def __init__(self, construct: str, message: str) -> None:
        super().__init__(f"{construct}: {message}")
        self.construct = construct


class ArityError(DecodeError):
    def __init__(self, construct: str, expected: str, actual: int) -> None:
        super().__init__(construct, f"expected {expected} elements, found {actual}")
        self.expected = expected
        self.actual = actual


class UnknownTagError(DecodeError):
    def __init__(self, construct: str, tag: str) -> None:
        super().__init__(construct, f"unrecognized tag '{tag}'")
        self.tag = tag


class TypeMismatchError(DecodeError):
    """A field holds a different kind of node than its declared type."""


class ShapeError(DecodeError):
    """An ``option`` or ``seq`` wrapper does not follow its layout."""


class DepthError(DecodeError):
    def __init__(self, construct: str, limit: int) -> None:
        super().__init__(construct, f"nesting exceeds the maximum depth of {limit}")
        self.limit = limit
