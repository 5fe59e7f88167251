import logging
import sys

LOG_FORMAT = '%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s'


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
    )


def ensure_recursion_limit(limit: int) -> None:
    """
    Raise the interpreter recursion limit to at least ``limit``.

    The limit is only ever raised, never lowered, so concurrent callers
    cannot pull it out from under each other.
    """
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)
