import argparse
import functools
import logging
import sys
from pathlib import Path
from typing import Callable, Protocol

from laurelion.bootstrap.config.loader import set_cli_configfile
from laurelion.bootstrap.deps import CONTAINERS, get_config, get_serializer
from laurelion.core.helpers.utils import setup_logging
from laurelion.core.models.errors import LaurelIonError
from laurelion.core.models.wire import render
from laurelion.core.pretty import PrettyPrinter

logger = logging.getLogger("bootstrap.cli")


class CommandHandler(Protocol):
    def __call__(self, namespace: argparse.Namespace) -> str:
        ...


class CommandDispatcher:
    def __init__(self) -> None:
        self._commands: dict[str, CommandHandler] = {}

    def dispatch(self, name: str, namespace: argparse.Namespace) -> str:
        command = self._commands.get(name)
        if command is None:
            raise RuntimeError(f"Unknown '{name}' Command")
        return command(namespace)

    def command(self, name: str) -> Callable[[CommandHandler], CommandHandler]:
        def decorator(func: CommandHandler) -> CommandHandler:

            @functools.wraps(func)
            def wrapper(namespace: argparse.Namespace) -> str:
                return func(namespace)

            self._commands[name] = wrapper

            return wrapper

        return decorator


dispatcher = CommandDispatcher()


@dispatcher.command("decode")
def cmd_decode(namespace: argparse.Namespace) -> str:
    serializer = get_serializer(namespace.format)
    program = serializer.deserialize(namespace.file.read_bytes())
    return PrettyPrinter().program(program)


@dispatcher.command("dump")
def cmd_dump(namespace: argparse.Namespace) -> str:
    serializer = get_serializer(namespace.format)
    return render(serializer.read_tree(namespace.file.read_bytes()))


@dispatcher.command("convert")
def cmd_convert(namespace: argparse.Namespace) -> str:
    source = get_serializer(namespace.format)
    target = get_serializer(namespace.to)

    program = source.deserialize(namespace.file.read_bytes())
    data = target.serialize(program)
    namespace.out.write_bytes(data)

    return f"Wrote {len(data)} bytes to {namespace.out} ({target.container.name})"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="laurelctl",
        description=(
            "Inspect and convert serialized Laurel programs.\n\n"
            "Reads the Amazon Ion streams exchanged with the Lean and Java\n"
            "implementations, or the laurelion msgpack container."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a laurelion configuration file"
    )

    parser.add_argument(
        "-f", "--format",
        type=str,
        choices=list(CONTAINERS),
        help="Container format of the input file (defaults to codec.format from the configuration)"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity.\n"
            "Defaults to log_level from the configuration (WARNING).\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    sub = parser.add_subparsers(dest="command", required=True)

    decode = sub.add_parser("decode", help="Print a serialized program in readable form")
    decode.add_argument("file", type=Path)

    dump = sub.add_parser("dump", help="Print the raw s-expression tree of a serialized program")
    dump.add_argument("file", type=Path)

    convert = sub.add_parser("convert", help="Re-encode a serialized program in another container")
    convert.add_argument("file", type=Path)
    convert.add_argument("out", type=Path)
    convert.add_argument("--to", choices=list(CONTAINERS), required=True)

    return parser


def main(argv: list[str] | None = None) -> int:
    namespace = build_parser().parse_args(argv)

    set_cli_configfile(namespace.config)
    config = get_config()
    setup_logging(namespace.log_level or config.log_level)

    try:
        print(dispatcher.dispatch(namespace.command, namespace))
    except (LaurelIonError, OSError) as ex:
        logger.debug(f"{namespace.command} failed", exc_info=ex)
        print(f"laurelctl {namespace.command}: {ex}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
