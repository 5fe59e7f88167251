import os
from pathlib import Path

CONFIG_ENV = "LAURELIONCONFIG"
DEFAULT_CONFIG_NAME = "laurelion.yaml"

_cli_configfile: str | None = None


def set_cli_configfile(path: str | None) -> None:
    global _cli_configfile
    _cli_configfile = path


def get_configfile() -> Path | None:
    # Priority: CLI > ENV > default file in current working directory
    raw = _cli_configfile or os.getenv(CONFIG_ENV)

    if raw is None:
        default = Path.cwd() / DEFAULT_CONFIG_NAME
        return default if default.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            f"  - Or set the {CONFIG_ENV} environment variable\n"
            f"  - Or place a '{DEFAULT_CONFIG_NAME}' file in the current working directory."
        )

    return file
