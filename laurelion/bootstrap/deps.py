import json
from functools import lru_cache

from pydantic import ValidationError

from laurelion.bootstrap.config.settings import LaurelionConfig
from laurelion.core.ports.container import Container
from laurelion.core.serializer import LaurelSerializer
from laurelion.infra.ion_container import IonContainer
from laurelion.infra.msgpack_container import MsgPackContainer

CONTAINERS: dict[str, type[Container]] = {
    IonContainer.name: IonContainer,
    MsgPackContainer.name: MsgPackContainer,
}


@lru_cache
def get_config() -> LaurelionConfig:
    try:
        return LaurelionConfig()
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(part) for part in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


@lru_cache
def get_container(fmt: str) -> Container:
    try:
        return CONTAINERS[fmt]()
    except KeyError:
        raise ValueError(f"Unknown container format '{fmt}', expected one of: {', '.join(CONTAINERS)}")


@lru_cache
def get_serializer(fmt: str | None = None) -> LaurelSerializer:
    config = get_config()
    return LaurelSerializer(
        container=get_container(fmt or config.codec.format),
        max_depth=config.codec.max_depth
    )
