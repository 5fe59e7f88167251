import os
from typing import Generator

import pytest
import yaml

from laurelion.bootstrap import deps
from laurelion.bootstrap.config import loader
from laurelion.core.codec.decoder import Decoder
from laurelion.core.codec.encoder import Encoder
from laurelion.core.models.ast import Program
from laurelion.core.serializer import LaurelSerializer
from laurelion.infra.ion_container import IonContainer
from laurelion.infra.msgpack_container import MsgPackContainer
from tests.generators import sample_program


@pytest.fixture
def encoder() -> Encoder:
    return Encoder()


@pytest.fixture
def decoder() -> Decoder:
    return Decoder()


@pytest.fixture
def ion_container() -> IonContainer:
    return IonContainer()


@pytest.fixture
def msgpack_container() -> MsgPackContainer:
    return MsgPackContainer()


@pytest.fixture(params=["ion", "msgpack"])
def serializer(request) -> LaurelSerializer:
    container = IonContainer() if request.param == "ion" else MsgPackContainer()
    return LaurelSerializer(container)


@pytest.fixture
def program() -> Program:
    return sample_program()


@pytest.fixture
def config_file(tmp_path):
    file = tmp_path / "laurelion.yaml"

    data = {
        "codec": {
            "format": "msgpack",
            "max_depth": 64,
        },
        "log_level": "DEBUG",
    }

    file.write_text(yaml.dump(data))
    return file


@pytest.fixture
def clean_env(monkeypatch, tmp_path) -> Generator[None, None, None]:
    """Isolate configuration lookups from the caller's environment and cwd."""
    for key in list(os.environ):
        if key.startswith("LAURELION"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)

    loader.set_cli_configfile(None)
    deps.get_config.cache_clear()
    deps.get_serializer.cache_clear()

    try:
        yield
    finally:
        loader.set_cli_configfile(None)
        deps.get_config.cache_clear()
        deps.get_serializer.cache_clear()
