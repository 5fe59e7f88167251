from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from laurelion.bootstrap.config.loader import get_configfile
from laurelion.core.codec.decoder import Decoder


class CodecSettings(BaseModel):
    format: Annotated[
        Literal["ion", "msgpack"],
        Field(
            description=(
                "Container used to frame encoded programs.\n"
                "'ion' is the Amazon Ion binary stream shared with the Lean and Java\n"
                "implementations. 'msgpack' is a compact laurelion-only alternative."
            ),
            default="ion"
        )
    ]

    max_depth: Annotated[
        int,
        Field(
            description=(
                "Maximum s-expression nesting accepted when decoding.\n"
                "Deeper trees are rejected with a decode error before parsing starts."
            ),
            default=Decoder.DEFAULT_MAX_DEPTH,
            gt=0
        )
    ]


class LaurelionConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LAURELION_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    codec: Annotated[
        CodecSettings,
        Field(
            description="Encoding and decoding options.",
            default_factory=CodecSettings
        )
    ]

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(
            description="Logging verbosity used when no --log-level is given.",
            default="WARNING"
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: tuple[PydanticBaseSettingsSource, ...] = (init_settings, env_settings)
        configfile = get_configfile()
        if configfile is not None:
            sources += (YamlConfigSettingsSource(settings_cls, yaml_file=configfile),)
        return sources
