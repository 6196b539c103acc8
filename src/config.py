import argparse
from enum import StrEnum
import os
import re
import sys
import typing as t
from datetime import timedelta
from pathlib import Path

from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    HttpUrl,
    RedisDsn,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

PORT = t.Annotated[int, Field(gt=0, le=65535)]

_TIMEDELTA_UNITS = {"d": "days", "h": "hours", "m": "minutes", "s": "seconds"}


def _parse_timedelta(delta: str | timedelta) -> timedelta:
    """Transforms strings like 5d / 1h / 90m / 1.5h into timedelta"""
    if isinstance(delta, timedelta):
        return delta
    match = re.fullmatch(r"(\d+(?:\.\d+)?)([a-zA-Z])", delta.strip())
    assert match, "Invalid timedelta format: %s" % delta
    number, unit = match.groups()
    assert unit in _TIMEDELTA_UNITS, "Unknown unit: %s" % unit
    return timedelta(**{_TIMEDELTA_UNITS[unit]: float(number)})


ParsableTimedelta = t.Annotated[timedelta, BeforeValidator(_parse_timedelta)]


class ConfigMode(StrEnum):
    LOCAL = "local"
    TESTS = "tests"
    PROD = "prod"


class _HTTPSessions(BaseModel):
    key: str = "session_id"
    # lifetime of both the session cookie and the stored cart
    ttl: ParsableTimedelta = timedelta(days=5)


class _Server(BaseModel):
    host: str = "0.0.0.0"
    port: PORT = 8000
    ssl_enabled: bool = True
    sessions: _HTTPSessions = Field(default_factory=_HTTPSessions)

    @property
    def addr(self) -> str:
        scheme = "https" if self.ssl_enabled else "http"
        return f"{scheme}://{self.host}:{self.port}"


class _Catalog(BaseModel):
    base_url: HttpUrl


class _Uploads(BaseModel):
    dir: Path = Path("media")
    max_file_size: int = Field(default=5 * 1024 * 1024, gt=0)


class Config(BaseSettings):
    model_config = SettingsConfigDict(extra="allow", env_nested_delimiter="__")
    api_version: str = "1.0.0"
    mode: ConfigMode
    server: _Server = Field(default_factory=_Server)
    uploads: _Uploads = Field(default_factory=_Uploads)
    catalog: _Catalog
    redis_dsn: RedisDsn
    cart_storage: t.Literal["redis", "memory"] = "redis"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_file = init_settings.init_kwargs.get("yaml_file")  # type: ignore
        if not yaml_file:
            raise Exception("Missing required init arg: yaml_file")
        # env vars take precedence over values from yaml
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file),
        )

    @property
    def debug(self) -> bool:
        return self.mode != ConfigMode.PROD


def _parse_cli_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(allow_abbrev=False)
    parser.add_argument(
        "--config-path", help="Path to the configuration file", dest="config_path"
    )
    parser.add_argument("--host", help="Server host", dest="host")
    parser.add_argument("--port", type=int, help="Server port", dest="port")
    args, _ = parser.parse_known_args(sys.argv[1:])
    return args


def _find_config_path(explicit_path: Path | str | None) -> Path:
    if explicit_path:
        path = Path(explicit_path)
    elif env_mode := os.environ.get("MODE"):
        path = Path("config") / f"{env_mode}.yaml"
    else:
        raise ValueError(
            "Missing config path. Provide it with --config-path flag, "
            "a function arg or MODE env variable to pick config/<mode>.yaml"
        )
    if not path.exists():
        raise ValueError("Config path doesn't exist: %s" % path)
    return path


def init_config(
    parse_cli: bool = True, config_path: Path | str | None = None
) -> Config:
    cli_args = _parse_cli_args() if parse_cli else None
    yaml_file = _find_config_path(
        config_path or getattr(cli_args, "config_path", None)
    )
    cfg = Config(yaml_file=yaml_file)  # type: ignore
    if cli_args:
        cfg.server.host = cli_args.host or cfg.server.host
        cfg.server.port = cli_args.port or cfg.server.port
    return cfg
