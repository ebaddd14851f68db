"""Application configuration read from YAML with environment overrides."""

from __future__ import annotations

import argparse
import dataclasses
import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

CONFIG_FILE_KEY = "configFile"
CONFIG_FILE_USAGE = "this is config file path"

# Each (section, key) is overridden by the environment variable SECTION_KEY.
ENV_BINDINGS = (
    ("app", "port"),
    ("db", "name"),
    ("db", "user"),
    ("db", "host"),
    ("db", "port"),
    ("db", "password"),
)

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"", "0", "f", "F", "FALSE", "false", "False"}
_TYPE_NAMES = {int: "int", bool: "bool", str: "string"}


class ConfigError(Exception):
    """The configuration could not be read or parsed."""


def _convert(kind: type, value: Any, path: str) -> Any:
    if dataclasses.is_dataclass(kind):
        return _decode(kind, value, path)
    if value is None:
        return kind()
    if isinstance(value, (bool, int, float)):
        if kind is str:
            return ("1" if value else "0") if isinstance(value, bool) else str(value)
        return kind(value)
    if isinstance(value, str):
        if kind is str:
            return value
        if kind is bool and value in _TRUE_WORDS | _FALSE_WORDS:
            return value in _TRUE_WORDS
        if kind is int:
            if value == "":
                return 0
            for base in (0, 10):
                try:
                    return int(value, base)
                except ValueError:
                    pass
    raise ConfigError(
        f"Unable to parse app config file: '{path}' expected type '{_TYPE_NAMES[kind]}', "
        f"got unconvertible type '{type(value).__name__}', value: '{value}'"
    )


def _decode(cls: type, data: Any, path: str) -> Any:
    data = {} if data is None else data
    if not isinstance(data, Mapping):
        raise ConfigError(
            f"Unable to parse app config file: '{path}' expected a map, "
            f"got unconvertible type '{type(data).__name__}', value: '{data}'"
        )
    values = {}
    for spec in dataclasses.fields(cls):
        key = spec.metadata["key"]
        if key in data:
            child = f"{path}.{key}" if path else key
            values[spec.name] = _convert(spec.metadata["kind"], data[key], child)
    return cls(**values)


def _setting(key: str, kind: type) -> Any:
    metadata = {"key": key, "kind": kind}
    if dataclasses.is_dataclass(kind):
        return field(default_factory=kind, metadata=metadata)
    return field(default=kind(), metadata=metadata)


@dataclass(frozen=True)
class ServerConfig:
    """Settings of the server process."""

    service_name: str = _setting("servicename", str)
    host: str = _setting("host", str)
    port: int = _setting("port", int)
    log_level: str = _setting("loglevel", str)


@dataclass(frozen=True)
class ClientConfig:
    """Settings of a client process."""

    client_name: str = _setting("clientname", str)
    log_level: str = _setting("loglevel", str)
    server_address: str = _setting("serveraddress", str)


@dataclass(frozen=True)
class ConnectionPool:
    """Limits of the database connection pool; times are in seconds."""

    max_open_connections: int = _setting("maxopenconnections", int)
    max_idle_connections: int = _setting("maxidleconnections", int)
    max_idle_time: int = _setting("maxidletime", int)
    max_life_time: int = _setting("maxlifetime", int)
    timeout: int = _setting("timeout", int)


@dataclass(frozen=True)
class DatabaseConfig:
    """Where the database is and how to connect to it."""

    dbname: str = _setting("name", str)
    schema: str = _setting("schema", str)
    username: str = _setting("user", str)
    password: str = _setting("password", str)
    host: str = _setting("host", str)
    port: int = _setting("port", int)
    log_mode: bool = _setting("logmode", bool)
    ssl_mode: str = _setting("sslmode", str)
    connection: ConnectionPool = _setting("connectionpool", ConnectionPool)
    migration_path: str = _setting("migrationpath", str)


@dataclass(frozen=True)
class AppConfig:
    """The whole application configuration."""

    server: ServerConfig = _setting("app", ServerConfig)
    db: DatabaseConfig = _setting("db", DatabaseConfig)
    client: ClientConfig = _setting("client", ClientConfig)


def _lower_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key).lower(): _lower_keys(item) for key, item in value.items()}
    return value


def load_config(reader: Any, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Read YAML from ``reader`` (text, bytes or a file), apply environment overrides."""
    environ = os.environ if environ is None else environ
    try:
        document = yaml.safe_load(reader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to load app config file: {exc}") from exc
    document = {} if document is None else document
    if not isinstance(document, Mapping):
        raise ConfigError("Failed to load app config file: top level of the document is not a mapping")

    settings = _lower_keys(document)
    for section, key in ENV_BINDINGS:
        value = environ.get(f"{section}_{key}".upper())
        if value:
            if not isinstance(settings.get(section), dict):
                settings[section] = {}
            settings[section][key] = value
    return _decode(AppConfig, settings, "")


_cache_lock = threading.Lock()
_cached: AppConfig | None = None


def provide_app_config(argv: list[str] | None = None) -> AppConfig:
    """Load the file named by -configFile once and return the cached result."""
    global _cached
    with _cache_lock:
        if _cached is None:
            parser = argparse.ArgumentParser(add_help=False)
            parser.add_argument(
                f"-{CONFIG_FILE_KEY}", f"--{CONFIG_FILE_KEY}",
                dest="config_file", default="", help=CONFIG_FILE_USAGE,
            )
            path = parser.parse_args(argv).config_file
            try:
                with open(path, encoding="utf-8") as handle:
                    _cached = load_config(handle)
            except OSError as exc:
                raise ConfigError(f"open {path}: {exc.strerror}") from exc
        return _cached