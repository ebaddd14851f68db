"""Applies numbered SQL migration files to a database."""

from __future__ import annotations

import logging
import re
import sqlite3
import sys
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from modernapi.configs import DatabaseConfig

log = logging.getLogger(__name__)

CUT_SET = "file://"
DATABASE_LABEL = "Postgres Database"
MIGRATIONS_TABLE = "schema_migrations"

_FILE_PATTERN = re.compile(r"^([0-9]+)_(.*)\.up\.(.*)$")


def get_source_path(directory: str, platform: str | None = None) -> str:
    """Return ``directory`` as a file:// source path, with forward slashes on Windows."""
    path = directory.removeprefix(CUT_SET)
    if (sys.platform if platform is None else platform).startswith("win"):
        path = path.replace("\\", "/")
    return CUT_SET + path


def _discover(directory: Path) -> list[tuple[int, Path]]:
    if not directory.is_dir():
        raise FileNotFoundError(f"migration directory not found: {directory}")
    found: dict[int, Path] = {}
    for entry in directory.iterdir():
        match = _FILE_PATTERN.match(entry.name)
        if match and entry.is_file():
            if int(match[1]) in found:
                raise ValueError(f"duplicate migration file: {entry.name}")
            found[int(match[1])] = entry
    return sorted(found.items())


def _statements(script: str, dialect: str) -> list[str]:
    if dialect != "sqlite":
        return [script] if script.strip() else []
    statements, buffer = [], ""
    for piece in script.split(";"):
        buffer += piece + ";"
        if sqlite3.complete_statement(buffer):
            if buffer.strip(" \t\r\n;"):
                statements.append(buffer.strip())
            buffer = ""
    return statements


class Migrator:
    """Brings a database up to the newest migration found in a directory."""

    def __init__(self, engine: Engine, source_path: str, name: str = DATABASE_LABEL) -> None:
        self.engine = engine
        self.source_path = source_path
        self.name = name
        self._migrations = _discover(Path(source_path.removeprefix(CUT_SET)))

    def _set_version(self, version: int, dirty: bool) -> None:
        with self.engine.begin() as connection:
            connection.execute(text(f"DELETE FROM {MIGRATIONS_TABLE}"))
            connection.execute(
                text(f"INSERT INTO {MIGRATIONS_TABLE} (version, dirty) VALUES (:version, :dirty)"),
                {"version": version, "dirty": dirty},
            )

    def up(self) -> list[int]:
        """Apply every pending migration; return the versions applied, in order."""
        with self.engine.begin() as connection:
            connection.execute(text(
                f"CREATE TABLE IF NOT EXISTS {MIGRATIONS_TABLE} "
                "(version bigint NOT NULL PRIMARY KEY, dirty boolean NOT NULL)"
            ))
            row = connection.execute(text(f"SELECT version, dirty FROM {MIGRATIONS_TABLE} LIMIT 1")).first()
        current = None if row is None else int(row[0])
        if row is not None and row[1]:
            raise RuntimeError(f"Dirty database version {current}. Fix and force version.")

        applied: list[int] = []
        for version, path in self._migrations:
            if current is not None and version <= current:
                continue
            self._set_version(version, True)
            script = path.read_text(encoding="utf-8")
            with self.engine.begin() as connection:
                for statement in _statements(script, connection.dialect.name):
                    connection.exec_driver_sql(statement)
            self._set_version(version, False)
            applied.append(version)
        return applied

    def run_migrations(self) -> list[int]:
        """Apply pending migrations, logging the outcome instead of raising."""
        try:
            applied = self.up()
        except (SQLAlchemyError, OSError, RuntimeError, ValueError) as exc:
            log.error("Migration Failed for %s: %s", self.name, exc)
            return []
        if applied:
            log.info("Migrations applied successfully to %s", self.name)
        else:
            log.info("No change detected after running the migrations for %s", self.name)
        return applied


def provide_migrator(config: DatabaseConfig, engine: Engine) -> Migrator:
    """Create a migrator for the migration directory named in ``config``."""
    return Migrator(engine, get_source_path(config.migration_path))