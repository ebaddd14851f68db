import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import DBAPIError

from modernapi.configs import DatabaseConfig
from modernapi.migrations import MIGRATIONS_TABLE, get_source_path, provide_migrator


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'app.db'}")
    yield engine
    engine.dispose()


def _write(directory, name, body):
    directory.mkdir(exist_ok=True)
    (directory / name).write_text(body, encoding="utf-8")


def _state(engine):
    with engine.connect() as connection:
        row = connection.execute(text(f"SELECT version, dirty FROM {MIGRATIONS_TABLE}")).one()
    return int(row[0]), bool(row[1])


def test_source_path_keeps_single_prefix():
    assert get_source_path("file://migrations", "linux") == "file://migrations"
    assert get_source_path("migrations", "linux") == "file://migrations"


def test_source_path_windows_separators():
    assert get_source_path("db\\migrations", "windows") == "file://db/migrations"
    assert get_source_path("db\\migrations", "win32") == "file://db/migrations"
    assert get_source_path("db\\migrations", "linux") == "file://db\\migrations"


def test_up_applies_in_order_then_no_change(tmp_path, engine):
    folder = tmp_path / "migrations"
    _write(folder, "2_seed.up.sql", "INSERT INTO books VALUES (1, 'a', 'b');\nINSERT INTO books VALUES (2, 'c', 'd');")
    _write(folder, "1_create.up.sql", "CREATE TABLE books (isbn INTEGER, name TEXT, publisher TEXT);")
    _write(folder, "1_create.down.sql", "DROP TABLE books;")
    migrator = provide_migrator(DatabaseConfig(migration_path=f"file://{folder}"), engine)

    assert migrator.up() == [1, 2]
    assert migrator.up() == []
    assert _state(engine) == (2, False)
    with engine.connect() as connection:
        assert connection.execute(text("SELECT count(*) FROM books")).scalar() == 2


def test_only_new_migrations_are_applied(tmp_path, engine):
    folder = tmp_path / "migrations"
    _write(folder, "1_create.up.sql", "CREATE TABLE t (x INTEGER);")
    config = DatabaseConfig(migration_path=str(folder))
    assert provide_migrator(config, engine).run_migrations() == [1]
    _write(folder, "5_more.up.sql", "INSERT INTO t VALUES (7);")
    assert provide_migrator(config, engine).run_migrations() == [5]
    assert _state(engine) == (5, False)


def test_failed_migration_leaves_dirty_version(tmp_path, engine):
    folder = tmp_path / "migrations"
    _write(folder, "1_broken.up.sql", "CREATE TABLE oops (;")
    migrator = provide_migrator(DatabaseConfig(migration_path=str(folder)), engine)
    with pytest.raises(DBAPIError):
        migrator.up()
    assert _state(engine) == (1, True)
    with pytest.raises(RuntimeError, match="Dirty database version 1"):
        migrator.up()
    assert migrator.run_migrations() == []


def test_missing_directory(tmp_path, engine):
    config = DatabaseConfig(migration_path=str(tmp_path / "absent"))
    with pytest.raises(FileNotFoundError):
        provide_migrator(config, engine)


def test_duplicate_versions_rejected(tmp_path, engine):
    folder = tmp_path / "migrations"
    _write(folder, "3_a.up.sql", "SELECT 1;")
    _write(folder, "3_b.up.sql", "SELECT 1;")
    with pytest.raises(ValueError, match="duplicate"):
        provide_migrator(DatabaseConfig(migration_path=str(folder)), engine)