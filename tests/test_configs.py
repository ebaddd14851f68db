import io

import pytest

from modernapi import configs
from modernapi.configs import (
    AppConfig,
    ConfigError,
    ConnectionPool,
    load_config,
    provide_app_config,
)

SAMPLE = """
app:
  serviceName: books
  host: localhost
  port: 50051
  logLevel: debug
db:
  name: booksdb
  schema: library
  user: postgres
  password: password
  host: dbhost
  port: 5432
  logMode: true
  sslMode: disable
  migrationPath: file://migrations
  connectionPool:
    maxOpenConnections: 10
    maxIdleConnections: 5
    maxIdleTime: 30
    maxLifeTime: 60
    timeout: 7
client:
  clientName: cli
  logLevel: info
  serverAddress: localhost:50051
"""


@pytest.fixture(autouse=True)
def _clear_cache(monkeypatch):
    monkeypatch.setattr(configs, "_cached", None)


def test_load_full_document():
    config = load_config(io.StringIO(SAMPLE), environ={})
    assert config.server.service_name == "books"
    assert config.server.port == 50051
    assert config.db.dbname == "booksdb"
    assert config.db.username == "postgres"
    assert config.db.log_mode is True
    assert config.db.migration_path == "file://migrations"
    assert config.db.connection == ConnectionPool(10, 5, 30, 60, 7)
    assert config.client.server_address == "localhost:50051"


def test_environment_overrides_file_values():
    environ = {"APP_PORT": "9090", "DB_HOST": "otherhost", "DB_PASSWORD": "secret"}
    config = load_config(SAMPLE, environ=environ)
    assert config.server.port == 9090
    assert config.db.host == "otherhost"
    assert config.db.password == "secret"
    assert config.db.port == 5432


def test_empty_environment_value_is_ignored():
    config = load_config(SAMPLE, environ={"DB_NAME": ""})
    assert config.db.dbname == "booksdb"


def test_environment_fills_missing_sections():
    config = load_config("", environ={"DB_PORT": "6543", "DB_USER": "admin"})
    assert config.db.port == 6543
    assert config.db.username == "admin"
    assert config.server == AppConfig().server


def test_empty_document_gives_defaults():
    assert load_config("", environ={}) == AppConfig()


def test_keys_are_case_insensitive():
    config = load_config("APP:\n  SERVICENAME: x\n  Port: '81'\n", environ={})
    assert config.server.service_name == "x"
    assert config.server.port == 81


def test_invalid_yaml_raises():
    with pytest.raises(ConfigError, match="Failed to load app config file"):
        load_config("app: [unclosed", environ={})


def test_non_mapping_document_raises():
    with pytest.raises(ConfigError, match="Failed to load app config file"):
        load_config("- a\n- b\n", environ={})


def test_unparsable_int_raises():
    with pytest.raises(ConfigError, match="Unable to parse app config file"):
        load_config("app:\n  port: abc\n", environ={})


def test_section_of_wrong_shape_raises():
    with pytest.raises(ConfigError, match="Unable to parse app config file"):
        load_config("db: 5\n", environ={})


def test_provide_app_config_reads_and_caches(tmp_path, monkeypatch):
    for variable in configs.ENV_BINDINGS.values():
        monkeypatch.delenv(variable, raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(SAMPLE, encoding="utf-8")
    first = provide_app_config(["-configFile", str(path)])
    assert first.server.service_name == "books"
    second = provide_app_config(["-configFile", str(tmp_path / "other.yaml")])
    assert second is first


def test_provide_app_config_accepts_equals_form(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("client:\n  clientName: cli\n", encoding="utf-8")
    config = provide_app_config([f"-configFile={path}"])
    assert config.client.client_name == "cli"


def test_provide_app_config_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError, match="open"):
        provide_app_config(["-configFile", str(tmp_path / "absent.yaml")])