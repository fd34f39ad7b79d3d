import os
from dataclasses import replace

import pytest

from deployhook import __main__ as cli
from deployhook import config
from deployhook.config import get_database_url, load_settings, settings_from_mapping, sqlite_url
from deployhook.errors import ConfigError


def test_valid_settings_pass(settings):
    assert settings.validate() is settings


def test_required_values_are_reported_together():
    settings = settings_from_mapping({})
    with pytest.raises(ConfigError) as excinfo:
        settings.validate()
    assert excinfo.value.messages == [
        "Value for dbfile is required.",
        "Value for port is required.",
        "Value for logfile is required.",
        "Value for datadir is required.",
        "Value for execfile is required.",
    ]


def test_port_must_be_above_1024(settings):
    with pytest.raises(ConfigError) as excinfo:
        replace(settings, port=80).validate()
    assert excinfo.value.messages == ["Value for port (80) needs to be greater than 1024."]


def test_port_must_be_integer():
    with pytest.raises(ConfigError):
        settings_from_mapping({"PORT": "http"})


def test_paths_must_exist(settings, tmp_path):
    broken = replace(
        settings,
        database_url=sqlite_url(str(tmp_path / "a" / "db.sqlite")),
        db_file=str(tmp_path / "a" / "db.sqlite"),
        log_file=str(tmp_path / "b" / "x.log"),
        data_dir=str(tmp_path / "c"),
        exec_file=str(tmp_path / "deploy-missing"),
    )
    with pytest.raises(ConfigError) as excinfo:
        broken.validate()
    assert excinfo.value.messages == [
        f"directory {tmp_path / 'a'} for dbfile does not exist.",
        f"directory {tmp_path / 'b'} for logfile does not exist.",
        f"directory {tmp_path / 'c'} for datadir does not exist.",
        f"file {tmp_path / 'deploy-missing'} does not exist.",
    ]


def test_tls_requires_both_files(settings, tmp_path):
    cert = tmp_path / "cert.pem"
    cert.write_text("cert")
    with pytest.raises(ConfigError) as excinfo:
        replace(settings, tls_cert=str(cert)).validate()
    assert excinfo.value.messages == ["Value for tlskey is required when TLS is enabled."]


def test_unknown_deploy_failure_policy(settings):
    with pytest.raises(ConfigError) as excinfo:
        replace(settings, deploy_failure_policy="panic").validate()
    assert "deploy_failure_policy (panic)" in excinfo.value.messages[0]


def test_database_url_overrides_db_file(tmp_path):
    assert get_database_url({"DATABASE_URL": "sqlite://", "DB_FILE": "x.sqlite"}) == "sqlite://"
    assert get_database_url({"DB_FILE": str(tmp_path / "x.sqlite")}) == f"sqlite:///{tmp_path / 'x.sqlite'}"


def test_load_settings_reads_config_file_and_environment_wins(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("USE_SSM", raising=False)
    monkeypatch.setenv("PORT", "9443")
    conf = tmp_path / "deployhook.env"
    conf.write_text(
        "DB_FILE=builds.sqlite\nPORT=8443\nLOG_FILE=app.log\nDATA_DIR=data\n"
        "EXEC_FILE=deploy.sh\nAPI_TOKEN=abc\nDEPLOY_FAILURE_POLICY=Terminate\n"
    )
    settings = load_settings(str(conf))
    assert settings.port == 9443
    assert settings.data_dir == "data"
    assert settings.api_token == "abc"
    assert settings.deploy_failure_policy == "terminate"
    assert settings.database_url == f"sqlite:///{tmp_path / 'builds.sqlite'}"


def test_load_settings_missing_file(tmp_path):
    with pytest.raises(ConfigError) as excinfo:
        load_settings(str(tmp_path / "missing.env"))
    assert excinfo.value.messages == [f"config file {tmp_path / 'missing.env'} does not exist."]


def test_api_token_from_ssm(monkeypatch):
    monkeypatch.setattr(config, "_get_param_from_ssm", lambda name, decrypt=False: f"ssm-{name}")
    settings = settings_from_mapping({"USE_SSM": "true", "API_TOKEN": "env"})
    assert settings.api_token == "ssm-API_TOKEN"


def test_api_token_falls_back_to_environment(monkeypatch):
    monkeypatch.setattr(config, "_get_param_from_ssm", lambda name, decrypt=False: None)
    assert settings_from_mapping({"USE_SSM": "1", "API_TOKEN": "env"}).api_token == "env"
    assert settings_from_mapping({"API_TOKEN": "env"}).api_token == "env"


def test_cli_reports_config_errors(tmp_path, capsys):
    assert cli.main(["--config", str(tmp_path / "missing.env")]) == 1
    err = capsys.readouterr().err
    assert "does not exist." in err
    assert "Unable to continue due to validation error(s)." in err


def test_database_url_skips_db_file_directory_check(settings, tmp_path):
    overridden = replace(
        settings,
        database_url="postgresql://deploy@db/builds",
        db_file=str(tmp_path / "missing" / "db.sqlite"),
    )
    assert overridden.uses_db_file is False
    assert overridden.validate() is overridden


def test_ssm_parameter_name_uses_prefix(monkeypatch):
    from deployhook.utils import ssm

    monkeypatch.setattr(ssm, "_PREFIX", "/deployhook/prod/")
    assert ssm.parameter_name("API_TOKEN") == "/deployhook/prod/API_TOKEN"
