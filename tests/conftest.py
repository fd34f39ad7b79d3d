import os

import pytest
from sqlalchemy import inspect, text

from deployhook import create_app
from deployhook.config import Settings
from deployhook.extensions import db


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path, data_dir):
    exec_file = tmp_path / "deploy.sh"
    exec_file.write_text("#!/bin/sh\nexit 0\n")
    os.chmod(exec_file, 0o755)
    db_file = tmp_path / "builds.sqlite"
    return Settings(
        database_url=f"sqlite:///{db_file}",
        db_file=str(db_file),
        port=8443,
        log_file=str(tmp_path / "deployhook.log"),
        data_dir=str(data_dir),
        exec_file=str(exec_file),
    )


@pytest.fixture
def launches():
    return []


@pytest.fixture
def make_app(launches):
    def _make(settings):
        def fake_launcher(exec_file, json_file):
            launches.append((exec_file, json_file))
            return 4242

        app = create_app(settings, launcher=fake_launcher)
        app.config["TESTING"] = True
        return app

    return _make


@pytest.fixture
def app(make_app, settings):
    return make_app(settings)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def build_rows(app):
    """Return the build_info rows as (id, date, data) tuples."""

    def _rows():
        with app.app_context():
            if not inspect(db.engine).has_table("build_info"):
                return []
            with db.engine.connect() as conn:
                return list(conn.execute(text("SELECT id, date, data FROM build_info ORDER BY id")))

    return _rows
