# deployhook/config.py
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import dotenv_values, load_dotenv
from sqlalchemy.pool import NullPool

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEPLOY_FAILURE_POLICIES = ("log", "terminate")
MIN_PORT = 1024


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def _get_param_from_ssm(name: str, decrypt: bool = False) -> Optional[str]:
    """Read a secret from Parameter Store when USE_SSM is on.

    Returns None on any lookup failure so the value from the config file or
    environment is used instead.
    """
    try:
        from .utils.ssm import get_param
        return get_param(name, decrypt=decrypt)
    except Exception as exc:
        logger.warning("SSM lookup for %s failed, using environment: %s", name, exc)
        return None


def _get_param_with_fallback(source: Mapping[str, str], name: str, decrypt: bool = False,
                             default: str = "") -> str:
    if _truthy(source.get("USE_SSM")):
        val = _get_param_from_ssm(name, decrypt=decrypt)
        if val:
            return val
    return source.get(name) or default


def sqlite_url(db_file: str) -> str:
    return f"sqlite:///{os.path.abspath(db_file)}"


def get_database_url(source: Mapping[str, str]) -> str:
    db = source.get("DATABASE_URL")
    if db:
        return db
    db_file = source.get("DB_FILE", "")
    if db_file:
        return sqlite_url(db_file)
    return ""


@dataclass(frozen=True)
class Settings:
    database_url: str
    db_file: str
    port: Optional[int]
    log_file: str
    data_dir: str
    exec_file: str
    host: str = "0.0.0.0"
    tls_cert: str = ""
    tls_key: str = ""
    api_token: str = ""
    deploy_failure_policy: str = "log"
    db_echo: bool = False

    @property
    def uses_db_file(self) -> bool:
        """True unless DATABASE_URL points somewhere other than DB_FILE."""
        return bool(self.db_file) and self.database_url == sqlite_url(self.db_file)

    @property
    def tls_enabled(self) -> bool:
        return bool(self.tls_cert or self.tls_key)

    def validate(self) -> "Settings":
        """Check every value before the server starts listening.

        Collects all problems and raises a single ``ConfigError``.
        """
        errors = []
        if not self.database_url:
            errors.append("Value for dbfile is required.")
        if self.port is None:
            errors.append("Value for port is required.")
        elif self.port <= MIN_PORT:
            errors.append(f"Value for port ({self.port}) needs to be greater than {MIN_PORT}.")
        for key, value in (("logfile", self.log_file), ("datadir", self.data_dir),
                           ("execfile", self.exec_file)):
            if not value:
                errors.append(f"Value for {key} is required.")
        if self.deploy_failure_policy not in DEPLOY_FAILURE_POLICIES:
            errors.append(
                f"Value for deploy_failure_policy ({self.deploy_failure_policy}) "
                f"needs to be one of {', '.join(DEPLOY_FAILURE_POLICIES)}."
            )
        if errors:
            raise ConfigError(errors)

        # DB_FILE and LOG_FILE get created, their parent directories must exist
        if self.uses_db_file:
            db_dir = os.path.dirname(os.path.abspath(self.db_file))
            if not os.path.isdir(db_dir):
                errors.append(f"directory {db_dir} for dbfile does not exist.")
        log_dir = os.path.dirname(os.path.abspath(self.log_file))
        if not os.path.isdir(log_dir):
            errors.append(f"directory {log_dir} for logfile does not exist.")
        if not os.path.isdir(self.data_dir):
            errors.append(f"directory {self.data_dir} for datadir does not exist.")
        if not os.path.exists(self.exec_file):
            errors.append(f"file {self.exec_file} does not exist.")
        if self.tls_enabled:
            for key, value in (("tlscert", self.tls_cert), ("tlskey", self.tls_key)):
                if not value:
                    errors.append(f"Value for {key} is required when TLS is enabled.")
                elif not os.path.exists(value):
                    errors.append(f"file {value} does not exist.")
        if errors:
            raise ConfigError(errors)
        return self


def _parse_port(raw: Optional[str]) -> Optional[int]:
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigError([f"Value for port ({raw}) needs to be an integer."])


def settings_from_mapping(source: Mapping[str, str]) -> Settings:
    return Settings(
        database_url=get_database_url(source),
        db_file=source.get("DB_FILE", ""),
        port=_parse_port(source.get("PORT")),
        log_file=source.get("LOG_FILE", ""),
        data_dir=source.get("DATA_DIR", ""),
        exec_file=source.get("EXEC_FILE", ""),
        host=source.get("HOST") or "0.0.0.0",
        tls_cert=source.get("TLS_CERT", ""),
        tls_key=source.get("TLS_KEY", ""),
        api_token=_get_param_with_fallback(source, "API_TOKEN", decrypt=True),
        deploy_failure_policy=(source.get("DEPLOY_FAILURE_POLICY") or "log").strip().lower(),
        db_echo=_truthy(source.get("DB_ECHO")),
    )


def load_settings(config_file: Optional[str] = None) -> Settings:
    """Build settings from an optional env-style file, ``.env`` and the environment.

    The process environment wins over both files.
    """
    # load local .env if present
    load_dotenv()
    source = {}
    if config_file:
        if not os.path.exists(config_file):
            raise ConfigError([f"config file {config_file} does not exist."])
        source.update({k: v for k, v in dotenv_values(config_file).items() if v is not None})
    source.update(os.environ)
    return settings_from_mapping(source)


class Config:
    """Flask config derived from ``Settings``."""

    def __init__(self, settings: Settings):
        self.SQLALCHEMY_DATABASE_URI = settings.database_url
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False
        self.SQLALCHEMY_ECHO = settings.db_echo
        # one connection per request, closed when the session is released
        self.SQLALCHEMY_ENGINE_OPTIONS = {"poolclass": NullPool}
