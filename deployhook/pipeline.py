# deployhook/pipeline.py
"""Request pipeline: validate, write artifact, persist, deploy.

Stages run strictly in order and any failure aborts the remaining ones.
Nothing written by an earlier stage is rolled back when a later stage fails,
so an artifact file can exist without a matching ``build_info`` row.
"""
import json
import logging
import os
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from .config import Settings
from .errors import (
    ArtifactWriteError,
    DeployError,
    EmptyPayloadError,
    IndentError,
    PersistenceError,
)
from .extensions import db
from .models import BuildInfo
from .utils import jsontext
from .utils.deploy import launch_deploy
from .validation import ValidatedPayload, validate_payload

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_timestamp(now=None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def render_artifact(compact: str) -> str:
    """Re-indent compacted JSON with two spaces and a trailing newline.

    Only whitespace changes; values are written exactly as received.
    """
    try:
        json.loads(compact)
    except ValueError as exc:
        raise IndentError() from exc
    return jsontext.indent(compact, "  ") + "\n"


def _terminate(status: int) -> None:
    logging.shutdown()
    os._exit(status)


class BuildPipeline:
    def __init__(self, settings: Settings, launcher=launch_deploy, clock=None):
        self.settings = settings
        self.launcher = launcher
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def artifact_path(self, ticket: str) -> str:
        return os.path.abspath(os.path.join(self.settings.data_dir, f"{ticket}.json"))

    def write_artifact(self, validated: ValidatedPayload) -> str:
        text = render_artifact(validated.compact)
        path = self.artifact_path(validated.ticket)
        try:
            with open(path, "w", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as exc:
            logger.error("Unable to create %s: %s", path, exc)
            raise ArtifactWriteError(path) from exc
        logger.info("Wrote artifact %s", path)
        return path

    def save_build_info(self, compact: str) -> BuildInfo:
        """Insert one ``build_info`` row inside a session scoped to this call.

        The table is created on first use. The session, and with it the
        connection, is closed on every exit path.
        """
        session = db.session
        try:
            BuildInfo.__table__.create(bind=session.connection(), checkfirst=True)
            if not compact:
                raise EmptyPayloadError()
            info = BuildInfo(date=utc_timestamp(self.clock()), data=compact)
            session.add(info)
            session.commit()
            session.refresh(info)
            session.expunge(info)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Failed to insert build info")
            raise PersistenceError() from exc
        finally:
            session.close()
        logger.info("Inserted build info id=%s", info.id)
        return info

    def trigger_deploy(self, path: str) -> None:
        try:
            self.launcher(self.settings.exec_file, path)
        except DeployError as exc:
            if self.settings.deploy_failure_policy == "terminate":
                logger.critical("%s, terminating", exc.message)
                _terminate(1)
            else:
                logger.error("%s", exc.message)

    def run(self, body: bytes) -> BuildInfo:
        validated = validate_payload(body)
        path = self.write_artifact(validated)
        info = self.save_build_info(validated.compact)
        self.trigger_deploy(path)
        return info
