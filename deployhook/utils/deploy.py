# deployhook/utils/deploy.py
import logging
import os
import subprocess

from ..errors import DeployError

logger = logging.getLogger(__name__)


def deploy_env(json_file: str) -> dict:
    """Inherited environment plus JSON_FILE pointing at the artifact."""
    env = dict(os.environ)
    env["JSON_FILE"] = json_file
    return env


def launch_deploy(exec_file: str, json_file: str) -> int:
    """
    Start ``exec_file`` detached in its own session and process group.

    The child is never waited on and its output is not captured. Returns the
    child pid; raises DeployError if the executable cannot be started.
    """
    try:
        proc = subprocess.Popen(
            [exec_file],
            env=deploy_env(json_file),
            stdin=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        raise DeployError(exec_file, exc) from exc
    logger.info("Started %s (pid %s) with JSON_FILE=%s", exec_file, proc.pid, json_file)
    return proc.pid
