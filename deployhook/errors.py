# deployhook/errors.py
"""Errors raised by the build pipeline.

Each error carries the HTTP status it is reported with, so the blueprint can
turn any stage failure into a ``{"error": ...}`` response.
"""


class DeployHookError(Exception):
    status = 500
    message = "Internal error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthError(DeployHookError):
    status = 401
    message = "API token required"


class MalformedJSON(DeployHookError):
    status = 452
    message = "Could not convert POST data to JSON"


class ValidationError(DeployHookError):
    status = 453

    def __init__(self, messages):
        self.messages = list(messages)
        super().__init__("Validation error. " + " ".join(self.messages))


class IndentError(DeployHookError):
    status = 454
    message = "Could not convert payload to jsonOut"


class ArtifactWriteError(DeployHookError):
    status = 455

    def __init__(self, path):
        self.path = path
        super().__init__(f"Unable to create {path}")


class EmptyPayloadError(DeployHookError):
    status = 456
    message = "Fields are empty"


class PersistenceError(DeployHookError):
    status = 500
    message = "Could not save build info"


class DeployError(DeployHookError):
    """The deploy executable could not be started."""

    def __init__(self, exec_file, reason):
        self.exec_file = exec_file
        super().__init__(f"Unable to start {exec_file}: {reason}")


class ConfigError(Exception):
    def __init__(self, messages):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))
