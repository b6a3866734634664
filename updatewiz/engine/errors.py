"""Error taxonomy for a maintenance run.

Nothing here escapes ``RunOrchestrator.start()``: auth and execution errors
are turned into a failed ``RunResult`` there.
"""


class UpdateWizError(Exception):
    """Base class for every error raised by update-wiz."""


class ConfigError(UpdateWizError):
    """Raised when settings from the environment or CLI are invalid."""


class AuthError(UpdateWizError):
    """Privilege elevation did not succeed."""


class AuthDeniedError(AuthError):
    def __init__(self, code: int):
        super().__init__(f"Authentication failed (exit {code})")
        self.code = code


class AuthLaunchError(AuthError):
    def __init__(self, command, reason: str):
        super().__init__(f"Failed to start authentication: {reason}")
        self.command = command
        self.reason = reason


class ExecutionError(UpdateWizError):
    """The maintenance process failed. ``transcript`` holds what was captured."""

    def __init__(self, message: str, transcript=()):
        super().__init__(message)
        self.transcript = tuple(transcript)


class SpawnError(ExecutionError):
    def __init__(self, command, reason: str):
        super().__init__(f"Could not start {command}: {reason}")
        self.command = command
        self.reason = reason


class NonZeroExitError(ExecutionError):
    def __init__(self, code: int, transcript=()):
        super().__init__(f"Process exited with code {code}", transcript)
        self.code = code


class RunTimeoutError(ExecutionError):
    def __init__(self, timeout: float, code=None, transcript=()):
        super().__init__(f"Run timed out after {timeout:g}s", transcript)
        self.timeout = timeout
        self.code = code


class RunCancelledError(ExecutionError):
    def __init__(self, code=None, transcript=()):
        super().__init__("Run cancelled", transcript)
        self.code = code
