import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

LOG_FILE_ENV = "LOG_FILE"
MOCK_MODE_ENV = "MOCK_MODE"


class Phase(str, Enum):
    NOT_STARTED = "not_started"
    AUTHENTICATING = "authenticating"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (Phase.AUTHENTICATING, Phase.RUNNING)


class Verdict(str, Enum):
    SUCCESS = "success"
    SUCCESS_WITH_WARNINGS = "success_with_warnings"
    FAILED = "failed"


@dataclass(frozen=True)
class OutputChunk:
    """One fragment of process output, in emission order."""
    seq: int
    text: str
    stream: str = "stdout"
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class RunOptions:
    """
    What to skip and what to add to the script's environment.
    ``skip`` maps an option key (e.g. ``skip_brew``) to True when the option
    is unchecked.
    """
    skip: Mapping[str, bool] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)
    log_file: Optional[str] = None
    mock: bool = False

    def __post_init__(self):
        object.__setattr__(self, "skip", MappingProxyType(dict(self.skip)))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @classmethod
    def from_selection(cls, all_keys, enabled_keys, **kwargs) -> "RunOptions":
        enabled = set(enabled_keys)
        return cls(skip={key: key not in enabled for key in all_keys}, **kwargs)

    @property
    def enabled_count(self) -> int:
        return sum(1 for skipped in self.skip.values() if not skipped)

    def to_env(self) -> dict:
        env = {key: "1" for key, skipped in self.skip.items() if skipped}
        if self.log_file:
            env[LOG_FILE_ENV] = self.log_file
        if self.mock:
            env[MOCK_MODE_ENV] = "1"
        env.update(self.env)
        return env


@dataclass(frozen=True)
class ProgressUpdate:
    percent: float
    label: str
    operations_seen: int
    counted: bool = False


@dataclass
class RunState:
    """Mutable state of the one in-flight run. Owned by the orchestrator."""
    phase: Phase = Phase.NOT_STARTED
    progress_percent: float = 0.0
    current_label: str = ""
    transcript: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    exit_code: Optional[int] = None
    error: Optional[str] = None
    started_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class RunResult:
    success: bool
    exit_code: Optional[int]
    transcript: Tuple[OutputChunk, ...]
    warnings: Tuple[str, ...]
    verdict: Verdict
    progress_percent: float = 0.0
    error: Optional[str] = None
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    @property
    def output(self) -> str:
        return "".join(chunk.text for chunk in self.transcript)

    def stream_output(self, stream: str) -> str:
        return "".join(c.text for c in self.transcript if c.stream == stream)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "exit_code": self.exit_code,
            "verdict": self.verdict.value,
            "warnings": list(self.warnings),
            "progress_percent": self.progress_percent,
            "error": self.error,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "output": self.output,
        }
