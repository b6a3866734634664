"""
Heuristic progress from unstructured script output.

The maintenance script prints nothing machine-readable, so progress is a
count of lines that look like a new operation, measured against an estimate
of how many operations the enabled options will produce.
"""
import re
from dataclasses import dataclass

from updatewiz.engine.models import OutputChunk, ProgressUpdate

# Each enabled tool usually runs one or two update commands.
AVERAGE_OPERATIONS_PER_OPTION = 1.5
# The last 5% belongs to the orchestrator's clean-exit transition.
PROGRESS_CEILING = 95.0
LABEL_WIDTH = 50
ELLIPSIS = "..."

SKIP_KEYWORDS = ("skip",)
ACTION_VERBS = (
    "updating",
    "installing",
    "upgrading",
    "cleaning",
    "checking",
    "verifying",
    "rebuilding",
    "performing",
    "running",
)

_ACTION_RE = re.compile(r"\b(?:%s)\b" % "|".join(ACTION_VERBS), re.IGNORECASE)
_TIMESTAMP_RE = re.compile(r"^\s*\[[^\]]*\]\s*")


@dataclass
class ProgressCounters:
    operations_seen: int = 0
    label: str = ""


def expected_operations(enabled_count: int) -> float:
    return max(1, enabled_count * AVERAGE_OPERATIONS_PER_OPTION)


def display_label(line: str, width: int = LABEL_WIDTH) -> str:
    """Strip a leading ``[timestamp]`` token and fit ``line`` into ``width``."""
    text = _TIMESTAMP_RE.sub("", line, count=1).strip()
    if len(text) <= width:
        return text
    return text[: max(0, width - len(ELLIPSIS))] + ELLIPSIS


def _trailing_line(text: str) -> str:
    for line in reversed(text.splitlines()):
        if line.strip():
            return line
    return ""


def estimate(text: str, counters: ProgressCounters, total_expected_ops: float,
             label_width: int = LABEL_WIDTH) -> ProgressUpdate:
    """
    Classify one chunk of output and return the progress it implies.

    Pure apart from the returned counters: ``counters`` is not mutated, the
    caller stores ``ProgressUpdate.operations_seen``/``label`` back if it wants
    to keep them.
    """
    last = _trailing_line(text)
    seen = counters.operations_seen
    label = counters.label
    counted = False

    if not any(word in last.lower() for word in SKIP_KEYWORDS) and _ACTION_RE.search(text):
        seen += 1
        counted = True
        label = display_label(last, label_width)

    total = max(1.0, float(total_expected_ops))
    percent = min(PROGRESS_CEILING, seen / total * 100)
    return ProgressUpdate(percent=percent, label=label, operations_seen=seen, counted=counted)


class ProgressEstimator:
    """Keeps the counters for one run and feeds chunks through ``estimate``."""

    def __init__(self, total_expected_ops: float, label_width: int = LABEL_WIDTH):
        self.total_expected_ops = max(1.0, float(total_expected_ops))
        self.label_width = label_width
        self.counters = ProgressCounters()
        self.percent = 0.0

    @classmethod
    def for_options(cls, options, **kwargs) -> "ProgressEstimator":
        return cls(expected_operations(options.enabled_count), **kwargs)

    @property
    def operations_seen(self) -> int:
        return self.counters.operations_seen

    @property
    def label(self) -> str:
        return self.counters.label

    def estimate(self, chunk: OutputChunk) -> ProgressUpdate:
        update = estimate(chunk.text, self.counters, self.total_expected_ops, self.label_width)
        self.counters = ProgressCounters(update.operations_seen, update.label)
        self.percent = max(self.percent, update.percent)
        return update
