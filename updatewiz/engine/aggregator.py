import logging
import re

from updatewiz.engine.models import OutputChunk, Verdict

logger = logging.getLogger(__name__)

WARNING_MARKERS = ("warning", "error")

# Optional "[timestamp]" then "Warning:" / "Error:" in any case.
_MARKER_RE = re.compile(
    r"^\s*(?:\[[^\]]*\]\s*)?(?:%s)\s*:\s*(?P<message>.*?)\s*$" % "|".join(WARNING_MARKERS),
    re.IGNORECASE,
)


def strip_marker(line: str):
    """Return the text after a warning marker, or None if ``line`` has none."""
    match = _MARKER_RE.match(line)
    if not match or not match.group("message"):
        return None
    return match.group("message")


class ErrorAggregator:
    """Collects distinct warning/error lines seen during a run."""

    def __init__(self):
        self._warnings = []
        self._seen = set()

    @property
    def warnings(self) -> tuple:
        return tuple(self._warnings)

    def observe(self, chunk: OutputChunk) -> None:
        for line in chunk.text.splitlines():
            message = strip_marker(line)
            if message is None or message in self._seen:
                continue
            self._seen.add(message)
            self._warnings.append(message)
            logger.debug("Script warning: %s", message)

    def verdict(self, exit_clean: bool) -> Verdict:
        if not exit_clean:
            return Verdict.FAILED
        if self._warnings:
            return Verdict.SUCCESS_WITH_WARNINGS
        return Verdict.SUCCESS
