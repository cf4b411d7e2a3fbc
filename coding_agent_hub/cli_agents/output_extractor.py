"""
Output Extractor: Normalizes CLI stdout into a single content string.

The three backend CLIs write different shapes to stdout:
- Gemini:  {"response": "...", "session_id": "...", "stats": {...}}
- Claude:  {"type": "result", "result": "...", "session_id": "..."}
- Others:  {"content": "..."} or free-form text

Extraction is a heuristic, not a schema: malformed or partial JSON falls
through to the plaintext path instead of failing.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

# Maximum stdout buffer size (5MB)
MAX_BUFFER_SIZE = 5 * 1024 * 1024

# Shorter output is treated as noise
MIN_CONTENT_LENGTH = 10

# JSON fields checked in priority order, with the format tag each implies
CONTENT_FIELDS = (
    ("response", "gemini"),
    ("content", "generic"),
    ("result", "claude"),
)

PLAINTEXT_FORMAT = "plaintext"

# A whole-output JSON envelope carrying only session bookkeeping
_SESSION_ENVELOPE_RE = re.compile(r"\s*\{.*\"session_id\".*\}\s*", re.DOTALL)


@dataclass(frozen=True)
class ExtractedMessage:
    """Content extracted from CLI stdout."""

    content: str
    output_format: str
    exit_code: Optional[int] = None


def _extract_json_field(trimmed: str) -> Optional[ExtractedMessage]:
    """Try the JSON path on already-trimmed output."""
    start = trimmed.find("{")
    end = trimmed.rfind("}")
    if start == -1 or end <= start:
        return None

    try:
        parsed = json.loads(trimmed[start : end + 1])
    except ValueError:
        return None

    if not isinstance(parsed, dict):
        return None

    for field_name, output_format in CONTENT_FIELDS:
        value = parsed.get(field_name)
        if not value:
            continue
        # First non-empty field decides; a short winner is not rescued
        # by a lower-priority field.
        if isinstance(value, str) and len(value) >= MIN_CONTENT_LENGTH:
            return ExtractedMessage(content=value, output_format=output_format)
        return None

    return None


def extract_message_content(
    stdout: str, exit_code: Optional[int] = None
) -> Optional[ExtractedMessage]:
    """
    Extract message content from CLI stdout.

    Priority:
    1. JSON with "response" field (Gemini format)
    2. JSON with "content" field (generic)
    3. JSON with "result" field (Claude --output-format json)
    4. Plain text (entire output)

    Args:
        stdout: Raw captured stdout
        exit_code: Process exit code, carried through for callers

    Returns:
        ExtractedMessage, or None if there is no usable content
    """
    if not stdout:
        return None

    trimmed = stdout.strip()
    if len(trimmed) < MIN_CONTENT_LENGTH:
        return None

    extracted = _extract_json_field(trimmed)
    if extracted is not None:
        return ExtractedMessage(
            content=extracted.content,
            output_format=extracted.output_format,
            exit_code=exit_code,
        )

    cleaned = trimmed
    if _SESSION_ENVELOPE_RE.fullmatch(trimmed):
        cleaned = ""
    cleaned = cleaned.strip()

    if len(cleaned) >= MIN_CONTENT_LENGTH:
        return ExtractedMessage(
            content=cleaned, output_format=PLAINTEXT_FORMAT, exit_code=exit_code
        )

    return None


class StdoutCollector:
    """
    Collects stdout chunks up to a fixed byte limit.

    Bytes past the limit are dropped and ``truncated`` is set; what was
    already captured is kept.
    """

    def __init__(self, max_size: int = MAX_BUFFER_SIZE):
        self._max_size = max_size
        self._chunks: List[bytes] = []
        self._size = 0
        self._truncated = False

    def add(self, chunk: bytes) -> None:
        if self._truncated:
            return

        if self._size + len(chunk) > self._max_size:
            remaining = self._max_size - self._size
            if remaining > 0:
                self._chunks.append(chunk[:remaining])
                self._size = self._max_size
            self._truncated = True
            logger.warning(f"stdout truncated at {self._max_size} byte limit")
        else:
            self._chunks.append(chunk)
            self._size += len(chunk)

    def getvalue(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")

    @property
    def truncated(self) -> bool:
        return self._truncated

    @property
    def size(self) -> int:
        return self._size
