"""
Parser turning the assistant's plain-text reply into suggestions.

The reply is a sequence of records separated by `---` lines. Each record
holds `NAME: value` fields, and the ORIGINAL and FIX fields may carry a code
block delimited by `<<<` and `>>>` lines. Malformed input never raises: bad
numbers become 0, untitled records are dropped and an unterminated block is
discarded.
"""
import logging
from enum import Enum
from typing import Dict, List, Optional

from prereview import protocol
from prereview.models import CONFIDENCES, SEVERITIES, Suggestion

logger = logging.getLogger(__name__)

SINGLE_LINE_FIELDS = (
    protocol.FIELD_LINE,
    protocol.FIELD_END_LINE,
    protocol.FIELD_SEVERITY,
    protocol.FIELD_CONFIDENCE,
    protocol.FIELD_CATEGORY,
    protocol.FIELD_TITLE,
    protocol.FIELD_DESCRIPTION,
)


class ParserState(Enum):
    IDLE = "idle"
    IN_RECORD = "in_record"
    IN_BLOCK = "in_block"


def parse_int(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


class _Record:
    """Fields collected for one record before it becomes a Suggestion."""

    def __init__(self):
        self.fields: Dict[str, Optional[str]] = {}

    def set(self, name: str, value: Optional[str]) -> None:
        self.fields[name] = value

    def to_suggestion(self, file_path: str) -> Optional[Suggestion]:
        title = (self.fields.get(protocol.FIELD_TITLE) or "").strip()
        if not title:
            return None

        line = parse_int(self.fields.get(protocol.FIELD_LINE) or "")
        end_line_raw = self.fields.get(protocol.FIELD_END_LINE)
        end_line = parse_int(end_line_raw) if end_line_raw is not None else line
        if end_line < line:
            end_line = line

        severity = (self.fields.get(protocol.FIELD_SEVERITY) or "").strip().lower()
        if severity not in SEVERITIES:
            severity = "info"

        confidence = (self.fields.get(protocol.FIELD_CONFIDENCE) or "").strip().lower()

        return Suggestion(
            file_path=file_path,
            line=line,
            end_line=end_line,
            severity=severity,
            confidence=confidence if confidence in CONFIDENCES else None,
            title=title,
            description=(self.fields.get(protocol.FIELD_DESCRIPTION) or "").strip(),
            category=(self.fields.get(protocol.FIELD_CATEGORY) or "").strip(),
            original_code=self.fields.get(protocol.FIELD_ORIGINAL),
            suggested_fix=self.fields.get(protocol.FIELD_FIX),
        )


class ResponseParser:
    """Line oriented state machine over the assistant reply."""

    def parse(self, response: str, file_path: str) -> List[Suggestion]:
        """
        Extract suggestions from a reply.

        Args:
            response: Raw assistant reply.
            file_path: File the reply is about.

        Returns:
            Suggestions in the order they appear in the reply.
        """
        text = (response or "").replace("\r\n", "\n")
        if not text.strip() or text.strip() == protocol.NO_ISSUES:
            return []

        self._file_path = file_path
        self._suggestions: List[Suggestion] = []
        self._state = ParserState.IDLE
        self._record: Optional[_Record] = None
        self._armed_field: Optional[str] = None
        self._block_field: Optional[str] = None
        self._block_lines: List[str] = []

        for line in text.split("\n"):
            self._feed(line)

        if self._state == ParserState.IN_BLOCK:
            logger.debug("Discarding unterminated %s block in reply for %s", self._block_field, file_path)
        self._flush()
        return self._suggestions

    def _feed(self, line: str) -> None:
        if self._state == ParserState.IN_BLOCK:
            if line.rstrip() == protocol.BLOCK_CLOSE:
                self._record.set(self._block_field, "\n".join(self._block_lines))
                self._block_field = None
                self._block_lines = []
                self._state = ParserState.IN_RECORD
            else:
                self._block_lines.append(line)
            return

        stripped = line.strip()
        if stripped == protocol.RECORD_SEPARATOR:
            self._flush()
            self._record = _Record()
            self._armed_field = None
            self._state = ParserState.IN_RECORD
            return

        if self._state == ParserState.IDLE:
            return

        if stripped == protocol.BLOCK_OPEN:
            if self._armed_field is not None:
                self._block_field = self._armed_field
                self._block_lines = []
                self._armed_field = None
                self._state = ParserState.IN_BLOCK
            return

        if not stripped:
            return

        self._armed_field = None
        name, sep, value = line.partition(":")
        if not sep:
            return
        name = name.strip()
        value = value.strip()

        if name in SINGLE_LINE_FIELDS:
            self._record.set(name, value)
        elif name in protocol.BLOCK_FIELDS:
            if value == protocol.NOT_APPLICABLE:
                self._record.set(name, None)
            elif value:
                self._record.set(name, value)
            else:
                self._armed_field = name

    def _flush(self) -> None:
        if self._record is None:
            return
        suggestion = self._record.to_suggestion(self._file_path)
        if suggestion is None:
            logger.debug("Dropping untitled record in reply for %s", self._file_path)
        else:
            self._suggestions.append(suggestion)
        self._record = None
