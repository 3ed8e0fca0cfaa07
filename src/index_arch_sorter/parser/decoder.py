"""Streaming decoder for operator index catalogs.

An operator index (``opm render`` output) is a sequence of concatenated JSON
values, not a JSON array. The decoder pulls one value at a time from the
stream and yields only ``olm.bundle`` entries.

Per-value failures (bad JSON, a value that is not an object, an object that
does not fit OperatorIndexEntry) are logged, counted and skipped. Read
failures on the stream itself raise IndexReadError.

Recovery after a malformed value: the decoder moves to the next ``{`` from
which a complete value decodes. When the bad value started a line, only a
``{`` at the start of a line qualifies, so nested objects of a truncated
record are never mistaken for records. Stray closers and the rest of a
broken record are skipped as part of the same failure. If no later value
decodes, the rest of the stream is dropped.
"""

import codecs
import json
import logging
from dataclasses import dataclass
from typing import IO, Optional, Tuple, Union

from pydantic import ValidationError

from index_arch_sorter.models import OperatorIndexEntry

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

_WHITESPACE = " \t\n\r"
_OPENERS = "{["
_CLOSERS = "}]"
# Characters that end a bare scalar token (numbers, literals, garbage)
_TOKEN_STOP = _WHITESPACE + _OPENERS + _CLOSERS + '",'
# A decode error this close to the end of the buffer may just be a chunk boundary
_INCOMPLETE_TAIL = 16


class IndexReadError(Exception):
    """The operator index could not be opened or read."""


@dataclass
class DecodeAttempt:
    """Outcome of decoding one top-level value: an entry or an error message."""
    ordinal: int  # 1-based position of the value in the stream
    entry: Optional[OperatorIndexEntry] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IndexDecoder:
    """Pull iterator over the bundle entries of an operator index stream.

    Accepts a binary stream (decoded as UTF-8) or a text stream. Single
    forward pass; once exhausted it stays exhausted.

    Counters, valid at any point during iteration:
    - decoded_count: values decoded into an OperatorIndexEntry, any schema
    - failed_count: values skipped as malformed
    - bundle_count: entries yielded
    """

    def __init__(self, stream: IO, chunk_size: int = CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._stream = stream
        self._chunk_size = chunk_size
        self._text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._json = json.JSONDecoder()
        self._buf = ""
        self._pos = 0
        self._eof = False
        self._line_start = True
        self._value_at_line_start = True
        self._attempts = 0
        self.decoded_count = 0
        self.failed_count = 0
        self.bundle_count = 0

    def __iter__(self) -> "IndexDecoder":
        return self

    def __next__(self) -> OperatorIndexEntry:
        for attempt in iter(self.next_attempt, None):
            if not attempt.ok:
                self.failed_count += 1
                logger.warning("Failed to parse entry %d: %s", attempt.ordinal, attempt.error)
                continue
            self.decoded_count += 1
            if attempt.entry.is_bundle:
                self.bundle_count += 1
                return attempt.entry
        raise StopIteration

    def next_attempt(self) -> Optional[DecodeAttempt]:
        """Decode the next top-level value, or return None at end of stream.

        Does not touch the counters; ``__next__`` does the bookkeeping.
        """
        if not self._skip_whitespace():
            return None
        self._attempts += 1
        ordinal = self._attempts
        self._value_at_line_start = self._line_start
        self._line_start = False

        value, error = self._read_value()
        if error is not None:
            return DecodeAttempt(ordinal=ordinal, error=error)
        if not isinstance(value, dict):
            return DecodeAttempt(
                ordinal=ordinal,
                error=f"expected a JSON object, got {type(value).__name__}",
            )
        try:
            entry = OperatorIndexEntry.model_validate(value)
        except ValidationError as e:
            return DecodeAttempt(ordinal=ordinal, error=_summarize_validation_error(e))
        return DecodeAttempt(ordinal=ordinal, entry=entry)

    # -- buffer management -------------------------------------------------

    def _fill(self) -> bool:
        """Append the next chunk to the buffer. Returns False once the stream is exhausted."""
        if self._eof:
            return False
        try:
            chunk = self._stream.read(self._chunk_size)
        except (OSError, ValueError) as e:
            # ValueError: read on a closed file
            raise IndexReadError(f"failed to read operator index: {e}") from e

        if not chunk:
            self._eof = True
            tail = self._text_decoder.decode(b"", final=True)
            if not tail:
                return False
            text = tail
        elif isinstance(chunk, bytes):
            text = self._text_decoder.decode(chunk)
        else:
            text = chunk

        # Drop consumed text so the buffer only holds the value in progress
        self._buf = self._buf[self._pos:] + text
        self._pos = 0
        return True

    def _skip_whitespace(self) -> bool:
        """Advance to the next non-whitespace character. False at end of stream."""
        while True:
            buf = self._buf
            pos = self._pos
            while pos < len(buf) and buf[pos] in _WHITESPACE:
                self._line_start = buf[pos] == "\n"
                pos += 1
            self._pos = pos
            if pos < len(buf):
                return True
            if not self._fill():
                return False

    def _ensure(self, offset: int) -> bool:
        """Make sure ``self._buf[self._pos + offset]`` exists, reading more if needed."""
        while self._pos + offset >= len(self._buf):
            if not self._fill():
                return False
        return True

    # -- value reading -----------------------------------------------------

    def _read_value(self) -> Tuple[object, Optional[str]]:
        """Read one top-level value at the cursor and advance past it.

        Returns (value, None) on success or (None, message) on failure; in
        both cases the cursor has moved past the consumed text.
        """
        first = self._buf[self._pos]
        if first in _OPENERS:
            return self._read_container()
        return self._read_scalar()

    def _read_container(self) -> Tuple[object, Optional[str]]:
        try:
            value, end = self._decode_at_cursor()
        except json.JSONDecodeError as e:
            if e.pos >= len(self._buf):
                message = "unexpected end of input inside JSON value"
            else:
                message = f"invalid JSON: {e.msg}"
            self._resync()
            return None, message
        self._pos = end
        return value, None

    def _read_scalar(self) -> Tuple[object, Optional[str]]:
        length = self._scalar_length()
        if length is None:
            self._discard_rest()
            return None, "unexpected end of input inside JSON string"
        text = self._buf[self._pos:self._pos + length]
        try:
            value, end = self._json.raw_decode(text)
        except json.JSONDecodeError as e:
            self._resync()
            return None, f"invalid JSON: {e.msg}"
        if end != len(text):
            self._resync()
            return None, "invalid JSON: extra data"
        self._pos += length
        return value, None

    def _decode_at_cursor(self) -> Tuple[object, int]:
        """raw_decode at the cursor, reading more input while the failure may be a chunk boundary.

        Raises JSONDecodeError once the value is known to be malformed.
        """
        while True:
            try:
                return self._json.raw_decode(self._buf, self._pos)
            except json.JSONDecodeError as e:
                if not self._may_be_incomplete(e) or not self._fill():
                    raise

    def _may_be_incomplete(self, error: json.JSONDecodeError) -> bool:
        if error.msg.startswith("Unterminated string"):
            return True
        return len(self._buf) - error.pos <= _INCOMPLETE_TAIL

    def _resync(self) -> None:
        """Move the cursor to the next ``{`` that starts a decodable value.

        When the failed value began a line, only ``{`` at the start of a
        line are candidates (``opm render`` puts top-level objects at
        column 0, nested ones are indented). Otherwise any ``{`` is.
        Discards the rest of the stream when no candidate decodes.
        """
        line_mode = self._value_at_line_start
        while True:
            idx = self._buf.find("{", self._pos + 1)
            if idx == -1:
                # Keep the last character for the line-start check
                self._pos = len(self._buf) - 1
                if not self._fill():
                    self._pos = len(self._buf)
                    return
                continue
            self._pos = idx
            at_line_start = self._buf[idx - 1] == "\n"
            if line_mode and not at_line_start:
                continue
            try:
                self._decode_at_cursor()
            except json.JSONDecodeError:
                continue
            self._line_start = at_line_start
            return

    def _scalar_length(self) -> Optional[int]:
        """Length of the string literal or bare token at the cursor.

        A bare token always covers at least one character. None means a
        string literal was left unterminated at end of stream.
        """
        if self._buf[self._pos] == '"':
            escaped = False
            offset = 1
            while self._ensure(offset):
                ch = self._buf[self._pos + offset]
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    return offset + 1
                offset += 1
            return None

        offset = 1
        while self._ensure(offset) and self._buf[self._pos + offset] not in _TOKEN_STOP:
            offset += 1
        return offset

    def _discard_rest(self) -> None:
        self._pos = len(self._buf)
        while self._fill():
            self._pos = len(self._buf)


def decode(stream: Union[IO[bytes], IO[str]], chunk_size: int = CHUNK_SIZE) -> IndexDecoder:
    """Lazily decode the bundle entries of an operator index stream."""
    return IndexDecoder(stream, chunk_size=chunk_size)


def _summarize_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "invalid entry: " + "; ".join(parts)
