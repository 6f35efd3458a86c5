"""
spring_autohost.errors — Custom exception classes
==================================================

Defines the exception hierarchy for decoding, transport and
configuration problems. Decode errors store the offending bytes
for structured logging; they are raised inside the decoder and
absorbed there, never across the dispatch boundary.
"""

from __future__ import annotations
from typing import List, Optional


class AutoHostError(Exception):
    """Base exception for all spring_autohost errors."""
    pass


class DecodeError(AutoHostError):
    """Raised when a datagram cannot be decoded past a given offset."""

    def __init__(
        self,
        message: str,
        data: bytes,
        offset: int,
        command_name: Optional[str] = None,
    ):
        self.data = bytes(data)
        self.offset = offset
        self.command_name = command_name
        super().__init__(message)

    @property
    def error_type(self) -> str:
        return "DECODE_ERROR"

    @property
    def discarded(self) -> bytes:
        """Bytes of the datagram that were not decoded."""
        return self.data[self.offset:]

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type=self.error_type,
            message=str(self),
            command_name=self.command_name,
            offset=self.offset,
            data=self.data,
        )


class DecodeIncompleteError(DecodeError):
    """Raised when a fixed field of a command is missing from the datagram."""

    @property
    def error_type(self) -> str:
        return "DECODE_INCOMPLETE"


class UnknownCommandCodeError(DecodeError):
    """Raised when the leading byte of a command is not a known code."""

    def __init__(self, code: int, data: bytes, offset: int):
        self.code = code
        super().__init__(f'Unknown command code "{code}"', data, offset)

    @property
    def error_type(self) -> str:
        return "UNKNOWN_COMMAND_CODE"


class TransportError(AutoHostError):
    """Raised when the UDP endpoint cannot be opened or used."""
    pass


class ConfigError(AutoHostError):
    """Raised when configuration values fail validation."""

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)


def _format_error_block(
    error_type: str,
    message: str,
    command_name: Optional[str],
    offset: int,
    data: bytes,
) -> str:
    """Format a structured error block with a hex dump of the datagram."""
    lines = [
        "",
        "=" * 64,
        " DECODE ERROR — REMAINDER OF DATAGRAM DISCARDED",
        "=" * 64,
        f" Error Type:   {error_type}",
        f" Message:      {message}",
    ]

    if command_name is not None:
        lines.append(f" Command:      {command_name}")

    lines.append(f" Offset:       {offset} of {len(data)} bytes")
    lines.append("")
    lines.append(" ── DATAGRAM " + "─" * 51)
    lines.extend(hex_dump(data, marker=offset))
    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)


def hex_dump(data: bytes, marker: Optional[int] = None, width: int = 16) -> List[str]:
    """Render *data* as hex dump lines, flagging the row holding *marker*."""
    if not data:
        return [" (empty)"]
    rows = []
    for start in range(0, len(data), width):
        chunk = data[start:start + width]
        hex_part = " ".join(f"{b:02x}" for b in chunk)
        flag = "<" if marker is not None and start <= marker < start + width else " "
        rows.append(f" {start:04x}  {hex_part:<{width * 3}}{flag}")
    return rows
