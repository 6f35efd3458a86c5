# Area: Shared Tests
"""Tests for the exception hierarchy and error log formatting."""

from spring_autohost.errors import (
    AutoHostError,
    ConfigError,
    DecodeError,
    DecodeIncompleteError,
    TransportError,
    UnknownCommandCodeError,
    hex_dump,
)


class TestHierarchy:
    """All package errors share one base."""

    def test_base_class(self):
        for cls in (DecodeError, TransportError, ConfigError):
            assert issubclass(cls, AutoHostError)
        assert issubclass(DecodeIncompleteError, DecodeError)
        assert issubclass(UnknownCommandCodeError, DecodeError)

    def test_config_error_defaults(self):
        assert ConfigError("bad").validation_errors == []


class TestDecodeErrors:
    """Tests for DecodeError and subclasses."""

    def test_unknown_code(self):
        error = UnknownCommandCodeError(99, bytes([0, 99, 1]), 1)
        assert str(error) == 'Unknown command code "99"'
        assert error.code == 99
        assert error.error_type == "UNKNOWN_COMMAND_CODE"
        assert error.discarded == bytes([99, 1])

    def test_incomplete(self):
        error = DecodeIncompleteError("short", b"\x0b\x03", 0, "PLAYER_LEFT")
        assert error.error_type == "DECODE_INCOMPLETE"
        assert error.command_name == "PLAYER_LEFT"

    def test_format_error_log(self):
        error = DecodeIncompleteError("short", b"\x0b\x03", 0, "PLAYER_LEFT")
        block = error.format_error_log()
        assert "DECODE_INCOMPLETE" in block
        assert "PLAYER_LEFT" in block
        assert "Offset:       0 of 2 bytes" in block
        assert "0b 03" in block

    def test_format_error_log_without_command(self):
        block = UnknownCommandCodeError(7, bytes([7]), 0).format_error_log()
        assert "Command:" not in block


class TestHexDump:
    """Tests for hex_dump()."""

    def test_empty(self):
        assert hex_dump(b"") == [" (empty)"]

    def test_rows_and_marker(self):
        rows = hex_dump(bytes(range(20)), marker=17)
        assert len(rows) == 2
        assert rows[0].startswith(" 0000  00 01 02")
        assert rows[0].endswith(" ")
        assert rows[1].startswith(" 0010  10 11 12 13")
        assert rows[1].endswith("<")
