"""Tests for shared utility functions and the logging context."""

import io
import logging

from whatsorder.config import LOG_FORMAT
from whatsorder.logging_context import (
    MessageIdFilter,
    get_message_id,
    get_message_logger,
    set_message_id,
)
from whatsorder.utils import is_same_phone, normalize_phone, parse_count


class TestNormalizePhone:
    def test_strips_whatsapp_prefix(self):
        assert normalize_phone("whatsapp:+919812345678") == "+919812345678"

    def test_prefix_is_case_insensitive(self):
        assert normalize_phone("WhatsApp:+919812345678") == "+919812345678"

    def test_strips_spaces_and_dashes(self):
        assert normalize_phone("+91 98123-45678") == "+919812345678"

    def test_strips_parentheses(self):
        assert normalize_phone("(0) 98123 45678") == "09812345678"

    def test_clean_number_unchanged(self):
        assert normalize_phone("09812345678") == "09812345678"


class TestIsSamePhone:
    def test_formats_match(self):
        assert is_same_phone("whatsapp:+91 98123 45678", "+919812345678")

    def test_different_numbers(self):
        assert not is_same_phone("+919812345678", "+919812345679")

    def test_empty_never_matches(self):
        assert not is_same_phone("", "")
        assert not is_same_phone("+919812345678", "")


class TestMessageId:
    def test_generated_id(self):
        message_id = set_message_id()
        assert message_id.startswith("MSG-")
        assert get_message_id() == message_id

    def test_explicit_id(self):
        assert set_message_id("MSG-fixed") == "MSG-fixed"
        assert get_message_id() == "MSG-fixed"

    def test_filter_adds_message_id(self):
        set_message_id("MSG-abc")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
        assert MessageIdFilter().filter(record)
        assert record.message_id == "MSG-abc"

    def test_filter_attached_once(self):
        logger = get_message_logger("whatsorder.test")
        get_message_logger("whatsorder.test")
        assert sum(isinstance(f, MessageIdFilter) for f in logger.filters) == 1

    def test_log_format_shows_message_id(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(MessageIdFilter())
        logger = logging.getLogger("whatsorder.test.format")
        logger.addHandler(handler)
        try:
            set_message_id("MSG-fmt")
            logger.warning("hello")
        finally:
            logger.removeHandler(handler)
        assert "[MSG-fmt]: hello" in stream.getvalue()


class TestParseCount:
    def test_digits(self):
        assert parse_count("12") == 12

    def test_surrounding_space(self):
        assert parse_count(" 3 ") == 3

    def test_empty(self):
        assert parse_count("") is None

    def test_not_a_number(self):
        assert parse_count("two") is None

    def test_too_many_digits(self):
        assert parse_count("1" * 5000) is None
        assert parse_count("1" * 10) is None
        assert parse_count("9" * 9) == 999_999_999
