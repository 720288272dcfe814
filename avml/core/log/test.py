"""Tests for the logging micro API."""

import io
import logging

import pytest

from .lib import get_logger, setup_logging


class TestGetLogger:
    """Tests for get_logger."""

    @pytest.mark.unit
    def test_default_name(self):
        """Unnamed logger uses the package name."""
        assert get_logger().name == "avml"

    @pytest.mark.unit
    def test_named_logger(self):
        """Named logger keeps its name."""
        assert get_logger("avml.cli").name == "avml.cli"


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.mark.unit
    def test_writes_to_stream(self):
        """Messages at or above the level reach the stream."""
        stream = io.StringIO()
        setup_logging(logging.INFO, stream=stream)
        get_logger("avml.test").info("tokenized 3 lines")
        assert "tokenized 3 lines" in stream.getvalue()
        assert "INFO" in stream.getvalue()

    @pytest.mark.unit
    def test_accepts_level_name(self):
        """Level names are resolved case-insensitively."""
        stream = io.StringIO()
        setup_logging("warning", stream=stream)
        logger = get_logger("avml.test")
        logger.info("hidden")
        logger.warning("shown")
        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    @pytest.mark.unit
    def test_unknown_level_name_falls_back_to_info(self):
        """Unknown level names fall back to INFO."""
        stream = io.StringIO()
        setup_logging("chatty", stream=stream)
        assert logging.getLogger().level == logging.INFO
