"""
Tests for structured log formatting.
"""

import json
import logging
from decimal import Decimal

from shared.config.logging import DevelopmentFormatter, StructuredFormatter, get_logger


def _record(**attrs):
    record = logging.LogRecord("rest_api.command", logging.INFO, __file__, 10, "Command closed", (), None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_json_carries_context_and_ids(self):
        """Should emit keyword context and correlation ids as JSON."""
        record = _record(
            extra_data={"command_id": "c1", "total": Decimal("58.00")},
            request_id="req-1",
            staff_id="w1",
        )

        payload = json.loads(StructuredFormatter().format(record))

        assert payload["message"] == "Command closed"
        assert payload["data"] == {"command_id": "c1", "total": "58.00"}
        assert payload["request_id"] == "req-1"
        assert payload["staff_id"] == "w1"

    def test_placeholders_are_omitted(self):
        record = _record(extra_data=None, request_id="-", staff_id="-")

        payload = json.loads(StructuredFormatter().format(record))

        assert "request_id" not in payload
        assert "staff_id" not in payload
        assert "data" not in payload


class TestDevelopmentFormatter:
    def test_context_rendered_inline(self):
        record = _record(extra_data={"command_id": "c1"}, request_id="abcdef123456", staff_id="w1")

        line = DevelopmentFormatter().format(record)

        assert "Command closed" in line
        assert "command_id=c1" in line
        assert "abcdef12 w1" in line


class TestStructuredLogger:
    def test_keyword_context_reaches_record(self, caplog):
        """Should store keyword arguments as extra_data on the record."""
        logger = get_logger("rest_api.test")

        with caplog.at_level(logging.INFO, logger="rest_api.test"):
            logger.info("Item added", command_id="c1", quantity=2)

        assert caplog.records[-1].extra_data == {"command_id": "c1", "quantity": 2}
