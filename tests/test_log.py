from __future__ import annotations

import io
import json

import structlog

from ccswitch_sdk.log import configure_logging


def test_json_output_filters_below_level() -> None:
    stream = io.StringIO()
    configure_logging("warning", json_output=True, stream=stream)
    logger = structlog.get_logger()

    logger.info("quiet_event")
    logger.warning("loud_event", command="get_settings")

    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert len(lines) == 1
    assert lines[0]["event"] == "loud_event"
    assert lines[0]["level"] == "warning"
    assert lines[0]["command"] == "get_settings"
    assert "timestamp" in lines[0]


def test_console_output_at_debug() -> None:
    stream = io.StringIO()
    configure_logging("debug", stream=stream)
    structlog.get_logger().debug("request_completed", status=200)
    assert "request_completed" in stream.getvalue()
    assert "status=200" in stream.getvalue()
