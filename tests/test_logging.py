"""Unit tests for logging helpers."""

import json
import logging

from nftmeta.core.logging import LOGGER_NAME, JsonFormatter, configure_logging, get_logger


def test_get_logger_is_child() -> None:
    assert get_logger("metadata.service").name == "nftmeta.metadata.service"
    assert get_logger().name == LOGGER_NAME


def test_configure_replaces_handler() -> None:
    configure_logging("DEBUG")
    logger = configure_logging(logging.WARNING, json_format=True)

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
    assert logger.propagate is False
    assert isinstance(logger.handlers[0].formatter, JsonFormatter)


def test_json_format_escapes_message() -> None:
    record = logging.LogRecord(
        "nftmeta.test", logging.WARNING, __file__, 1,
        'bad tokenId "0x\\zz"\nsecond line', None, None,
    )
    line = JsonFormatter().format(record)

    assert "\n" not in line
    payload = json.loads(line)
    assert payload["message"] == 'bad tokenId "0x\\zz"\nsecond line'
    assert payload["level"] == "WARNING"
    assert payload["name"] == "nftmeta.test"
