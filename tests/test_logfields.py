import logging

import pytest

from netbox_ip_controller.logfields import RetryLogger, fields_from_keys_and_values


@pytest.mark.parametrize(
    "keys_and_values, expected",
    [
        ([], []),
        (["foo", "bar"], [("foo", "bar")]),
        (["foo", 1, "bar", True], [("foo", 1), ("bar", True)]),
        (["foo", "bar", "baz"], [("foo", "bar")]),
        ([100, "bar"], []),
    ],
)
def test_fields_from_keys_and_values(keys_and_values, expected):
    assert fields_from_keys_and_values(keys_and_values) == expected


LOGGER_NAME = "tests.retry"


@pytest.mark.parametrize(
    "method, level",
    [
        ("error", logging.ERROR),
        ("info", logging.INFO),
        ("debug", logging.INFO),
        ("warn", logging.INFO),
    ],
)
def test_levels(caplog, method, level):
    logger = RetryLogger(logging.getLogger(LOGGER_NAME))
    with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
        getattr(logger, method)("retrying", "attempt", 1)
    assert [record.levelno for record in caplog.records] == [level]


def test_fields_attached_to_record(caplog):
    logger = RetryLogger(logging.getLogger(LOGGER_NAME))
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        logger.info("retrying", "attempt", 1, 7, "dropped")
    record = caplog.records[0]
    assert record.fields == [("attempt", 1)]
    assert record.getMessage() == "retrying attempt=1"