"""Structured logging adapter used for HTTP retry messages."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence


def fields_from_keys_and_values(keys_and_values: Sequence[Any]) -> list[tuple[str, Any]]:
    """Pair up alternating keys and values, dropping pairs whose key is not a string."""
    pairs = zip(keys_and_values[0::2], keys_and_values[1::2])
    return [(key, value) for key, value in pairs if isinstance(key, str)]


class RetryLogger:
    """Leveled logger taking alternating key/value arguments; debug and warn log at info."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("netbox_ip_controller")

    def _log(self, level: int, msg: str, keys_and_values: Sequence[Any]) -> None:
        fields = fields_from_keys_and_values(keys_and_values)
        text = " ".join([msg, *(f"{key}={value!r}" for key, value in fields)])
        self._logger.log(level, "%s", text, extra={"fields": fields})

    def error(self, msg: str, *args: Any) -> None:
        self._log(logging.ERROR, msg, args)

    def info(self, msg: str, *args: Any) -> None:
        self._log(logging.INFO, msg, args)

    def debug(self, msg: str, *args: Any) -> None:
        self._log(logging.INFO, msg, args)

    def warn(self, msg: str, *args: Any) -> None:
        self._log(logging.INFO, msg, args)