"""
Structured logging with key=value and JSON output support.

Thin layer over the standard library ``logging`` module. Every call takes an
event name plus keyword fields; fields are rendered as ``key=value`` pairs by
[StructuredFormatter][bitback.core.logger.StructuredFormatter] or, when the
logger is built with ``json_output=True``, as one JSON object per line.

Examples:
    ```python
    from bitback.core.logger import Logger

    logger = Logger("keys")
    logger.info("key_generated", tier="free", host_id=7)
    # Output: info keys key_generated tier=free host_id=7
    ```
"""

import datetime
import json
import logging
from typing import Any, ClassVar


_TRUNCATION_MARKER = "...<truncated {} chars>"


def _truncate(value: str, max_length: int | None) -> str:
    if max_length and len(value) > max_length:
        return value[:max_length] + _TRUNCATION_MARKER.format(len(value) - max_length)
    return value


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = 1000,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Values are truncated to ``max_value_length`` characters. Values that are
    empty or contain whitespace, ``=`` or quotes are escaped and wrapped in
    double quotes so the line stays machine-parseable.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value (None disables it).
        prefix: String prepended to non-empty output.

    Returns:
        The formatted string, e.g. ``' user_id=42 remarks="a b"'``, or an
        empty string when ``kwargs`` is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for key, value in kwargs.items():
        text = _truncate(str(value), max_value_length)
        if not text or any(c in text for c in " =\"'"):
            escaped = text.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{key}="{escaped}"')
        else:
            parts.append(f"{key}={text}")
    return prefix + " ".join(parts)


class StructuredFormatter(logging.Formatter):
    """Render every record as ``level logger message key=value ...``.

    Structured fields travel on the record as the ``structured_kv`` extra.
    Records from plain ``logging.getLogger()`` calls have no such field and
    are emitted with the same prefix.
    """

    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        fields: dict[str, Any] = getattr(record, "structured_kv", {})
        if fields:
            line += format_kv_pairs(fields)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class Logger:
    """Structured logger that turns keyword arguments into log fields.

    Mirrors the standard logging API (``debug`` ... ``exception``), each
    method taking an event name and arbitrary keyword fields.
    """

    _DEFAULT_MAX_VALUE_LENGTH: ClassVar[int] = 1000

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
    ) -> None:
        """Initialize a structured logger.

        Args:
            name: Name passed to ``logging.getLogger``.
            json_output: Emit JSON objects instead of key=value pairs.
            max_value_length: Per-value truncation limit (default 1000).
        """
        self._logger = logging.getLogger(name)
        self._json_output = json_output
        self._max_value_length = (
            self._DEFAULT_MAX_VALUE_LENGTH if max_value_length is None else max_value_length
        )

    @property
    def name(self) -> str:
        return self._logger.name

    def _render_json(self, msg: str, level: str, fields: dict[str, Any]) -> str:
        record = {
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            "level": level,
            "service": self._logger.name,
            "message": msg,
            **fields,
        }
        return json.dumps(record, default=str)

    def _log(self, level: int, msg: str, fields: dict[str, Any], *, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if self._json_output:
            level_name = logging.getLevelName(level).lower()
            self._logger.log(level, self._render_json(msg, level_name, fields), exc_info=exc_info)
            return
        extra = (
            {
                "structured_kv": {
                    k: _truncate(str(v), self._max_value_length) for k, v in fields.items()
                }
            }
            if fields
            else {}
        )
        self._logger.log(level, msg, extra=extra, exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log at ERROR level with the active exception's traceback."""
        self._log(logging.ERROR, msg, kwargs, exc_info=True)
