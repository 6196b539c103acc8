from collections.abc import Mapping
import logging
import json

from core.utils import CustomJSONEncoder

_RESET = "\x1b[0m"
_LEVEL_COLORS = {
    logging.DEBUG: "\x1b[0;37m",
    logging.INFO: "\x1b[1;36m",
    logging.WARNING: "\x1b[1;33m",
    logging.ERROR: "\x1b[1;31m",
    logging.CRITICAL: "\x1b[5m\x1b[1;31m",
}


def _get_attrs(record: logging.LogRecord) -> Mapping:
    return getattr(record, "attrs", None) or {}


class ColorizedFormatter(logging.Formatter):
    """Human readable single line output, colored by level"""

    FMT = "%(asctime)s %(name)s (%(filename)s:%(lineno)d) %(levelname)s - %(message)s"

    def __init__(self) -> None:
        super().__init__(self.FMT)
        self._level_formatters = {
            level: logging.Formatter(color + self.FMT + _RESET)
            for level, color in _LEVEL_COLORS.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        formatter = self._level_formatters.get(record.levelno)
        line = formatter.format(record) if formatter else super().format(record)
        if attrs := _get_attrs(record):
            line += " " + ", ".join(f"{key}={value}" for key, value in attrs.items())
        return line


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        res = {
            "severity": record.levelname,
            "resource": f"{record.pathname}:{record.lineno}",
            "attributes": _get_attrs(record),
            "timestamp": self.formatTime(record),
            "body": record.getMessage(),
        }
        if record.exc_info:
            res["exception"] = self.formatException(record.exc_info)
        return json.dumps(res, cls=CustomJSONEncoder)
