from abc import ABC, abstractmethod
import logging
from pathlib import Path
from typing import Any

from .formatters import ColorizedFormatter, JsonFormatter


class AbstractLogger(ABC):
    """Structured logger: extra keyword args are attached to the record as attrs"""

    @abstractmethod
    def debug(self, msg: str, **attrs): ...
    @abstractmethod
    def info(self, msg: str, **attrs): ...
    @abstractmethod
    def warning(self, msg: str, **attrs): ...
    @abstractmethod
    def error(self, msg: str, **attrs): ...
    @abstractmethod
    def exception(self, msg: str, **attrs): ...


class _AttrsLogger(logging.Logger):
    def makeRecord(  # type: ignore[override]
        self,
        name,
        level,
        fn,
        lno,
        msg,
        args,
        exc_info,
        func=None,
        extra=None,
        sinfo=None,
    ) -> logging.LogRecord:
        record = logging.LogRecord(
            name, level, fn, lno, msg, args, exc_info, func, sinfo
        )
        record.attrs = extra or {}
        return record


class AppLogger(AbstractLogger):
    """Colorized output in debug mode.
    Otherwise json lines, with warnings and errors also written to error_log_path"""

    def __init__(
        self, debug: bool, error_log_path: str | Path | None = None, name="STOREFRONT"
    ):
        logger = _AttrsLogger(name)
        logger.propagate = False
        logger.setLevel(logging.DEBUG if debug else logging.INFO)
        formatter: logging.Formatter = (
            ColorizedFormatter() if debug else JsonFormatter()
        )
        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if not debug and error_log_path:
            file_handler = logging.FileHandler(error_log_path, "a")
            file_handler.setLevel(logging.WARNING)
            handlers.append(file_handler)
        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        self._base_log = logger

    def _log(self, level: int, msg: str, attrs: dict[str, Any], **kwargs) -> None:
        # stacklevel points to the caller of the public method
        self._base_log.log(level, msg, extra=attrs, stacklevel=3, **kwargs)

    def debug(self, msg: str, **attrs) -> None:
        self._log(logging.DEBUG, msg, attrs)

    def info(self, msg: str, **attrs) -> None:
        self._log(logging.INFO, msg, attrs)

    def warning(self, msg: str, **attrs) -> None:
        self._log(logging.WARNING, msg, attrs)

    def error(self, msg: str, **attrs) -> None:
        self._log(logging.ERROR, msg, attrs)

    def exception(self, msg: str, **attrs) -> None:
        self._log(logging.ERROR, msg, attrs, exc_info=True)


class StubLogger(AbstractLogger):
    """Logger stub for use in tests to avoid printing logging messages"""

    def debug(self, msg: str, **attrs): ...
    def info(self, msg: str, **attrs): ...
    def warning(self, msg: str, **attrs): ...
    def error(self, msg: str, **attrs): ...
    def exception(self, msg: str, **attrs): ...


stub_logger = StubLogger()
