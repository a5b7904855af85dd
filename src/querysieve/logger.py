import logging
from typing import Optional

from querysieve.settings import settings as sieve_settings

PACKAGE_LOGGER = "querysieve"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_configured = False


def setup_package_logging(level: str = "INFO") -> None:
    """Set the level of the package logger once from `SIEVE_LOG_LEVEL`.

    Handlers are left to the application; records propagate to the root
    logger as usual.

    Args:
        level: Log level name (e.g., "DEBUG", "INFO")
    """
    global _configured
    if _configured:
        return
    logging.getLogger(PACKAGE_LOGGER).setLevel(_LEVELS.get((level or "").upper(), logging.INFO))
    _configured = True


class Logger:
    """Thin wrapper over standard logging with a convenience message method.

    - Names outside the package (e.g. a processor class name) are nested under
      the package logger so one level setting covers them.
    - `.message(text)` logs at the configured `LOG_LEVEL`.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        if not _configured:
            setup_package_logging(sieve_settings.LOG_LEVEL)
        name = name or PACKAGE_LOGGER
        if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
            name = f"{PACKAGE_LOGGER}.{name}"
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._logger.error(msg, *args, **kwargs)

    def message(self, msg: str, *args, **kwargs) -> None:
        level = _LEVELS.get((sieve_settings.LOG_LEVEL or "").upper(), logging.INFO)
        self._logger.log(level, msg, *args, **kwargs)
