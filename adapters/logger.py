"""
로거 어댑터

Core 레이어의 LoggerPort를 구현하는 Python 표준 로깅 어댑터입니다.
모든 로거는 "cmflairs" 아래에 매달리고, 콘솔 핸들러는 최상위 로거에만 붙습니다.
"""

import logging
import sys

from core.domain.ports import LoggerPort

ROOT_LOGGER_NAME = "cmflairs"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _qualified_name(name: str) -> str:
    """로거 이름을 cmflairs 하위 이름으로 바꿉니다."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def _with_context(message: str, context: dict) -> str:
    """키워드 인자를 `key=value` 형태로 메시지 뒤에 붙입니다."""
    if not context:
        return message
    rendered = ", ".join(f"{key}={value}" for key, value in context.items())
    return f"{message} [{rendered}]"


class LoggerAdapter(LoggerPort):
    """Python 표준 로깅을 사용하는 로거 어댑터"""

    def __init__(self, name: str = ROOT_LOGGER_NAME, level: str = "INFO", format_string: str = DEFAULT_FORMAT):
        self.logger = logging.getLogger(_qualified_name(name))
        self.logger.setLevel(getattr(logging, level.upper()))

        # 콘솔 핸들러는 최상위 로거에 한 번만
        root = logging.getLogger(ROOT_LOGGER_NAME)
        if not root.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(format_string))
            root.addHandler(handler)

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(_with_context(message, kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(_with_context(message, kwargs))

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(_with_context(message, kwargs))

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(_with_context(message, kwargs))


def create_logger(name: str = ROOT_LOGGER_NAME, level: str = "INFO") -> LoggerPort:
    """로거 인스턴스를 생성합니다. 이름은 cmflairs 하위로 정규화됩니다."""
    return LoggerAdapter(name, level)
