"""
日志工具.

提供:
- LoggerAdapter: 封装标准库 `logging.Logger`, 自动合并 `extra` 字段
- StandardHandler: 低于 WARNING 的日志输出到 stdout, 其余输出到 stderr
- LogConfig: 基于 pydantic 的日志配置模型
- get_logger: 按 LogConfig 配置日志记录器

库代码只通过 `get_logger_adapter(__name__)` 获取记录器, 不会自行安装处理器;
是否输出/输出到哪里由使用方通过 `get_logger` 决定.
"""

from __future__ import annotations

import logging
import sys
from types import EllipsisType
from typing import Any, Literal

from pydantic import BaseModel, field_validator

OUTPUT_TYPE = Literal["std", "stdout", "stderr"]

TEXT_FORMAT_DEFAULT = "{asctime} {levelname} {name}: {message}"
DATE_FORMAT_DEFAULT = "%Y-%m-%d %H:%M:%S"
LEVEL_DEFAULT = "INFO"


def get_logger_adapter(name: str | None = None, **extra: Any) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name), **extra)


class LoggerAdapter:
    """
    日志适配器, 封装标准库 `logging.Logger`

    使用 `%` 占位符格式(默认 logging 行为), 提供完整的日志级别方法.
    通过构造函数传入的 `extra` 字段会自动合并到每条日志记录的 `extra` 中.
    """

    def __init__(self, logger: logging.Logger, **extra: Any) -> None:
        self.logger = logger
        self.extra = extra

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        """在调用方传入的 `extra` 基础上合并适配器实例的 `extra`."""
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.CRITICAL, msg, *args, **kwargs)

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        msg, kwargs = self.process(msg, kwargs)
        self.logger.log(level, msg, *args, **kwargs)


class StandardHandler(logging.StreamHandler):
    """
    按级别分流的处理器: 低于 `split_level` 写 stdout, 其余写 stderr.

    每条记录在输出时才取 sys.stdout / sys.stderr, 以便跟随流的重定向.
    """

    def __init__(self, split_level: int = logging.WARNING) -> None:
        super().__init__(sys.stdout)
        self.split_level = split_level

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stdout if record.levelno < self.split_level else sys.stderr
        super().emit(record)


class LogConfig(BaseModel):
    """
    日志配置.

    属性:
        name: 日志记录器名称, None 表示 root.
        level: 日志级别, 大小写不敏感.
        output: std(按级别分流)/stdout/stderr.
        text_format: `{` 风格的格式字符串.
        date_format: 时间格式.
        propagate: 是否向上级记录器传递.
    """

    name: str | None = "pythonic.helpers"
    level: str = LEVEL_DEFAULT
    output: OUTPUT_TYPE = "std"
    text_format: str = TEXT_FORMAT_DEFAULT
    date_format: str | None = DATE_FORMAT_DEFAULT
    propagate: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def check_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            if value not in logging.getLevelNamesMapping():
                raise ValueError(f"Unknown level: {value}")
        return value

    @field_validator("output", mode="before")
    @classmethod
    def lower_output(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("text_format")
    @classmethod
    def check_text_format(cls, value: str) -> str:
        logging.StrFormatStyle(value).validate()
        return value


def get_handler(config: LogConfig) -> logging.Handler:
    """
    根据日志配置创建处理器.

    参数:
        config (LogConfig): 日志配置.

    返回:
        logging.Handler: 已设置格式化器的处理器.
    """
    if config.output == "stdout":
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
    elif config.output == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    else:
        handler = StandardHandler()

    handler.setFormatter(
        logging.Formatter(config.text_format, config.date_format, style="{")
    )
    return handler


def get_logger(
    config: LogConfig, *, logger: logging.Logger | str | None | EllipsisType = ...
) -> logging.Logger:
    """
    按配置设置日志记录器, 并替换其全部处理器.

    参数:
        config: 日志配置.
        logger: 目标记录器或其名称; 省略时使用 `config.name`.

    返回:
        logging.Logger: 配置后的记录器.
    """
    if logger is ...:
        logger = logging.getLogger(config.name)
    elif not isinstance(logger, logging.Logger):
        logger = logging.getLogger(logger)

    logger.setLevel(config.level)
    logger.propagate = config.propagate

    for h in logger.handlers[:]:
        logger.removeHandler(h)
    logger.addHandler(get_handler(config))
    return logger
