"""
日志工具测试套件
"""

import logging

import pytest
from pydantic import ValidationError

from pythonic.helpers.log import (
    LogConfig,
    LoggerAdapter,
    StandardHandler,
    get_handler,
    get_logger,
    get_logger_adapter,
)


class TestLogConfig:
    """测试日志配置模型"""

    def test_defaults(self):
        config = LogConfig()
        assert config.level == "INFO"
        assert config.output == "std"
        assert config.propagate is True

    def test_level_is_case_insensitive(self):
        assert LogConfig(level=" debug ").level == "DEBUG"

    def test_unknown_level(self):
        with pytest.raises(ValidationError):
            LogConfig(level="verbose")

    def test_output_is_case_insensitive(self):
        assert LogConfig(output="STDERR").output == "stderr"

    def test_invalid_output(self):
        with pytest.raises(ValidationError):
            LogConfig(output="file.log")

    def test_invalid_text_format(self):
        with pytest.raises(ValidationError):
            LogConfig(text_format="no fields here")


class TestGetLogger:
    """测试按配置设置记录器"""

    def test_handler_types(self):
        assert isinstance(get_handler(LogConfig()), StandardHandler)
        handler = get_handler(LogConfig(output="stderr"))
        assert type(handler) is logging.StreamHandler

    def test_replaces_handlers(self):
        name = "tests.log.replace"
        logger = logging.getLogger(name)
        logger.addHandler(logging.NullHandler())
        config = LogConfig(name=name, level="warning", propagate=False)

        result = get_logger(config)
        assert result is logger
        assert logger.level == logging.WARNING
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], StandardHandler)

    def test_standard_handler_splits_streams(self, capsys):
        config = LogConfig(text_format="{levelname}:{message}")
        logger = get_logger(config, logger="tests.log.streams")
        logger.propagate = False
        logger.info("to stdout")
        logger.error("to stderr")
        captured = capsys.readouterr()
        assert captured.out == "INFO:to stdout\n"
        assert captured.err == "ERROR:to stderr\n"


class TestLoggerAdapter:
    """测试日志适配器"""

    def test_extra_is_merged(self, caplog):
        adapter = get_logger_adapter("tests.log.adapter", component="demo")
        assert isinstance(adapter, LoggerAdapter)
        with caplog.at_level(logging.DEBUG, logger="tests.log.adapter"):
            adapter.debug("value %r", 1, extra={"step": 2})
        record = caplog.records[-1]
        assert record.getMessage() == "value 1"
        assert record.component == "demo"
        assert record.step == 2

    def test_disabled_level_is_skipped(self, caplog):
        adapter = get_logger_adapter("tests.log.disabled")
        with caplog.at_level(logging.WARNING, logger="tests.log.disabled"):
            adapter.info("hidden")
        assert caplog.records == []
