import logging
import threading
from io import StringIO

import pytest

from vipps_login.core.logging import (
    NOISY_HTTP_LOGGERS,
    CorrelationFormatter,
    CorrelationIdFilter,
    HttpRequestLogDowngradeFilter,
    attempt_context,
    configure_logging,
    current_correlation_id,
    parse_log_level,
    set_noisy_http_logger_levels,
)


@pytest.mark.unit
class TestHttpRequestLogDowngradeFilter:
    def setup_method(self) -> None:
        self.stream = StringIO()
        self.handler = logging.StreamHandler(self.stream)
        self.handler.setFormatter(logging.Formatter("%(levelname)s:%(message)s"))
        self.handler.addFilter(HttpRequestLogDowngradeFilter(*NOISY_HTTP_LOGGERS))

    def _emit(self, logger_name: str, level: int, message: str) -> str:
        logger = logging.getLogger(logger_name)
        logger.handlers = [self.handler]
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.log(level, message)
        self.handler.flush()
        output = self.stream.getvalue()
        self.stream.truncate(0)
        self.stream.seek(0)
        logger.handlers = []
        logger.propagate = True
        return output

    def test_downgrades_noisy_http_info_logs(self):
        output = self._emit("httpx", logging.INFO, 'HTTP Request: POST "HTTP/1.1 200 OK"')
        assert output.startswith("DEBUG:HTTP Request: POST")

    def test_preserves_non_noisy_info_logs(self):
        output = self._emit("vipps_login.core.oauth.client", logging.INFO, "Important info message")
        assert output.startswith("INFO:Important info message")


@pytest.mark.unit
class TestNoisyHttpLoggerLevelSetter:
    def test_sets_warning_by_default(self):
        set_noisy_http_logger_levels("INFO")
        for name in NOISY_HTTP_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_stays_debug_when_global_debug(self):
        set_noisy_http_logger_levels("DEBUG")
        for name in NOISY_HTTP_LOGGERS:
            assert logging.getLogger(name).level == logging.DEBUG


def _record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )


@pytest.mark.unit
class TestCorrelationFormatter:
    def test_adds_correlation_id(self):
        formatter = CorrelationFormatter("%(message)s")
        record = _record()
        record.correlation_id = "1234567890"

        formatted = formatter.format(record)
        assert formatted.startswith("[12345678] hello")

    def test_without_correlation_id(self):
        formatter = CorrelationFormatter("%(message)s")

        assert formatter.format(_record()) == "hello"


@pytest.mark.unit
class TestAttemptContext:
    def test_filter_tags_records_inside_context(self):
        log_filter = CorrelationIdFilter()

        with attempt_context("state-abcdefgh-123"):
            record = _record()
            log_filter.filter(record)
            assert current_correlation_id() == "state-abcdefgh-123"

        assert record.correlation_id == "state-abcdefgh-123"
        assert current_correlation_id() is None

    def test_context_is_per_thread(self):
        """Test another thread does not see this thread's correlation id."""
        seen = []

        with attempt_context("outer"):
            worker = threading.Thread(target=lambda: seen.append(current_correlation_id()))
            worker.start()
            worker.join()

        assert seen == [None]


@pytest.mark.unit
class TestConfigureLogging:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("debug", "DEBUG"),
            ("WARNING  # quieter", "WARNING"),
            ("verbose", "INFO"),
            ("", "INFO"),
            (None, "INFO"),
        ],
    )
    def test_parse_log_level(self, value, expected):
        assert parse_log_level(value) == expected

    def test_installs_single_handler(self):
        level = configure_logging("DEBUG")

        root = logging.getLogger()
        assert level == "DEBUG"
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, CorrelationFormatter)
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_invalid_level_falls_back_to_info(self):
        assert configure_logging("LOUD") == "INFO"
        assert logging.getLogger().level == logging.INFO
