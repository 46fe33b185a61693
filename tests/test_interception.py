"""
Interception engine (interception.py)

Tests the runtime failure hook and the uncaught exception hook:
- reporting mask gate
- conversion of RECOVERABLE_ERROR / USER_ERROR
- logging filter
- chained hook pass-through
- re-raise of uncaught exceptions
"""

import pytest

from faultline import ErrorHandler
from faultline.codes import ErrorCategory, LogLevel
from faultline.failures import ErrorException
from faultline.testing import RecordingHost


class RecordingHook:
    """Chained runtime failure hook double."""

    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def __call__(self, category, message, filename, lineno, context):
        self.calls.append((category, message, filename, lineno, context))
        return self.result


# ============================================================================
# Runtime failures
# ============================================================================

class TestHandleError:

    def test_logs_selected_category(self, error_handler, captured_logs):
        error_handler.log_uncaught(ErrorCategory.WARNING)

        result = error_handler.handle_error(ErrorCategory.WARNING, "Division by zero", "calc.py", 12)

        assert result is False
        assert captured_logs.messages == ["Warning: Division by zero at calc.py line 12"]
        assert captured_logs.levels == [LogLevel.WARNING]

        failure = captured_logs.contexts[0]["failure"]
        assert isinstance(failure, ErrorException)
        assert failure.category is ErrorCategory.WARNING

    def test_ignores_unselected_category(self, error_handler, captured_logs):
        error_handler.log_uncaught(ErrorCategory.WARNING)

        assert error_handler.handle_error(ErrorCategory.NOTICE, "fyi", "a.py", 1) is False
        assert captured_logs.records == []

    def test_reporting_mask_gates_logging(self, captured_logs):
        host = RecordingHost(reporting=ErrorCategory.ALL & ~ErrorCategory.NOTICE)
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.log_uncaught(ErrorCategory.ALL)

        handler.handle_error(ErrorCategory.NOTICE, "fyi", "a.py", 1)
        handler.handle_error(ErrorCategory.WARNING, "careful", "a.py", 2)

        assert captured_logs.messages == ["Warning: careful at a.py line 2"]

    def test_missing_location(self, error_handler, captured_logs):
        error_handler.log_uncaught(ErrorCategory.USER_NOTICE)
        error_handler.handle_error(ErrorCategory.USER_NOTICE, "hello")

        assert captured_logs.messages == ["Notice: hello at unknown line 0"]


class TestConvertFatalErrors:

    @pytest.mark.parametrize("category", [ErrorCategory.RECOVERABLE_ERROR, ErrorCategory.USER_ERROR])
    def test_converts(self, error_handler, captured_logs, category):
        error_handler.log_uncaught(ErrorCategory.ALL)
        error_handler.convert_fatal_errors_to_exceptions()

        with pytest.raises(ErrorException) as exc_info:
            error_handler.handle_error(category, "Invalid argument", "app.py", 7)

        assert exc_info.value.category is category
        assert exc_info.value.message == "Invalid argument"
        assert exc_info.value.filename == "app.py"
        assert exc_info.value.lineno == 7
        assert captured_logs.records == []

    def test_other_categories_not_converted(self, error_handler, captured_logs):
        error_handler.log_uncaught(ErrorCategory.WARNING)
        error_handler.convert_fatal_errors_to_exceptions()

        assert error_handler.handle_error(ErrorCategory.WARNING, "careful", "a.py", 1) is False
        assert len(captured_logs.records) == 1

    def test_not_converted_by_default(self, error_handler, captured_logs):
        error_handler.log_uncaught(ErrorCategory.USER_ERROR)

        assert error_handler.handle_error(ErrorCategory.USER_ERROR, "bad", "a.py", 1) is False
        assert captured_logs.levels == [LogLevel.ERROR]

    def test_conversion_respects_reporting_mask(self, captured_logs):
        host = RecordingHost(reporting=ErrorCategory.ALL & ~ErrorCategory.USER_ERROR)
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.convert_fatal_errors_to_exceptions()

        assert handler.handle_error(ErrorCategory.USER_ERROR, "bad", "a.py", 1) is False

    def test_enables_runtime_hook(self, error_handler, recording_host):
        error_handler.convert_fatal_errors_to_exceptions()

        assert error_handler.converts_fatal_errors is True
        assert recording_host.install_count("runtime") == 1
        assert error_handler.logged_error_types == ErrorCategory(0)


class TestChainedErrorHandler:

    def test_result_of_chained_hook(self, captured_logs):
        legacy = RecordingHook(result=True)
        host = RecordingHost(previous_runtime_hook=legacy)
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.log_uncaught(ErrorCategory.WARNING)

        context = {"request": "GET /"}
        result = handler.handle_error(ErrorCategory.WARNING, "careful", "a.py", 3, context)

        assert result is True
        assert legacy.calls == [(ErrorCategory.WARNING, "careful", "a.py", 3, context)]
        assert len(captured_logs.records) == 1

    def test_chained_hook_called_for_unselected_category(self, captured_logs):
        legacy = RecordingHook(result=None)
        host = RecordingHost(previous_runtime_hook=legacy)
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.log_uncaught(ErrorCategory.WARNING)

        assert handler.handle_error(ErrorCategory.NOTICE, "fyi", "a.py", 1) is None
        assert len(legacy.calls) == 1
        assert captured_logs.records == []

    def test_chained_hook_called_outside_reporting_mask(self, captured_logs):
        legacy = RecordingHook()
        host = RecordingHost(reporting=ErrorCategory(0), previous_runtime_hook=legacy)
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.log_uncaught(ErrorCategory.WARNING)

        handler.convert_fatal_errors_to_exceptions()

        assert handler.handle_error(ErrorCategory.WARNING, "careful", "a.py", 1) is True
        assert handler.handle_error(ErrorCategory.USER_ERROR, "bad", "a.py", 2) is True

        assert len(legacy.calls) == 2
        assert captured_logs.records == []

    def test_chained_hook_skipped_when_converted(self, captured_logs):
        legacy = RecordingHook()
        host = RecordingHost(previous_runtime_hook=legacy)
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.convert_fatal_errors_to_exceptions()

        with pytest.raises(ErrorException):
            handler.handle_error(ErrorCategory.USER_ERROR, "bad", "a.py", 1)

        assert legacy.calls == []


# ============================================================================
# Uncaught exceptions
# ============================================================================

class TestHandleException:

    def test_logs_and_reraises(self, error_handler, captured_logs):
        error_handler.log_uncaught(ValueError)
        exc = ValueError("invalid amount")

        with pytest.raises(ValueError) as exc_info:
            error_handler.handle_exception(exc)

        assert exc_info.value is exc
        assert len(captured_logs.records) == 1
        assert captured_logs.levels == [LogLevel.ERROR]
        assert captured_logs.contexts == [{"exception": exc}]

    def test_subclass_matches(self, error_handler, captured_logs):
        error_handler.log_uncaught(LookupError)

        with pytest.raises(KeyError):
            error_handler.handle_exception(KeyError("id"))

        assert len(captured_logs.records) == 1

    def test_unselected_class_not_logged(self, error_handler, captured_logs):
        error_handler.log_uncaught(ValueError)

        with pytest.raises(RuntimeError):
            error_handler.handle_exception(RuntimeError("boom"))

        assert captured_logs.records == []

    def test_nothing_logged_without_filter(self, error_handler, captured_logs):
        with pytest.raises(RuntimeError):
            error_handler.handle_exception(RuntimeError("boom"))

        assert captured_logs.records == []

    def test_error_exception_uses_category_mask(self, error_handler, captured_logs):
        error_handler.log_uncaught(ErrorCategory.USER_ERROR)
        error = ErrorException("bad", ErrorCategory.USER_ERROR, "a.py", 1)

        with pytest.raises(ErrorException):
            error_handler.handle_exception(error)

        assert captured_logs.messages == ["Fatal error: bad at a.py line 1"]

    def test_error_exception_outside_mask(self, error_handler, captured_logs):
        error_handler.log_uncaught(Exception)
        error_handler.log_uncaught(ErrorCategory.WARNING)

        with pytest.raises(ErrorException):
            error_handler.handle_exception(ErrorException("bad", ErrorCategory.USER_ERROR))

        assert captured_logs.records == []

    def test_uninstalls_hooks(self, error_handler, recording_host):
        error_handler.log_uncaught(ErrorCategory.WARNING)
        error_handler.log_uncaught(ValueError)

        with pytest.raises(ValueError):
            error_handler.handle_exception(ValueError("x"))

        assert recording_host.runtime_hook is None
        assert recording_host.exception_hook is None
        assert recording_host.install_count("exception", including_removal=True) == 2
        assert recording_host.install_count("runtime", including_removal=True) == 2

    def test_calls_fatal_error_callback(self, error_handler):
        seen = []
        error_handler.on_fatal_error(seen.append)
        exc = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            error_handler.handle_exception(exc)

        assert seen == [exc]

    def test_calls_chained_exception_hook(self, captured_logs):
        seen = []
        host = RecordingHost(previous_exception_hook=seen.append)
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.log_uncaught(ValueError)
        exc = ValueError("x")

        with pytest.raises(ValueError):
            handler.handle_exception(exc)

        assert seen == [exc]
        assert len(captured_logs.records) == 1

    def test_order_log_callback_chain(self, captured_logs):
        order = []
        host = RecordingHost(previous_exception_hook=lambda exc: order.append("chained"))
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.log_uncaught(ValueError)
        handler.on_fatal_error(lambda exc: order.append(f"callback after {len(captured_logs.records)} record"))

        with pytest.raises(ValueError):
            handler.handle_exception(ValueError("x"))

        assert order == ["callback after 1 record", "chained"]


class UnprintableError(Exception):
    def __str__(self):
        raise RuntimeError("broken __str__")


class TestFatalExceptions:

    @pytest.mark.parametrize("exc,category", [
        (MemoryError("oom"), ErrorCategory.ERROR),
        (RecursionError("too deep"), ErrorCategory.ERROR),
        (SyntaxError("bad"), ErrorCategory.PARSE),
        (SystemError("core"), ErrorCategory.CORE_ERROR),
        (ImportError("missing"), ErrorCategory.COMPILE_ERROR),
    ])
    def test_logged_by_category_with_class_filter(self, error_handler, captured_logs, exc, category):
        error_handler.log_uncaught(category)
        error_handler.log_uncaught(ValueError)

        with pytest.raises(type(exc)):
            error_handler.handle_exception(exc)

        assert len(captured_logs.records) == 1
        assert captured_logs.contexts == [{"exception": exc}]

    def test_category_outside_mask(self, error_handler, captured_logs):
        error_handler.log_uncaught(ErrorCategory.PARSE)
        error_handler.log_uncaught(ValueError)

        with pytest.raises(MemoryError):
            error_handler.handle_exception(MemoryError("oom"))

        assert captured_logs.records == []

    def test_class_filter_without_category(self, error_handler, captured_logs):
        error_handler.log_uncaught(ImportError)

        with pytest.raises(ModuleNotFoundError):
            error_handler.handle_exception(ModuleNotFoundError("no module named 'x'"))

        assert len(captured_logs.records) == 1


class TestUnprintableException:

    def test_callback_and_chain_still_run(self, captured_logs):
        seen = []
        host = RecordingHost(previous_exception_hook=lambda exc: seen.append("chained"))
        handler = ErrorHandler(captured_logs.logger, host=host)
        handler.log_uncaught(UnprintableError)
        handler.on_fatal_error(lambda exc: seen.append("callback"))
        exc = UnprintableError()

        with pytest.raises(UnprintableError) as exc_info:
            handler.handle_exception(exc)

        assert exc_info.value is exc
        assert seen == ["callback", "chained"]
        assert "<unprintable " in captured_logs.messages[0]
