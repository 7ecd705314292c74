from unittest import mock

import pytest
from google.api_core import exceptions as google_exceptions

from wedly.errors import AppError, ErrorCategory
from wedly.retry import with_database_retry, with_retry


def test_returns_first_success():
    func = mock.Mock(return_value="ok")

    assert with_retry(func) == "ok"
    assert func.call_count == 1


def test_retries_retryable_errors_with_backoff(no_sleep):
    func = mock.Mock(side_effect=[TimeoutError("timeout"), ConnectionError("reset"), "ok"])

    assert with_retry(func, max_attempts=3, base_delay=1.0) == "ok"
    assert [c.args[0] for c in no_sleep.call_args_list] == [1.0, 2.0]


def test_delay_is_capped(no_sleep):
    func = mock.Mock(side_effect=TimeoutError("timeout"))

    with pytest.raises(TimeoutError):
        with_retry(func, max_attempts=4, base_delay=4.0, max_delay=10.0)

    assert [c.args[0] for c in no_sleep.call_args_list] == [4.0, 8.0, 10.0]


def test_non_retryable_error_raises_immediately(no_sleep):
    func = mock.Mock(side_effect=AppError("bad input", ErrorCategory.VALIDATION, 400))

    with pytest.raises(AppError):
        with_retry(func, max_attempts=3)

    assert func.call_count == 1
    no_sleep.assert_not_called()


def test_keyword_match_makes_error_retryable():
    func = mock.Mock(side_effect=[RuntimeError("Service temporarily unavailable"), "ok"])

    assert with_retry(func, max_attempts=2) == "ok"


def test_custom_keywords_replace_defaults():
    func = mock.Mock(side_effect=RuntimeError("rate limit hit"))

    with pytest.raises(RuntimeError):
        with_retry(func, max_attempts=3, retryable_keywords=("network",))

    assert func.call_count == 1


def test_database_retry_retries_any_error_once(no_sleep):
    func = mock.Mock(side_effect=google_exceptions.PermissionDenied("denied"))

    with pytest.raises(google_exceptions.PermissionDenied):
        with_database_retry(func, label="write purchase")

    assert func.call_count == 2
    assert no_sleep.call_count == 1
