"""Tests for exception hierarchy and classification."""

import pytest

from core.errors import (
    ConfigurationError,
    DeviceAuthError,
    ErrorCategory,
    MissingConnectionParameterError,
    PermanentError,
    ProviderDisposedError,
    SigningError,
    ValidationError,
    classify_exception,
)


class TestExceptionHierarchy:
    """Test category assignment and message formatting."""

    @pytest.mark.parametrize(
        "exc_type,category",
        [
            (SigningError, ErrorCategory.AUTH),
            (ConfigurationError, ErrorCategory.PERMANENT),
            (ValidationError, ErrorCategory.PERMANENT),
            (ProviderDisposedError, ErrorCategory.PERMANENT),
            (DeviceAuthError, ErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, exc_type, category):
        assert exc_type("boom").category == category

    def test_missing_parameter_is_configuration_error(self):
        exc = MissingConnectionParameterError("DeviceId")

        assert isinstance(exc, ConfigurationError)
        assert isinstance(exc, PermanentError)
        assert exc.parameter == "DeviceId"
        assert exc.message == "The connection string is missing the property: DeviceId"
        assert exc.context == {"parameter": "DeviceId"}

    def test_str_includes_cause(self):
        cause = ValueError("Incorrect padding")
        exc = SigningError("Shared access key is not valid base64", cause=cause)

        assert str(exc) == "Shared access key is not valid base64 | Caused by: Incorrect padding"
        assert exc.cause is cause


class TestClassifyException:
    """Test classify_exception for foreign exceptions."""

    def test_device_auth_errors_keep_category(self):
        assert classify_exception(SigningError("x")) == ErrorCategory.AUTH

    @pytest.mark.parametrize(
        "exc,category",
        [
            (TimeoutError("timed out"), ErrorCategory.TRANSIENT),
            (ConnectionResetError("reset"), ErrorCategory.TRANSIENT),
            (RuntimeError("Unauthorized"), ErrorCategory.AUTH),
            (ValueError("bad value"), ErrorCategory.PERMANENT),
            (RuntimeError("???"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_foreign_exceptions(self, exc, category):
        assert classify_exception(exc) == category
