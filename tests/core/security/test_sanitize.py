"""Tests for secret redaction."""

from core.security.sanitize import (
    REDACTED,
    sanitize_connection_string,
    sanitize_error_message,
    sanitize_token,
)


class TestSanitizeToken:
    def test_redacts_signature_only(self):
        token = "SharedAccessSignature sr=hub%2Fdevices%2Fd&sig=abc%2B%3D&se=1700003600&skn=owner"

        result = sanitize_token(token)

        assert result == (
            f"SharedAccessSignature sr=hub%2Fdevices%2Fd&sig={REDACTED}&se=1700003600&skn=owner"
        )

    def test_empty_passthrough(self):
        assert sanitize_token("") == ""


class TestSanitizeConnectionString:
    def test_redacts_key(self):
        cs = "HostName=h;DeviceId=d;SharedAccessKey=c2VjcmV0;SharedAccessKeyName=owner"

        assert sanitize_connection_string(cs) == (
            f"HostName=h;DeviceId=d;SharedAccessKey={REDACTED};SharedAccessKeyName=owner"
        )


class TestSanitizeErrorMessage:
    """Test pattern-based redaction of free-form messages."""

    def test_connection_string_key_keeps_field_name(self):
        msg = sanitize_error_message("bad cs HostName=h;SharedAccessKey=c2VjcmV0")

        assert msg == f"bad cs HostName=h;SharedAccessKey={REDACTED}"

    def test_generic_secrets(self):
        msg = sanitize_error_message("url?token=abc&password=hunter2 secret=s3")

        assert "abc" not in msg
        assert "hunter2" not in msg
        assert "s3" not in msg

    def test_bearer_token(self):
        assert sanitize_error_message("Authorization: Bearer eyJhbGci.x.y") == (
            f"Authorization: bearer {REDACTED}"
        )

    def test_truncates(self):
        msg = sanitize_error_message("x" * 600)

        assert len(msg) == 500
        assert msg.endswith("...")

    def test_plain_message_unchanged(self):
        assert sanitize_error_message("Token renewed") == "Token renewed"
