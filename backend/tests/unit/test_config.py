"""Tests for config._read_secret() and Settings address precedence."""

import os
from unittest.mock import patch

import pytest

from config import _read_secret


class TestReadSecret:
    """_read_secret() reads from env var or file, in priority order."""

    def test_direct_env_var(self):
        with patch.dict(os.environ, {"MY_SECRET": "direct-value"}, clear=False):
            assert _read_secret("MY_SECRET") == "direct-value"

    def test_file_env_var(self, tmp_path):
        secret_file = tmp_path / "secret.txt"
        secret_file.write_text("file-value\n")
        env = {"MY_SECRET_FILE": str(secret_file)}
        with patch.dict(os.environ, env, clear=False):
            # Remove direct var if present
            os.environ.pop("MY_SECRET", None)
            assert _read_secret("MY_SECRET") == "file-value"

    def test_direct_takes_priority_over_file(self, tmp_path):
        secret_file = tmp_path / "secret.txt"
        secret_file.write_text("file-value")
        env = {"PRIO_SECRET": "direct-value", "PRIO_SECRET_FILE": str(secret_file)}
        with patch.dict(os.environ, env, clear=False):
            assert _read_secret("PRIO_SECRET") == "direct-value"

    def test_raises_when_neither_set(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("MISSING_SECRET", None)
            os.environ.pop("MISSING_SECRET_FILE", None)
            with pytest.raises(ValueError, match="Secret not configured"):
                _read_secret("MISSING_SECRET")

    def test_default_when_neither_set(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("MISSING_SECRET", None)
            os.environ.pop("MISSING_SECRET_FILE", None)
            assert _read_secret("MISSING_SECRET", default="") == ""

    def test_file_not_found(self, tmp_path):
        env = {"GONE_SECRET_FILE": str(tmp_path / "nonexistent.txt")}
        with patch.dict(os.environ, env, clear=False):
            os.environ.pop("GONE_SECRET", None)
            with pytest.raises(ValueError, match="Secret not configured"):
                _read_secret("GONE_SECRET")


class TestSettings:
    def test_defaults_without_mail_env(self, make_settings):
        s = make_settings()
        assert s.smtp_host == "smtp.office365.com"
        assert s.smtp_port == "587"
        assert s.smtp_secure is False
        assert s.mail_from == ""
        assert s.mail_recipient == ""
        assert s.mail_timeout == 30.0

    def test_smtp_pass_from_secret_file(self, make_settings, tmp_path):
        secret_file = tmp_path / "smtp_pass"
        secret_file.write_text("from-file\n")
        s = make_settings(SMTP_PASS_FILE=str(secret_file))
        assert s.smtp_pass == "from-file"

    def test_smtp_secure_flag(self, make_settings):
        assert make_settings(SMTP_SECURE="true").smtp_secure is True
        assert make_settings(SMTP_SECURE="TRUE").smtp_secure is True
        assert make_settings(SMTP_SECURE="yes").smtp_secure is False


class TestAddressPrecedence:
    def test_sender_prefers_app_mailbox(self, make_settings):
        s = make_settings(APP_MAILBOX="box@x.com", SMTP_FROM="from@x.com", SMTP_USER="user@x.com")
        assert s.mail_from == "box@x.com"

    def test_sender_falls_back_to_smtp_from(self, make_settings):
        s = make_settings(SMTP_FROM="from@x.com", SMTP_USER="user@x.com")
        assert s.mail_from == "from@x.com"

    def test_sender_falls_back_to_smtp_user(self, make_settings):
        assert make_settings(SMTP_USER="user@x.com").mail_from == "user@x.com"

    def test_blank_values_are_skipped(self, make_settings):
        s = make_settings(APP_MAILBOX="   ", SMTP_USER="user@x.com")
        assert s.mail_from == "user@x.com"

    def test_recipient_prefers_forward_to(self, make_settings):
        s = make_settings(FORWARD_TO="fwd@x.com", MAIL_TO="to@x.com")
        assert s.mail_recipient == "fwd@x.com"

    def test_recipient_falls_back_to_mail_to(self, make_settings):
        assert make_settings(MAIL_TO="to@x.com").mail_recipient == "to@x.com"
