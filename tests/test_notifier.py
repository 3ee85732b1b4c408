"""Tests for email rendering and the SMTP transport."""

import smtplib
from unittest.mock import patch

import pytest

from alerts import Alert, AlertCondition
from conftest import make_quote
from core.config import Settings
from services.notifier import EmailNotifier, format_change, format_usd


def make_settings(**overrides):
    values = dict(
        email_host="smtp.test",
        email_port=587,
        email_user="bot@test.io",
        email_pass="secret",
        email_use_tls=True,
        email_timeout=5,
        notification_email="",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def email_notifier():
    return EmailNotifier(make_settings())


@pytest.fixture
def above_alert():
    return Alert(id=1, coin="bitcoin", condition=AlertCondition.ABOVE, threshold=50000)


class TestFormatting:
    def test_usd(self):
        assert format_usd(51000) == "$51,000.00"
        assert format_usd(0.1234) == "$0.1234"

    def test_change_sign(self):
        assert format_change(2.456) == "+2.46%"
        assert format_change(-1.2) == "-1.20%"
        assert format_change(0) == "0.00%"


class TestRender:
    def test_above_message(self, email_notifier, above_alert):
        subject, text, body = email_notifier.render(above_alert, 51000, make_quote("bitcoin", 51000, 2.5))

        assert "Bitcoin has risen above $50,000.00" in subject
        assert "Bitcoin (BTC)" in text
        assert "Current price: $51,000.00" in text
        assert "24h change: +2.50%" in text
        assert "Price risen above $50,000.00" in body

    def test_below_message(self, email_notifier):
        alert = Alert(id=2, coin="litecoin", condition=AlertCondition.BELOW, threshold=70)
        subject, text, _ = email_notifier.render(alert, 65.5, make_quote("litecoin", 65.5, -3.1))

        assert "Litecoin has dropped below $70.00" in subject
        assert "24h change: -3.10%" in text

    def test_message_headers(self, email_notifier, above_alert):
        msg = email_notifier.build_message(above_alert, 51000, make_quote("bitcoin", 51000))

        assert msg["To"] == "bot@test.io"
        assert msg["From"] == "bot@test.io"
        assert msg.get_body(("html",)) is not None
        assert msg.get_body(("plain",)) is not None


class TestSend:
    def test_notify_sends_over_starttls(self, email_notifier, above_alert):
        with patch("services.notifier.smtplib.SMTP") as smtp:
            assert email_notifier.notify(above_alert, 51000, make_quote("bitcoin", 51000)) is True

        smtp.assert_called_once_with("smtp.test", 587, timeout=5)
        server = smtp.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bot@test.io", "secret")
        server.send_message.assert_called_once()

    def test_recipient_override(self, above_alert):
        notifier = EmailNotifier(make_settings(notification_email="me@home.io"))
        with patch("services.notifier.smtplib.SMTP") as smtp:
            notifier.notify(above_alert, 51000, make_quote("bitcoin", 51000))

        sent = smtp.return_value.__enter__.return_value.send_message.call_args[0][0]
        assert sent["To"] == "me@home.io"

    def test_smtp_failure_returns_false(self, email_notifier, above_alert):
        with patch("services.notifier.smtplib.SMTP") as smtp:
            server = smtp.return_value.__enter__.return_value
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
            assert email_notifier.notify(above_alert, 51000, make_quote("bitcoin", 51000)) is False

    def test_connection_failure_returns_false(self, email_notifier, above_alert):
        with patch("services.notifier.smtplib.SMTP", side_effect=OSError("unreachable")):
            assert email_notifier.notify(above_alert, 51000, make_quote("bitcoin", 51000)) is False

    def test_unconfigured_does_not_connect(self, above_alert):
        notifier = EmailNotifier(make_settings(email_user="", notification_email=""))
        with patch("services.notifier.smtplib.SMTP") as smtp:
            assert notifier.notify(above_alert, 51000, make_quote("bitcoin", 51000)) is False
        smtp.assert_not_called()

    def test_smtps_port(self, above_alert):
        notifier = EmailNotifier(make_settings(email_port=465))
        with patch("services.notifier.smtplib.SMTP_SSL") as smtp_ssl:
            assert notifier.notify(above_alert, 51000, make_quote("bitcoin", 51000)) is True
        smtp_ssl.return_value.__enter__.return_value.send_message.assert_called_once()

    def test_send_test_uses_synthetic_bitcoin_alert(self, email_notifier):
        with patch.object(EmailNotifier, "notify", return_value=True) as notify:
            assert email_notifier.send_test() is True

        alert, price, quote = notify.call_args[0]
        assert alert.coin == "bitcoin"
        assert alert.condition is AlertCondition.ABOVE
        assert alert.threshold == 50000
        assert price == 95000
        assert quote.change_24h == 2.45
