"""
Email Notifier
Renders and sends a one-shot email for a triggered alert.

Delivery is best effort: a failed send is logged and reported as False,
never retried.
"""

import html
import logging
import smtplib
import ssl
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Optional, Tuple

from alerts.models import Alert, AlertCondition, Quote
from core.config import Settings, get_settings

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


def format_usd(value: float) -> str:
    if abs(value) >= 1:
        return f"${value:,.2f}"
    return f"${value:.6g}"


def format_change(change: float) -> str:
    return f"+{change:.2f}%" if change > 0 else f"{change:.2f}%"


class EmailNotifier:
    def __init__(self, settings: Settings):
        self.host = settings.email_host
        self.port = settings.email_port
        self.user = settings.email_user
        self.password = settings.email_pass
        self.use_tls = settings.email_use_tls
        self.timeout = settings.email_timeout
        self.sender = settings.email_user
        self.recipient = settings.recipient

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.recipient)

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, alert: Alert, current_price: float, quote: Quote) -> Tuple[str, str, str]:
        """Build (subject, plain text, html) for a triggered alert"""
        name = quote.display_name or alert.coin.capitalize()
        symbol = quote.symbol or alert.coin.upper()
        verb = alert.condition.verb
        threshold = format_usd(alert.threshold)
        price = format_usd(current_price)
        change = format_change(quote.change_24h)
        arrow = "📈" if quote.change_24h > 0 else "📉"
        change_color = "#28a745" if quote.change_24h > 0 else "#dc3545"
        created = alert.created_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

        subject = f"🚨 Crypto Alert: {name} has {verb} {threshold}!"

        text = (
            f"{name} ({symbol}) alert triggered!\n\n"
            f"Current price: {price}\n"
            f"24h change: {change}\n"
            f"Alert condition: Price {verb} {threshold}\n"
            f"Alert created: {created}\n"
        )

        body = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333; border-bottom: 2px solid #667eea; padding-bottom: 10px;">
    🚨 Crypto Price Alert
  </h2>
  <div style="background: #f8f9fa; padding: 20px; border-radius: 10px; margin: 20px 0;">
    <h3 style="color: #667eea; margin-top: 0;">
      {html.escape(name)} ({html.escape(symbol)}) Alert Triggered!
    </h3>
    <div style="font-size: 18px; margin: 15px 0;">
      <strong>Current Price:</strong>
      <span style="color: #28a745; font-size: 24px;">{price}</span>
    </div>
    <div style="font-size: 16px; margin: 10px 0;">
      <strong>24h Change:</strong>
      <span style="color: {change_color};">{arrow} {change}</span>
    </div>
    <div style="font-size: 16px; margin: 10px 0;">
      <strong>Alert Condition:</strong> Price {verb} {threshold}
    </div>
    <div style="font-size: 14px; color: #666; margin-top: 20px;">
      Alert created: {created}
    </div>
  </div>
  <div style="text-align: center; margin-top: 30px; padding-top: 20px; border-top: 1px solid #ddd;">
    <p style="color: #666; font-size: 14px;">This alert was sent by your Crypto Alert System</p>
  </div>
</div>
"""
        return subject, text, body

    def build_message(self, alert: Alert, current_price: float, quote: Quote) -> EmailMessage:
        subject, text, body = self.render(alert, current_price, quote)
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender or self.recipient
        msg["To"] = self.recipient
        msg.set_content(text)
        msg.add_alternative(body, subtype="html")
        return msg

    # =========================================================================
    # Sending
    # =========================================================================

    def notify(self, alert: Alert, current_price: float, quote: Quote) -> bool:
        """Send the alert email. Returns False on any failure."""
        if not self.is_configured:
            logger.warning(
                f"Email not configured; alert {alert.id} for {alert.coin} at {current_price} not sent"
            )
            return False

        try:
            msg = self.build_message(alert, current_price, quote)
            self._send(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email notification for alert {alert.id}: {e}")
            return False

        logger.info(f"Alert email sent for {quote.display_name} at {current_price}")
        return True

    def send_test(self) -> bool:
        """Send a fixed synthetic alert to verify the transport"""
        alert = Alert(
            id=0,
            coin="bitcoin",
            condition=AlertCondition.ABOVE,
            threshold=50000,
            created_at=datetime.now(timezone.utc),
        )
        quote = Quote(
            coin="bitcoin",
            display_name="Bitcoin",
            symbol="BTC",
            price=95000,
            change_24h=2.45,
        )
        return self.notify(alert, quote.price, quote)

    def _send(self, msg: EmailMessage) -> None:
        if self.port == SMTPS_PORT:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                self._login(server)
                server.send_message(msg)
            return

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls(context=ssl.create_default_context())
            self._login(server)
            server.send_message(msg)

    def _login(self, server: smtplib.SMTP) -> None:
        if self.user:
            server.login(self.user, self.password)


_notifier: Optional[EmailNotifier] = None


def get_notifier() -> EmailNotifier:
    global _notifier
    if _notifier is None:
        _notifier = EmailNotifier(get_settings())
    return _notifier
