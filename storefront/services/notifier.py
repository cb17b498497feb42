# storefront/services/notifier.py
"""
Order confirmation email.

Responsibilities:
  - Build the confirmation email (plain text + HTML) for a placed order.
  - Send it to the purchaser and, if ADMIN_EMAIL is set, to the store operator.
  - Never let a delivery problem escape: Notifier.dispatch is the single place
    where email failures are caught and logged.

Typical .env configuration (Gmail example with App Password):

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=shop@example.com
    SMTP_PASSWORD=app-password
    SMTP_FROM_EMAIL=shop@example.com
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true
    ADMIN_EMAIL=owner@example.com
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from html import escape
from typing import Any, Dict, List, Optional, Protocol
import logging
import smtplib

from storefront.config import Settings
from storefront.models.order import Order

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    text_body: str
    html_body: Optional[str] = None


class EmailTransport(Protocol):
    def send(self, email: OutgoingEmail) -> None:
        ...


class SmtpTransport:
    """
    Sends through an SMTP server, SSL (commonly port 465) or plain + optional
    STARTTLS (commonly port 587). Every connection is bounded by `timeout`.
    """

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "Shoppy Store",
        use_tls: bool = True,
        use_ssl: bool = False,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username or ""
        self.from_name = from_name
        self.use_tls = use_tls
        self.use_ssl = use_ssl
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpTransport":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            from_email=settings.SMTP_FROM_EMAIL,
            from_name=settings.SMTP_FROM_NAME,
            use_tls=settings.SMTP_USE_TLS,
            use_ssl=settings.SMTP_USE_SSL,
            timeout=settings.SMTP_TIMEOUT,
        )

    @property
    def configured(self) -> bool:
        return bool(self.host and self.from_email)

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.use_tls:
            server.starttls()
        return server

    def build_message(self, email: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = email.to
        msg["Subject"] = email.subject
        msg.set_content(email.text_body)
        if email.html_body:
            msg.add_alternative(email.html_body, subtype="html")
        return msg

    def send(self, email: OutgoingEmail) -> None:
        """
        Raises RuntimeError when SMTP is not configured and smtplib / OSError
        exceptions when the server cannot be reached or refuses the message.
        """
        if not self.configured:
            raise RuntimeError("SMTP is not configured. Set SMTP_HOST and SMTP_FROM_EMAIL.")
        msg = self.build_message(email)
        server = self._connect()
        try:
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)
        finally:
            try:
                server.quit()
            except (smtplib.SMTPException, OSError):
                # connection is being torn down anyway
                pass


class Notifier:
    def __init__(
        self,
        transport: EmailTransport,
        admin_email: Optional[str] = None,
        store_name: str = "Shoppy Store",
        currency: str = "₹",
    ):
        self.transport = transport
        self.admin_email = admin_email
        self.store_name = store_name
        self.currency = currency

    @classmethod
    def from_settings(cls, settings: Settings) -> "Notifier":
        return cls(
            transport=SmtpTransport.from_settings(settings),
            admin_email=settings.ADMIN_EMAIL,
            store_name=settings.STORE_NAME,
            currency=settings.CURRENCY_SYMBOL,
        )

    def _money(self, amount: float) -> str:
        return f"{self.currency}{amount:,.2f}"

    def _text_body(self, name: str, order: Order) -> str:
        lines = [f"Hi {name},", "", "Thank you for shopping with us! Your order has been confirmed.", ""]
        for it in order.items:
            if not it.resolved:
                continue
            lines.append(
                f"- {it.title or it.product_id} x {it.quantity} @ {self._money(it.unit_price)}"
                f" = {self._money(it.line_total())}"
            )
        lines += ["", f"Total amount: {self._money(order.total_amount)}", f"Order id: {order.id}", "",
                  "We will notify you once your order is shipped.", f"Thanks for choosing {self.store_name}!"]
        return "\n".join(lines)

    def _html_body(self, name: str, order: Order) -> str:
        rows = "".join(
            "<tr>"
            f"<td style=\"padding: 8px; border: 1px solid #ddd;\">{escape(it.title or it.product_id)}</td>"
            f"<td style=\"padding: 8px; text-align: center; border: 1px solid #ddd;\">{it.quantity}</td>"
            f"<td style=\"padding: 8px; text-align: right; border: 1px solid #ddd;\">{escape(self._money(it.unit_price))}</td>"
            f"<td style=\"padding: 8px; text-align: right; border: 1px solid #ddd;\"><strong>{escape(self._money(it.line_total()))}</strong></td>"
            "</tr>"
            for it in order.items
            if it.resolved
        )
        year = (order.created_at or datetime.utcnow()).year
        return (
            "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: auto;\">"
            f"<h2>{escape(self.store_name)}</h2><p>Order Confirmation</p>"
            f"<p>Hi <strong>{escape(name)}</strong>,</p>"
            "<p>Thank you for shopping with us! Your order has been confirmed.</p>"
            "<table style=\"width: 100%; border-collapse: collapse;\">"
            "<thead><tr><th style=\"text-align: left;\">Product</th><th>Qty</th>"
            "<th style=\"text-align: right;\">Price</th><th style=\"text-align: right;\">Subtotal</th></tr></thead>"
            f"<tbody>{rows}</tbody>"
            "<tfoot><tr><td colspan=\"3\" style=\"text-align: right;\"><strong>Total Amount:</strong></td>"
            f"<td style=\"text-align: right;\"><strong>{escape(self._money(order.total_amount))}</strong></td></tr></tfoot>"
            "</table>"
            "<p>We will notify you once your order is shipped.</p>"
            f"<small>This is an automated email. Please do not reply. &copy; {year} {escape(self.store_name)}</small>"
            "</div>"
        )

    def order_placed_emails(self, user: Dict[str, Any], order: Order) -> List[OutgoingEmail]:
        """Confirmation for the purchaser plus an operator copy when admin_email is set."""
        name = str(user.get("name") or user.get("email") or "there")
        text_body = self._text_body(name, order)
        html_body = self._html_body(name, order)
        emails = []
        if user.get("email"):
            emails.append(OutgoingEmail(
                to=str(user["email"]),
                subject=f"Your {self.store_name} Order Confirmation",
                text_body=text_body,
                html_body=html_body,
            ))
        if self.admin_email:
            emails.append(OutgoingEmail(
                to=self.admin_email,
                subject=f"New Order from {name}",
                text_body=text_body,
                html_body=html_body,
            ))
        return emails

    def dispatch(self, emails: List[OutgoingEmail]) -> int:
        """Send every email, best effort. Returns how many were delivered; never raises."""
        sent = 0
        for email in emails:
            try:
                self.transport.send(email)
            except Exception:
                logger.exception("Email to %s failed: %s", email.to, email.subject)
                continue
            sent += 1
            logger.info("Email sent to %s: %s", email.to, email.subject)
        return sent
