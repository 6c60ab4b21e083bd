# app/services/receipt_service.py
import logging
from decimal import Decimal

from jinja2 import Environment, PackageLoader, select_autoescape

from app.models import FeePayment, InstituteSetting

logger = logging.getLogger(__name__)

_env = Environment(
    loader=PackageLoader("app", "templates"),
    autoescape=select_autoescape(["html"]),
)


def receipt_number(payment: FeePayment, prefix: str) -> str:
    """Stable receipt number: <prefix>-<yyyymm of payment>-<first 8 hex of payment id>"""
    return f"{prefix}-{payment.payment_date:%Y%m}-{payment.id.hex[:8].upper()}"


def render_receipt(payment: FeePayment, settings: InstituteSetting, auto_print: bool = False) -> str:
    """Printable A5 receipt for one payment"""
    number = receipt_number(payment, settings.receipt_prefix)
    template = _env.get_template("receipt.html")
    html = template.render(
        payment=payment,
        student=payment.student,
        settings=settings,
        receipt_number=number,
        amount=f"{Decimal(payment.amount):,.2f}",
        auto_print=auto_print,
    )
    logger.debug(f"Rendered receipt {number}")
    return html
