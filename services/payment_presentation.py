"""UPI payment collection instructions (URI plus scannable QR code)."""

import base64
import io
from urllib.parse import quote

import qrcode

import config


def payment_note(project_id: int, payment_id: int) -> str:
    """Reference note the payer puts on the UPI transfer."""
    return f"ProjId_{project_id}_PayId_{payment_id}"


def build_upi_uri(amount: float, note: str) -> str:
    """
    Build a UPI deep link for the configured payee.

    Args:
        amount: Amount to collect
        note: Transaction note

    Returns:
        upi://pay URI
    """
    upi_id = config.settings.UPI_ID
    payee = config.settings.UPI_PAYEE_NAME
    amount_text = f"{amount:g}"
    return (
        f"upi://pay?pa={quote(upi_id, safe='')}&pn={quote(payee, safe='')}"
        f"&am={amount_text}&tn={quote(note, safe='')}"
    )


def render_qr_data_url(data: str) -> str:
    """Render data as a PNG QR code and return it as a data URL."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return f"data:image/png;base64,{base64.b64encode(buffer.getvalue()).decode()}"


def build_payment_artifact(amount: float, note: str) -> dict:
    """
    Payment collection instruction for an amount and reference note.

    Returns:
        dict with upi_uri, qr_code and note
    """
    upi_uri = build_upi_uri(amount, note)
    return {
        "upi_uri": upi_uri,
        "qr_code": render_qr_data_url(upi_uri),
        "note": note,
    }
