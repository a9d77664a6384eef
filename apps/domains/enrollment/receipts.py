# PATH: apps/domains/enrollment/receipts.py
from __future__ import annotations

import io

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from .models import Payment


def receipt_filename(payment: Payment) -> str:
    return f"{payment.receipt_number or f'payment-{payment.id}'}.pdf"


def build_receipt_pdf(payment: Payment) -> bytes:
    """
    One-page A4 receipt for a completed payment.
    """
    if payment.status != Payment.Status.COMPLETED:
        raise ValueError("Receipts exist only for completed payments")

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    width, height = A4

    y = height - 30 * mm
    c.setFont("Helvetica-Bold", 18)
    c.drawString(25 * mm, y, "Payment Receipt")

    c.setFont("Helvetica", 11)
    y -= 12 * mm
    enrollment = payment.enrollment
    rows = [
        ("Receipt No.", payment.receipt_number or "-"),
        ("Date", payment.paid_at.strftime("%Y-%m-%d %H:%M") if payment.paid_at else "-"),
        ("Student", payment.student.display_name),
        ("Course", payment.course.title),
        ("Method", payment.get_method_display()),
        ("Reference", payment.transaction_id or "-"),
        ("Amount", f"{payment.amount:,.2f}"),
        ("Total fee", f"{enrollment.total_amount:,.2f}"),
        ("Paid to date", f"{enrollment.paid_amount:,.2f}"),
        ("Remaining", f"{enrollment.remaining_amount:,.2f}"),
    ]
    for label, value in rows:
        c.drawString(25 * mm, y, f"{label}:")
        c.drawString(70 * mm, y, str(value))
        y -= 8 * mm

    if payment.processed_by_id:
        y -= 4 * mm
        c.setFont("Helvetica-Oblique", 9)
        c.drawString(25 * mm, y, f"Processed by {payment.processed_by.display_name}")

    c.showPage()
    c.save()
    return buf.getvalue()
