# services/invoice_pdf.py

from io import BytesIO
from typing import Any, Dict
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.config import settings


CURRENCY = "INR "


def _money(value: float) -> str:
    return f"{CURRENCY}{value:,.2f}"


def _address_lines(address: Dict[str, Any]) -> list:
    lines = [address.get("address_line1"), address.get("address_line2")]
    locality = ", ".join(p for p in (address.get("city"), address.get("state"), address.get("postal_code")) if p)
    lines.extend([locality, address.get("country")])
    return [line for line in lines if line]


# ============================================================
# Customer bill (A4)
# ============================================================
def render_bill_pdf(bill: Dict[str, Any], company_name: str = None) -> bytes:
    """
    Render the dict from ``routers.invoices.build_bill`` as a one-document PDF.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=50, rightMargin=50, topMargin=50, bottomMargin=50)
    styles = getSampleStyleSheet()
    centered = ParagraphStyle("Centered", parent=styles["Normal"], alignment=TA_CENTER)
    title = ParagraphStyle("BillTitle", parent=styles["Heading1"], fontSize=22, alignment=TA_CENTER, spaceAfter=6)

    story = [
        Paragraph((company_name or settings.PROJECT_NAME).upper(), title),
        Paragraph("Invoice", centered),
        Spacer(1, 0.25 * inch),
        Paragraph(f"Invoice Number: {bill['invoice_number']}", styles["Normal"]),
    ]
    if bill.get("date"):
        story.append(Paragraph(f"Date: {str(bill['date'])[:10]}", styles["Normal"]))
    story.append(Spacer(1, 0.2 * inch))

    customer = bill.get("bill_to") or {}
    if customer.get("name"):
        story.append(Paragraph("<b>Bill To:</b>", styles["Normal"]))
        story.append(Paragraph(escape(customer["name"]), styles["Normal"]))
        if customer.get("phone"):
            story.append(Paragraph(f"Phone: {customer['phone']}", styles["Normal"]))
        if customer.get("email"):
            story.append(Paragraph(f"Email: {escape(customer['email'])}", styles["Normal"]))
        for line in _address_lines(bill.get("shipping_address") or {}):
            story.append(Paragraph(escape(line), styles["Normal"]))
        story.append(Spacer(1, 0.2 * inch))

    rows = [["Item", "Quantity", "Unit Price", "Total"]]
    for item in bill["items"]:
        rows.append([item["name"], str(item["quantity"]), _money(item["unit_price"]), _money(item["total"])])
    rows.append(["", "", "Subtotal:", _money(bill["subtotal"])])
    rows.append(["", "", "Tax (5%):", _money(bill["tax"])])
    rows.append(["", "", "Total:", _money(bill["total"])])

    table = Table(rows, colWidths=[3 * inch, 0.9 * inch, 1.2 * inch, 1.2 * inch], repeatRows=1)
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("LINEBELOW", (0, 0), (-1, 0), 1, colors.black),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("LINEABOVE", (2, -3), (-1, -3), 0.5, colors.grey),
        ("FONTNAME", (2, -1), (-1, -1), "Helvetica-Bold"),
        ("LINEABOVE", (2, -1), (-1, -1), 1, colors.black),
    ]))
    story.append(table)
    story.append(Spacer(1, 0.3 * inch))

    story.append(Paragraph(f"Payment Method: {(bill.get('payment_method') or 'cash').upper()}", styles["Normal"]))
    story.append(Paragraph(f"Payment Status: {(bill.get('payment_status') or 'pending').upper()}", styles["Normal"]))
    story.append(Spacer(1, 0.4 * inch))
    story.append(Paragraph("Thank you for your business!", centered))

    doc.build(story)
    return buffer.getvalue()
