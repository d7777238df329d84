# app/utils/pdf_generators/invoice_pdf.py
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle


def _money(amount, currency: str) -> str:
    return f"{currency} {float(amount or 0):,.2f}"


def render_invoice_pdf(invoice, customer, vehicle=None) -> bytes:
    """
    Render an invoice with customer, line items and payment summary.

    ``invoice`` is an InvoiceOut; ``customer`` and ``vehicle`` are ORM rows.
    """
    currency = invoice.currency.value
    styles = getSampleStyleSheet()
    story = []

    # -----------------------------
    # HEADER
    # -----------------------------
    story.append(Paragraph(f"<b>TAX INVOICE #{invoice.invoice_number}</b>", styles["Title"]))
    story.append(Spacer(1, 8))
    story.append(Paragraph(f"Status: {invoice.status.value.replace('_', ' ').upper()}", styles["Normal"]))
    story.append(Paragraph(f"Date: {invoice.created_at.strftime('%d-%m-%Y')}", styles["Normal"]))
    if invoice.due_date:
        story.append(Paragraph(f"Due: {invoice.due_date.strftime('%d-%m-%Y')}", styles["Normal"]))
    if invoice.terms:
        story.append(Paragraph(f"Terms: {invoice.terms}", styles["Normal"]))
    story.append(Spacer(1, 15))

    # -----------------------------
    # CUSTOMER INFO
    # -----------------------------
    story.append(Paragraph("<b>Bill To:</b>", styles["Heading3"]))
    story.append(Paragraph(f"Name: {customer.full_name}", styles["Normal"]))
    story.append(Paragraph(f"Email: {customer.email or 'N/A'}", styles["Normal"]))
    story.append(Paragraph(f"Phone: {customer.phone or 'N/A'}", styles["Normal"]))
    address = ", ".join(p for p in (customer.address, customer.city, customer.country) if p)
    story.append(Paragraph(f"Address: {address or 'N/A'}", styles["Normal"]))
    story.append(Spacer(1, 15))

    if vehicle is not None:
        story.append(Paragraph("<b>Vehicle:</b>", styles["Heading3"]))
        story.append(Paragraph(f"{vehicle.year} {vehicle.make} {vehicle.model}", styles["Normal"]))
        story.append(Paragraph(f"VIN: {vehicle.vin}", styles["Normal"]))
        story.append(Spacer(1, 15))

    # -----------------------------
    # LINE ITEMS
    # -----------------------------
    data = [["Description", "Qty", "Unit Price", "Total"]]
    for item in invoice.items:
        data.append([
            Paragraph(item.description, styles["Normal"]),
            f"{item.quantity.normalize():f}",
            _money(item.unit_price, currency),
            _money(item.line_total, currency),
        ])

    table = Table(data, colWidths=[220, 40, 100, 100])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
    ]))
    story.append(table)
    story.append(Spacer(1, 20))

    # -----------------------------
    # TOTALS
    # -----------------------------
    story.append(Paragraph(f"Subtotal: {_money(invoice.subtotal, currency)}", styles["Normal"]))
    story.append(Paragraph(
        f"VAT ({invoice.vat_rate.normalize():f}%): {_money(invoice.vat_amount, currency)}",
        styles["Normal"],
    ))
    story.append(Paragraph(f"<b>Total: {_money(invoice.total_amount, currency)}</b>", styles["Normal"]))
    story.append(Paragraph(f"Paid: {_money(invoice.total_paid, currency)}", styles["Normal"]))
    story.append(Paragraph(f"<b>Balance Due: {_money(invoice.balance_due, currency)}</b>", styles["Heading2"]))
    story.append(Spacer(1, 20))

    if invoice.notes:
        story.append(Paragraph(invoice.notes, styles["Normal"]))
        story.append(Spacer(1, 10))

    story.append(Paragraph("Thank you for your business!", styles["Italic"]))

    buffer = BytesIO()
    SimpleDocTemplate(buffer, pagesize=A4, title=f"Invoice {invoice.invoice_number}").build(story)
    return buffer.getvalue()
