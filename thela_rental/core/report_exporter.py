import csv
import logging
from datetime import datetime
from typing import Iterable
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from thela_rental.core.models import STORAGE_KEYS, RentalRecord
from thela_rental.core.summary import RentSummary, summarize
from thela_rental.core.utils import format_amount, sanitize_filename

CSV_HEADER = list(STORAGE_KEYS.values())

PDF_COLUMNS = ["Cart ID", "Renter", "Mobile", "Monthly Rent", "Due Date", "Status"]


def default_report_name(extension: str, when: datetime | None = None) -> str:
    when = when or datetime.now()
    return sanitize_filename(f"Thela_Rentals_{when:%Y-%m-%d}.{extension}")


def export_csv(records: Iterable[RentalRecord], path: str) -> int:
    """Write one row per record. Returns the number of rows written."""
    count = 0
    with open(path, mode='w', newline='', encoding='utf-8') as file:
        writer = csv.writer(file)
        writer.writerow(CSV_HEADER)
        for record in records:
            data = record.to_dict()
            proof = record.address_proof_file
            data["addressProofFile"] = proof.name if proof else ""
            writer.writerow([data[key] for key in CSV_HEADER])
            count += 1
    logging.info(f"Exported {count} rental records to {path}")
    return count


def _pdf_currency(currency: str) -> str:
    # The built-in Helvetica font has no rupee glyph.
    return "Rs. " if currency == "₹" else currency


def export_pdf(records: Iterable[RentalRecord], path: str, summary: RentSummary | None = None, currency: str = "₹"):
    records = list(records)
    summary = summary or summarize(records)
    currency = _pdf_currency(currency)

    doc = SimpleDocTemplate(path, pagesize=letter, topMargin=0.4*inch, bottomMargin=0.4*inch, leftMargin=0.4*inch, rightMargin=0.4*inch)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle('TitleStyle', parent=styles['Heading1'], fontSize=16, textColor=colors.darkblue, spaceAfter=4, alignment=TA_CENTER)
    label_style = ParagraphStyle('LabelStyle', parent=styles['Normal'], fontSize=9, textColor=colors.grey, alignment=TA_CENTER)
    cell_style = ParagraphStyle('CellStyle', parent=styles['Normal'], fontSize=9)
    total_style = ParagraphStyle('TotalStyle', parent=styles['Normal'], fontSize=11, fontName='Helvetica-Bold', spaceAfter=2)

    elements = [
        Paragraph("Thela Rental Report", title_style),
        Paragraph(f"Generated {datetime.now():%d %B %Y, %H:%M}", label_style),
        Spacer(1, 0.2*inch),
    ]

    rows = [PDF_COLUMNS]
    for record in records:
        rows.append([
            Paragraph(escape(record.cart_id), cell_style),
            Paragraph(escape(record.renter_name), cell_style),
            record.mobile_no,
            f"{currency}{record.monthly_rent}",
            record.due_date,
            record.rent_status.value,
        ])

    table = Table(rows, colWidths=[1.0*inch, 2.1*inch, 1.3*inch, 1.2*inch, 1.1*inch, 0.9*inch], repeatRows=1)
    table_style = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.lightsteelblue),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.darkblue),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ALIGN', (3, 1), (3, -1), 'RIGHT'),
    ]
    for row_index, record in enumerate(records, start=1):
        if record.is_paid:
            table_style.append(('TEXTCOLOR', (5, row_index), (5, row_index), colors.darkgreen))
        else:
            table_style.append(('TEXTCOLOR', (5, row_index), (5, row_index), colors.darkred))
    table.setStyle(TableStyle(table_style))
    elements.append(table)

    elements.append(Spacer(1, 0.25*inch))
    elements.append(Paragraph(f"Total Collected: {format_amount(summary.total_collected, currency)} ({summary.paid_count} carts)", total_style))
    elements.append(Paragraph(f"Total Pending: {format_amount(summary.total_pending, currency)} ({summary.pending_count} carts)", total_style))

    doc.build(elements)
    logging.info(f"Exported rental report with {len(records)} records to {path}")
