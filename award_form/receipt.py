"""
Confirmation Receipt Module

Renders the confirmation artifact for an accepted application as a
one-page PDF using ReportLab.

Determinism:
============
- All date/time references use the confirmation's submitted_at
- No system time calls during rendering (invariant mode pins PDF metadata dates)
- Same confirmation + record = identical bytes

The receipt is built in memory and handed straight back to the caller;
nothing is written to disk.
"""

import io
from typing import Dict, List, Tuple

from reportlab import rl_config
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from award_form.schema import ApplicationRecord, SECTIONS
from award_form.utils import calculate_sha256, escape_text, format_date, format_timestamp
from award_form.workflow import Confirmation

# Enable invariant mode for deterministic PDF generation
rl_config.invariant = 1


PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_LEFT = 25 * mm
MARGIN_RIGHT = 25 * mm
MARGIN_TOP = 20 * mm
MARGIN_BOTTOM = 25 * mm

RECEIPT_TITLE = 'Application Received'


def create_styles() -> Dict[str, ParagraphStyle]:
    """Create paragraph styles for the receipt."""
    styles = getSampleStyleSheet()

    return {
        'title': ParagraphStyle(
            'ReceiptTitle',
            parent=styles['Heading1'],
            fontSize=18,
            leading=24,
            alignment=TA_CENTER,
            spaceAfter=18,
            fontName='Helvetica-Bold',
        ),
        'subtitle': ParagraphStyle(
            'ReceiptSubtitle',
            parent=styles['Normal'],
            fontSize=11,
            leading=15,
            alignment=TA_CENTER,
            spaceAfter=24,
            fontName='Helvetica',
            textColor=colors.HexColor('#444444'),
        ),
        'heading': ParagraphStyle(
            'ReceiptHeading',
            parent=styles['Heading2'],
            fontSize=12,
            leading=16,
            spaceBefore=12,
            spaceAfter=8,
            fontName='Helvetica-Bold',
        ),
        'normal': ParagraphStyle(
            'ReceiptNormal',
            parent=styles['Normal'],
            fontSize=10,
            leading=14,
            alignment=TA_LEFT,
            fontName='Helvetica',
        ),
    }


def _detail_rows(confirmation: Confirmation, record: ApplicationRecord,
                 styles: Dict[str, ParagraphStyle], timezone: str) -> List[List[Paragraph]]:
    rows = [
        ('Researcher', confirmation.researcher_name),
        ('Affiliation', record.affiliation),
        ('Present Appointment', record.present_appointment),
        ('Date of Joining', format_date(record.date_of_joining)),
        ('Submitted', format_timestamp(confirmation.submitted_at, timezone)),
        ('Reference', confirmation.reference),
    ]
    return [
        [Paragraph(escape_text(label), styles['normal']), Paragraph(escape_text(value), styles['normal'])]
        for label, value in rows
    ]


def _section_rows(record: ApplicationRecord, styles: Dict[str, ParagraphStyle]) -> List[List[Paragraph]]:
    counts = record.entry_counts()
    return [
        [Paragraph(escape_text(section.title), styles['normal']),
         Paragraph(str(counts[section.name]), styles['normal'])]
        for section in SECTIONS
    ]


def _table(rows: List[List[Paragraph]]) -> Table:
    table = Table(rows, colWidths=[60 * mm, PAGE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT - 60 * mm])
    table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LINEBELOW', (0, 0), (-1, -1), 0.25, colors.HexColor('#cccccc')),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    return table


def generate_confirmation_pdf(confirmation: Confirmation, record: ApplicationRecord,
                              institution: str = 'Best Researcher Award',
                              timezone: str = 'Asia/Riyadh') -> Tuple[bytes, str]:
    """
    Generate the confirmation receipt for an accepted application.

    Args:
        confirmation: The workflow confirmation
        record: The accepted record
        institution: Name printed under the title
        timezone: Display timezone for the submission timestamp

    Returns:
        Tuple of (PDF bytes, SHA256 hash)
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN_LEFT,
        rightMargin=MARGIN_RIGHT,
        topMargin=MARGIN_TOP,
        bottomMargin=MARGIN_BOTTOM,
        title=RECEIPT_TITLE,
        author=institution,
        creator=institution,
    )

    styles = create_styles()
    story = [
        Paragraph(RECEIPT_TITLE, styles['title']),
        Paragraph(escape_text(institution), styles['subtitle']),
        Paragraph(escape_text(confirmation.message), styles['normal']),
        Spacer(1, 12),
        Paragraph('Applicant', styles['heading']),
        _table(_detail_rows(confirmation, record, styles, timezone)),
        Paragraph('Research Profile Entries', styles['heading']),
        _table(_section_rows(record, styles)),
    ]

    doc.build(story, onFirstPage=_footer, onLaterPages=_footer)
    pdf_bytes = buffer.getvalue()
    buffer.close()

    return pdf_bytes, calculate_sha256(pdf_bytes)


def _footer(canvas, doc):
    canvas.saveState()
    canvas.setFont('Helvetica', 8)
    canvas.setFillColor(colors.grey)
    canvas.drawString(MARGIN_LEFT, 12 * mm, 'This receipt confirms submission only. It is not an award decision.')
    canvas.drawRightString(PAGE_WIDTH - MARGIN_RIGHT, 12 * mm, f'Page {doc.page}')
    canvas.restoreState()


def verify_receipt_integrity(pdf_bytes: bytes, expected_hash: str) -> bool:
    """
    Verify receipt integrity by computing hash.

    Args:
        pdf_bytes: PDF content
        expected_hash: Expected SHA256 hash

    Returns:
        True if integrity verified
    """
    return calculate_sha256(pdf_bytes) == expected_hash
