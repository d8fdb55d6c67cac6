"""ReportLab PDF Generation Service Implementation

Implements invoice rendering using ReportLab library.
"""

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

from src.app.services.pdf_service import INVOICE_COLUMNS, InvoiceDocument, PdfService

ORANGE = colors.HexColor("#F97316")
DARK = colors.HexColor("#1F2937")
MUTED = colors.HexColor("#6B7280")

COLUMN_WIDTHS = [12 * mm, 32 * mm, 58 * mm, 16 * mm, 26 * mm, 26 * mm]


class ReportLabPdfService(PdfService):
    """
    ReportLab implementation of PdfService

    Draws the orange-themed invoice: company header, recipient block,
    six-column item table, total line and signature lines.
    """

    def render_invoice(self, document: InvoiceDocument) -> bytes:
        """
        Render an invoice PDF

        Args:
            document: Header fields, formatted table rows and grand total

        Returns:
            PDF document as bytes
        """
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=15 * mm,
            leftMargin=15 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
            title=f"Invoice {document.invoice_number}",
        )

        styles = getSampleStyleSheet()
        elements = []

        # Custom styles
        company_style = ParagraphStyle(
            "CompanyStyle",
            parent=styles["Heading1"],
            fontSize=20,
            textColor=ORANGE,
            spaceAfter=0,
        )
        contact_style = ParagraphStyle(
            "ContactStyle",
            parent=styles["Normal"],
            fontSize=9,
            textColor=MUTED,
            alignment=TA_RIGHT,
        )
        title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading2"],
            fontSize=18,
            alignment=TA_CENTER,
            textColor=DARK,
            spaceBefore=6,
            spaceAfter=10,
        )
        normal_style = ParagraphStyle(
            "NormalStyle",
            parent=styles["Normal"],
            fontSize=10,
        )
        bold_style = ParagraphStyle(
            "BoldStyle",
            parent=styles["Normal"],
            fontSize=10,
            fontName="Helvetica-Bold",
        )
        total_style = ParagraphStyle(
            "TotalStyle",
            parent=styles["Normal"],
            fontSize=12,
            fontName="Helvetica-Bold",
            alignment=TA_RIGHT,
        )

        # Header - company name left, address and phone right
        contact = "<br/>".join(
            escape(line) for line in (document.company_address, document.company_phone) if line
        )
        header_table = Table(
            [[Paragraph(escape(document.company_name), company_style), Paragraph(contact, contact_style)]],
            colWidths=[95 * mm, 85 * mm],
        )
        header_table.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LINEBELOW", (0, 0), (-1, 0), 2, ORANGE),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        elements.append(header_table)
        elements.append(Paragraph("INVOICE", title_style))

        # Recipient and invoice details
        recipient = [
            Paragraph("TO :-", bold_style),
            Paragraph(escape(document.recipient_name), normal_style),
            Paragraph(escape(document.recipient_city), normal_style),
        ]
        details = Table(
            [
                ["Invoice No:", document.invoice_number],
                ["Order Nos:", Paragraph(escape(document.order_numbers), normal_style)],
                ["Date:", document.invoice_date],
            ],
            colWidths=[22 * mm, 63 * mm],
        )
        details.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
                ]
            )
        )
        info_table = Table([[recipient, details]], colWidths=[95 * mm, 85 * mm])
        info_table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
        elements.append(info_table)
        elements.append(Spacer(1, 6 * mm))

        # Line Items Table
        line_data = [list(INVOICE_COLUMNS)]
        for row in document.rows:
            line_data.append(
                [row[0], row[1], Paragraph(escape(row[2]), normal_style), row[3], row[4], row[5]]
            )

        line_table = Table(line_data, colWidths=COLUMN_WIDTHS, repeatRows=1)
        line_table.setStyle(
            TableStyle(
                [
                    # Header row
                    ("BACKGROUND", (0, 0), (-1, 0), ORANGE),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, 0), 10),
                    ("ALIGN", (0, 0), (-1, 0), "CENTER"),
                    # Data rows
                    ("FONTSIZE", (0, 1), (-1, -1), 9),
                    ("ALIGN", (0, 1), (0, -1), "CENTER"),
                    ("ALIGN", (3, 1), (-1, -1), "RIGHT"),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    # Grid
                    ("BOX", (0, 0), (-1, -1), 1.2, ORANGE),
                    ("INNERGRID", (0, 0), (-1, -1), 0.5, ORANGE),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        elements.append(line_table)
        elements.append(Spacer(1, 5 * mm))

        # Total
        elements.append(Paragraph(f"Total Amount {escape(document.grand_total)}", total_style))
        elements.append(Spacer(1, 25 * mm))

        # Signatures
        signature_table = Table(
            [["........................................", "", "........................................"],
             ["Authorized By", "", "Customer Signature"]],
            colWidths=[70 * mm, 40 * mm, 70 * mm],
        )
        signature_table.setStyle(
            TableStyle(
                [
                    ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("TEXTCOLOR", (0, 1), (-1, 1), MUTED),
                ]
            )
        )
        elements.append(signature_table)

        # Build PDF
        doc.build(elements)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        return pdf_bytes
