"""Unit tests for ReportLabPdfService"""

from src.adapter.services.pdf_service import ReportLabPdfService
from src.app.services.pdf_service import InvoiceDocument
from src.app.use_cases.invoicing.render_invoice import build_invoice_rows
from tests.fixtures.invoices import line


def make_document(**overrides):
    fields = dict(
        company_name="Sevinro Distributors",
        company_address="No : 138/A, Akaravita, Gampaha",
        company_phone="071 39 65 580",
        recipient_name="Cotton Feel & Co <Ltd>",
        recipient_city="Colombo",
        invoice_number="10000",
        invoice_date="30/11/2024",
        order_numbers="order_a, order_b",
        rows=build_invoice_rows([line("X1", 3, 100, "Shirt"), line("Y2", 1, 50)]),
        grand_total="Rs. 350.00",
    )
    fields.update(overrides)
    return InvoiceDocument(**fields)


class TestReportLabPdfService:

    def test_renders_pdf_bytes(self):
        pdf = ReportLabPdfService().render_invoice(make_document())

        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_long_tables_span_pages(self):
        rows = build_invoice_rows([line(f"X{n}", 1, 10, "Cotton shirt") for n in range(80)])

        pdf = ReportLabPdfService().render_invoice(make_document(rows=rows))

        assert pdf.startswith(b"%PDF")
