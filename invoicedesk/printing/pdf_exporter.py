"""Invoice export to PDF via QTextDocument and a PDF-mode QPrinter."""

from __future__ import annotations

import logging
import os
import sys
from html import escape
from pathlib import Path
from typing import List

from PyQt5.QtCore import QMarginsF
from PyQt5.QtGui import QPageLayout, QPageSize, QTextDocument
from PyQt5.QtPrintSupport import QPrinter
from PyQt5.QtWidgets import QApplication

from invoicedesk import config
from invoicedesk.models import Invoice, Party, format_currency

LOGGER = logging.getLogger("invoicedesk.printing.pdf_exporter")

_PAGE_SIZES = {
    "A4": QPageSize.A4,
    "LETTER": QPageSize.Letter,
}


def _ensure_qt_app() -> QApplication:
    """QTextDocument layout needs a GUI application object."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv[:1])
    return app


def default_filename(invoice: Invoice) -> str:
    return f"Invoice-{invoice.invoice_number or 'New'}.pdf"


def _plain_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def _party_html(party: Party) -> str:
    lines = [f"<b>{escape(party.name)}</b>"] if party.name else []
    lines.extend(escape(line) for line in party.address.splitlines() if line.strip())
    if party.phone:
        lines.append(escape(party.phone))
    if party.email:
        lines.append(escape(party.email))
    return "<br/>".join(lines)


class InvoicePdfExporter:
    """Render an invoice into a fixed-layout paginated PDF."""

    def __init__(self, page_size: str | None = None, margin_mm: float | None = None) -> None:
        self.page_size = (page_size or config.PAGE_SIZE).upper()
        self.margin_mm = config.PAGE_MARGIN_MM if margin_mm is None else margin_mm

    def build_html(self, invoice: Invoice) -> str:
        money = invoice.currency
        rows: List[str] = []
        for item in invoice.items:
            rows.append(
                f"<tr><td>{escape(item.description)}</td>"
                f"<td align='right'>{_plain_number(item.quantity)}</td>"
                f"<td align='right'>{escape(format_currency(item.unit_price, money))}</td>"
                f"<td align='right'>{escape(format_currency(item.line_total, money))}</td></tr>"
            )

        notes_html = ""
        if invoice.notes.strip():
            notes = "<br/>".join(escape(line) for line in invoice.notes.splitlines())
            notes_html = f"<h4>Notes / Terms</h4><p class='notes'>{notes}</p>"

        return f"""
        <html>
        <head>
            <style>
                body {{ font-family: 'Helvetica'; font-size: 10pt; }}
                h1 {{ margin: 0; font-size: 22pt; }}
                h4 {{ margin: 18px 0 4px 0; }}
                table {{ border-collapse: collapse; }}
                .items th {{ background-color: {config.TABLE_HEADER_COLOR}; color: white; padding: 4px; }}
                .items td {{ padding: 4px; border-bottom: 1px solid #dddddd; }}
                .totals td {{ padding: 3px 6px; border: 1px solid #c8c8c8; }}
            </style>
        </head>
        <body>
            <table width='100%'>
                <tr>
                    <td><h1>{escape(config.DOCUMENT_TITLE)}</h1></td>
                    <td align='right'>Invoice #: {escape(invoice.invoice_number)}<br/>Date: {escape(invoice.date)}</td>
                </tr>
            </table>
            <br/>
            <table width='100%'>
                <tr>
                    <td width='50%'><b>From</b></td>
                    <td width='50%'><b>Bill To</b></td>
                </tr>
                <tr>
                    <td width='50%' valign='top'>{_party_html(invoice.from_party)}</td>
                    <td width='50%' valign='top'>{_party_html(invoice.bill_to)}</td>
                </tr>
            </table>
            <br/>
            <table class='items' width='100%'>
                <tr><th align='left'>Description</th><th align='right'>Qty</th><th align='right'>Unit Price</th><th align='right'>Total</th></tr>
                {''.join(rows)}
            </table>
            <br/>
            <table width='100%'>
                <tr>
                    <td width='50%'></td>
                    <td width='50%'>
                        <table class='totals' width='100%'>
                            <tr><td>Subtotal</td><td align='right'>{escape(format_currency(invoice.sub_total, money))}</td></tr>
                            <tr><td>Tax ({_plain_number(invoice.tax_rate)}%)</td><td align='right'>{escape(format_currency(invoice.tax_amount, money))}</td></tr>
                            <tr><td><b>Total</b></td><td align='right'><b>{escape(format_currency(invoice.total, money))}</b></td></tr>
                        </table>
                    </td>
                </tr>
            </table>
            {notes_html}
        </body>
        </html>
        """

    def _make_printer(self, output_path: Path) -> QPrinter:
        printer = QPrinter(QPrinter.HighResolution)
        printer.setOutputFormat(QPrinter.PdfFormat)
        printer.setOutputFileName(str(output_path))
        printer.setPageLayout(
            QPageLayout(
                QPageSize(_PAGE_SIZES.get(self.page_size, QPageSize.A4)),
                QPageLayout.Portrait,
                QMarginsF(self.margin_mm, self.margin_mm, self.margin_mm, self.margin_mm),
                QPageLayout.Millimeter,
            )
        )
        return printer

    def export(self, invoice: Invoice, output_path: Path | str) -> Path:
        """Write ``invoice`` as a PDF to ``output_path`` and return the path.

        The document is rendered to a sibling ``.part`` file and renamed into
        place, so a failed export never leaves a half-written destination.
        Raises ``OSError`` when the file cannot be produced.
        """
        _ensure_qt_app()
        destination = Path(output_path)
        partial = destination.with_name(destination.name + ".part")

        printer = self._make_printer(partial)
        doc = QTextDocument()
        doc.setHtml(self.build_html(invoice))

        try:
            doc.print_(printer)
            if not partial.exists() or partial.stat().st_size == 0:
                raise OSError(f"Failed to write PDF to {destination}")
            os.replace(partial, destination)
        except OSError:
            partial.unlink(missing_ok=True)
            LOGGER.exception("Export of invoice %s failed", invoice.invoice_number or invoice.id)
            raise

        LOGGER.debug("Exported invoice %s to %s", invoice.invoice_number or invoice.id, destination)
        return destination
