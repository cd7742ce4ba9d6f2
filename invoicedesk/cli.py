"""Command-line access to the invoice store and PDF export."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from invoicedesk import config
from invoicedesk.api import InvoiceDeskApi
from invoicedesk.data.invoice_repo import InvoiceNotFoundError
from invoicedesk.models import InvoiceStatus, format_currency

app = typer.Typer(add_completion=False, help="Invoice Desk CLI")
console = Console()


@app.callback()
def _setup(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", file_okay=False, help="Folder holding invoices, clients and settings"),
) -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = InvoiceDeskApi(data_dir)


def _api(ctx: typer.Context) -> InvoiceDeskApi:
    return ctx.obj


def _fail(exc: Exception) -> NoReturn:
    print(f"[red]{exc}[/red]")
    raise typer.Exit(code=1)


@app.command("list")
def list_invoices(
    ctx: typer.Context,
    query: str = typer.Option("", "--query", "-q", help="Filter by number, date or client"),
    status: Optional[InvoiceStatus] = typer.Option(None, "--status", "-s", help="Only invoices in this state"),
) -> None:
    """List stored invoices, newest first."""
    table = Table("Id", "Number", "Date", "Bill To", "Total", "Status")
    for summary in _api(ctx).list_invoices(query, status=status.value if status else None):
        bill_to = summary.get("billTo") or {}
        name = bill_to.get("name", "") if isinstance(bill_to, dict) else ""
        try:
            total = format_currency(float(summary.get("total") or 0), summary.get("currency") or "")
        except (TypeError, ValueError):
            total = str(summary.get("total"))
        table.add_row(
            summary["id"],
            str(summary.get("invoiceNumber") or ""),
            str(summary.get("date") or ""),
            str(name or ""),
            total,
            str(summary.get("status") or ""),
        )
    console.print(table)


@app.command()
def show(ctx: typer.Context, invoice_id: str = typer.Argument(..., help="Invoice id")) -> None:
    """Print one invoice with its items and totals."""
    try:
        invoice = _api(ctx).invoices.load(invoice_id)
    except (InvoiceNotFoundError, ValueError) as exc:
        _fail(exc)

    print(f"[bold]Invoice #{invoice.invoice_number}[/bold]  {invoice.date}  ({invoice.status.value})")
    print(f"From: {invoice.from_party.name}    Bill To: {invoice.bill_to.name}")
    table = Table("Description", "Qty", "Unit Price", "Total")
    for item in invoice.items:
        table.add_row(
            item.description,
            f"{item.quantity:g}",
            format_currency(item.unit_price, invoice.currency),
            format_currency(item.line_total, invoice.currency),
        )
    console.print(table)
    print(f"Items: {invoice.total_qty():g}")
    print(f"Subtotal: {format_currency(invoice.sub_total, invoice.currency)}")
    print(f"Tax ({invoice.tax_rate:g}%): {format_currency(invoice.tax_amount, invoice.currency)}")
    print(f"[bold]Total: {format_currency(invoice.total, invoice.currency)}[/bold]")


@app.command()
def duplicate(
    ctx: typer.Context,
    invoice_id: str = typer.Argument(..., help="Invoice id to copy"),
    number: Optional[str] = typer.Option(None, help="Number for the copy; defaults to the next free number"),
) -> None:
    """Copy an invoice under a new number, dated today."""
    api = _api(ctx)
    try:
        copy = api.duplicate_invoice(invoice_id, number or api.next_invoice_number())
    except (InvoiceNotFoundError, ValueError) as exc:
        _fail(exc)
    print(f"Created invoice {copy['invoiceNumber']} -> {copy['id']}")


@app.command()
def delete(ctx: typer.Context, invoice_id: str = typer.Argument(..., help="Invoice id")) -> None:
    """Delete an invoice record."""
    try:
        _api(ctx).delete_invoice(invoice_id)
    except ValueError as exc:
        _fail(exc)
    print(f"Deleted {invoice_id}")


@app.command()
def status(
    ctx: typer.Context,
    invoice_id: str = typer.Argument(..., help="Invoice id"),
    new_status: InvoiceStatus = typer.Argument(..., metavar="STATUS", help="open, paid or overdue"),
) -> None:
    """Mark an invoice as open, paid or overdue."""
    try:
        invoice = _api(ctx).set_invoice_status(invoice_id, new_status.value)
    except (InvoiceNotFoundError, ValueError) as exc:
        _fail(exc)
    print(f"Invoice {invoice['invoiceNumber']} is now {invoice['status']}")


@app.command("next-number")
def next_number(ctx: typer.Context) -> None:
    """Reserve and print the next invoice number."""
    print(_api(ctx).next_invoice_number())


@app.command()
def export(
    ctx: typer.Context,
    invoice_id: str = typer.Argument(..., help="Invoice id"),
    output: Path = typer.Argument(..., dir_okay=False, help="Destination PDF path"),
) -> None:
    """Render an invoice to PDF."""
    api = _api(ctx)
    try:
        invoice = api.load_invoice(invoice_id)
    except (InvoiceNotFoundError, ValueError) as exc:
        _fail(exc)
    try:
        result = api.export_document(invoice, output)
    except OSError as exc:
        _fail(exc)
    print(f"Exported -> {result['filePath']}")


def _print_entities(records: list, title: str) -> None:
    table = Table("Id", "Name", "Email", "Phone", title=title)
    for record in records:
        table.add_row(
            str(record.get("id", "")),
            str(record.get("name") or ""),
            str(record.get("email") or ""),
            str(record.get("phone") or ""),
        )
    console.print(table)


@app.command()
def clients(ctx: typer.Context, query: str = typer.Option("", "--query", "-q")) -> None:
    """List billing clients."""
    _print_entities(_api(ctx).clients_list(query), "Clients")


@app.command()
def profiles(ctx: typer.Context, query: str = typer.Option("", "--query", "-q")) -> None:
    """List issuer profiles."""
    _print_entities(_api(ctx).profiles_list(query), "Profiles")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
