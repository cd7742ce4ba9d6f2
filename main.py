"""Entry point for the Invoice Desk command-line tools."""

from invoicedesk.cli import main


if __name__ == "__main__":
    main()
