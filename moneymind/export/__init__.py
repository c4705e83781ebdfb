"""Export package."""

from moneymind.export.exporter import (
    ExportError,
    NothingToExportError,
    build_report,
    export_csv,
    export_filename,
)

__all__ = [
    "ExportError",
    "NothingToExportError",
    "build_report",
    "export_csv",
    "export_filename",
]
