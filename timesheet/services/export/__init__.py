"""Export pipeline - row transformation and CSV/PDF serializers"""

from .transformer import (
    transform_to_detailed_rows,
    transform_to_summary_rows,
)
from .csv_exporter import escape_csv, generate_detailed_csv, generate_summary_csv
from .pdf_exporter import generate_detailed_pdf, generate_summary_pdf

__all__ = [
    "transform_to_detailed_rows", "transform_to_summary_rows",
    "escape_csv", "generate_detailed_csv", "generate_summary_csv",
    "generate_detailed_pdf", "generate_summary_pdf",
]
