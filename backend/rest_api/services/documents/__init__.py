"""
PDF documents rendered with reportlab.
"""

from .pdf import build_receipt_pdf, build_sales_report_pdf

__all__ = ["build_receipt_pdf", "build_sales_report_pdf"]
