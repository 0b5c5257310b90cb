"""
Sales report endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from rest_api.routers.admin._base import require_finance
from rest_api.services.documents import build_sales_report_pdf
from rest_api.services.domain import ReportService, SettingsService
from shared.infrastructure.db import get_db
from shared.utils.schemas import ReportRangeLiteral, SalesReport


router = APIRouter(tags=["admin-reports"])


@router.get("/reports/sales", response_model=SalesReport)
def sales_report(
    range_: ReportRangeLiteral = Query(default="week", alias="range"),
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_finance),
) -> SalesReport:
    """
    Summary of completed orders for today, the last week, month or year.

    Growth compares total sales with the equal-length period just before.
    Requires ADMIN or ACCOUNTANT role.
    """
    return ReportService(db).sales_report(range_)


@router.get("/reports/sales.pdf")
def sales_report_pdf(
    range_: ReportRangeLiteral = Query(default="week", alias="range"),
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_finance),
) -> Response:
    report = ReportService(db).sales_report(range_)
    content = build_sales_report_pdf(report, SettingsService(db).get().business_name)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="sales-report-{range_}.pdf"'},
    )
