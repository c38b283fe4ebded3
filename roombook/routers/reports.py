from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas, models
from ..deps import get_db, admin_only
from ..reports import build_report

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=schemas.ReportOut)
def get_reports(
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """
    Booking statistics.

    Counts for today, this week, this month and this year (by creation
    date), totals per room and per status, and the full booking history.
    """
    return build_report(db)
