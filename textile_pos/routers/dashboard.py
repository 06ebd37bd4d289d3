from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from textile_pos.dependencies import get_db, require_login
from textile_pos.services.dashboard_service import shop_summary

router = APIRouter(prefix="/dashboard", tags=["Dashboard"], dependencies=[Depends(require_login)])


@router.get("/summary")
def summary(
    days: int = Query(7, ge=1, le=90, description="Days of daily sales to include"),
    db: Session = Depends(get_db),
):
    return shop_summary(db, days=days)
