# backend/routes/logs.py
from datetime import datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import MAX_INT, get_db
from models.log import Log
from schemas.log import LogPage
from services.identity import Authenticated
from utils.tokenJWT import get_admin_identity

router = APIRouter(prefix="/logs", tags=["Logs"])


def _parse_day(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """Parse an ISO date or datetime; a bare date covers the whole day. Garbage yields None."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


# Browse the audit trail (admin only)
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1, le=MAX_INT),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Action name, e.g. ORDER_CREATE (substring match)"),
    resource: Optional[str] = Query(None, description="Resource, e.g. cart, orders (substring match)"),
    status: Optional[str] = Query(None, description="SUCCESS or FAIL"),
    user_id: Optional[int] = Query(None, ge=1, le=MAX_INT),
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD or ISO datetime"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD (inclusive) or ISO datetime"),
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    query = db.query(Log)

    for column, needle in ((Log.action, action), (Log.resource, resource)):
        if needle:
            query = query.filter(column.ilike(f"%{needle}%"))
    if status:
        query = query.filter(Log.status == status.upper())
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)

    since = _parse_day(date_from)
    until = _parse_day(date_to, end_of_day=True)
    if since:
        query = query.filter(Log.ts >= since)
    if until:
        query = query.filter(Log.ts <= until)

    total = query.count()
    entries = (
        query.order_by(Log.ts.desc(), Log.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": entries, "total": total, "page": page, "page_size": page_size}
