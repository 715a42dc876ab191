from __future__ import annotations
import calendar
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..listing import contains, page_params, paginate
from ..models import TimelineEvent


router = APIRouter(prefix="/timeline", tags=["timeline"])

UPCOMING_WINDOW_DAYS = 30


def _event_out(row: TimelineEvent) -> Dict[str, Any]:
    return {
        "id": row.id,
        "title": row.title,
        "date": row.date.isoformat(),
        "description": row.description,
        "category": row.category,
    }


def _active(db: Session):
    return db.query(TimelineEvent).filter(TimelineEvent.is_active.is_(True))


@router.get("")
def list_events(
    category: Optional[str] = None,
    upcoming: bool = False,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    page, limit = page_params(page, limit, default_limit=50)
    query = _active(db)
    if category:
        query = query.filter(contains(TimelineEvent.category, category))
    if upcoming:
        query = query.filter(TimelineEvent.date >= datetime.utcnow())
    rows, meta = paginate(query.order_by(TimelineEvent.date.asc()), page, limit)
    return {"message": "Timeline events retrieved successfully", **meta, "events": [_event_out(r) for r in rows]}


@router.get("/upcoming")
def upcoming_events(limit: Optional[int] = None, db: Session = Depends(get_db)):
    _, limit = page_params(1, limit, default_limit=10)
    now = datetime.utcnow()
    rows = (
        _active(db)
        .filter(TimelineEvent.date >= now, TimelineEvent.date <= now + timedelta(days=UPCOMING_WINDOW_DAYS))
        .order_by(TimelineEvent.date.asc())
        .limit(limit)
        .all()
    )
    return {
        "message": "Upcoming events retrieved successfully",
        "count": len(rows),
        "period": f"Next {UPCOMING_WINDOW_DAYS} days",
        "events": [_event_out(r) for r in rows],
    }


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    categories = [c for (c,) in db.query(TimelineEvent.category).distinct().all() if c]
    return {"message": "Event categories retrieved successfully", "categories": sorted(categories)}


@router.get("/month/{year}/{month}")
def events_for_month(year: int, month: int, db: Session = Depends(get_db)):
    if month < 1 or month > 12 or year < 1 or year > 9999:
        raise ValidationError("Invalid year or month format")
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, 23, 59, 59)
    rows = (
        _active(db)
        .filter(TimelineEvent.date >= start, TimelineEvent.date <= end)
        .order_by(TimelineEvent.date.asc())
        .all()
    )
    return {
        "message": f"Events for {month}/{year} retrieved successfully",
        "month": month,
        "year": year,
        "count": len(rows),
        "events": [_event_out(r) for r in rows],
    }


@router.get("/search/{term}")
def search_events(
    term: str,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    page, limit = page_params(page, limit, default_limit=20)
    query = _active(db).filter(
        or_(
            contains(TimelineEvent.title, term),
            contains(TimelineEvent.description, term),
            contains(TimelineEvent.category, term),
        )
    )
    rows, meta = paginate(query.order_by(TimelineEvent.date.asc()), page, limit)
    return {
        "message": f'Search results for "{term}"',
        "searchTerm": term,
        **meta,
        "events": [_event_out(r) for r in rows],
    }


@router.get("/{event_id}")
def get_event(event_id: int, db: Session = Depends(get_db)):
    row = db.get(TimelineEvent, event_id)
    if not row:
        raise NotFoundError("Timeline event not found")
    return {"message": "Timeline event retrieved successfully", "event": _event_out(row)}
