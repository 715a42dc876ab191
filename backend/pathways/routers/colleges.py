from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..listing import contains, json_contains, page_params, paginate
from ..models import College


router = APIRouter(prefix="/colleges", tags=["colleges"])

MAX_TOP_COLLEGES = 100


def _college_out(row: College) -> Dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "location": row.location,
        "programs": list(row.programs or []),
        "facilities": list(row.facilities or []),
        "type": row.type,
        "ranking": row.ranking,
    }


def _ranked(query):
    # Unranked colleges sort last
    return query.order_by(College.ranking.is_(None), College.ranking.asc(), College.name.asc())


@router.get("")
def list_colleges(
    location: Optional[str] = None,
    type: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    page, limit = page_params(page, limit, default_limit=50)
    query = db.query(College)
    if location:
        query = query.filter(contains(College.location, location))
    if type:
        query = query.filter(contains(College.type, type))
    rows, meta = paginate(_ranked(query), page, limit)
    return {"message": "Colleges retrieved successfully", **meta, "colleges": [_college_out(r) for r in rows]}


@router.get("/locations")
def list_locations(db: Session = Depends(get_db)):
    locations = [l for (l,) in db.query(College.location).distinct().all() if l]
    return {"message": "Available locations retrieved successfully", "locations": sorted(locations)}


@router.get("/types")
def list_types(db: Session = Depends(get_db)):
    types = [t for (t,) in db.query(College.type).distinct().all() if t]
    return {"message": "Available college types retrieved successfully", "types": sorted(types)}


@router.get("/search/{term}")
def search_colleges(
    term: str,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    page, limit = page_params(page, limit, default_limit=20)
    query = db.query(College).filter(
        or_(
            contains(College.name, term),
            contains(College.location, term),
            json_contains(College.programs, term),
            json_contains(College.facilities, term),
        )
    )
    rows, meta = paginate(_ranked(query), page, limit)
    return {
        "message": f'Search results for "{term}"',
        "searchTerm": term,
        **meta,
        "colleges": [_college_out(r) for r in rows],
    }


@router.get("/top/{count}")
def top_colleges(count: int, db: Session = Depends(get_db)):
    if count > MAX_TOP_COLLEGES:
        raise ValidationError(f"Maximum count allowed is {MAX_TOP_COLLEGES}")
    if count < 1:
        count = 10
    rows = (
        db.query(College)
        .filter(College.ranking.isnot(None))
        .order_by(College.ranking.asc(), College.name.asc())
        .limit(count)
        .all()
    )
    return {
        "message": f"Top {count} colleges retrieved successfully",
        "count": len(rows),
        "colleges": [_college_out(r) for r in rows],
    }


@router.get("/{college_id}")
def get_college(college_id: int, db: Session = Depends(get_db)):
    row = db.get(College, college_id)
    if not row:
        raise NotFoundError("College not found")
    return {"message": "College retrieved successfully", "college": _college_out(row)}
