from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError
from ..listing import contains, json_contains, page_params, paginate
from ..models import Course


router = APIRouter(prefix="/courses", tags=["courses"])


def _course_out(row: Course) -> Dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "stream": row.stream,
        "description": row.description,
        "careers": list(row.careers or []),
        "duration": row.duration,
        "eligibility": row.eligibility,
    }


@router.get("")
def list_courses(
    stream: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    page, limit = page_params(page, limit, default_limit=50)
    query = db.query(Course)
    if stream:
        query = query.filter(contains(Course.stream, stream))
    rows, meta = paginate(query.order_by(Course.name.asc()), page, limit)
    return {"message": "Courses retrieved successfully", **meta, "courses": [_course_out(r) for r in rows]}


@router.get("/streams")
def list_streams(db: Session = Depends(get_db)):
    streams = [s for (s,) in db.query(Course.stream).distinct().all() if s]
    return {"message": "Available streams retrieved successfully", "streams": sorted(streams)}


@router.get("/search/{term}")
def search_courses(
    term: str,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    page, limit = page_params(page, limit, default_limit=20)
    query = db.query(Course).filter(
        or_(contains(Course.name, term), contains(Course.description, term), json_contains(Course.careers, term))
    )
    rows, meta = paginate(query.order_by(Course.name.asc()), page, limit)
    return {
        "message": f'Search results for "{term}"',
        "searchTerm": term,
        **meta,
        "courses": [_course_out(r) for r in rows],
    }


@router.get("/{course_id}")
def get_course(course_id: int, db: Session = Depends(get_db)):
    row = db.get(Course, course_id)
    if not row:
        raise NotFoundError("Course not found")
    return {"message": "Course retrieved successfully", "course": _course_out(row)}
