from __future__ import annotations
import math
from typing import Any, Dict, List, Tuple

from sqlalchemy import String, cast
from sqlalchemy.orm import Query


def contains(column, term: str):
	"""Case-insensitive substring match; LIKE wildcards in ``term`` are literal."""
	escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
	return column.ilike(f"%{escaped}%", escape="\\")


def json_contains(column, term: str):
	# JSON list columns are matched against their serialized text
	return contains(cast(column, String), term)


def page_params(page: int | None, limit: int | None, default_limit: int) -> Tuple[int, int]:
	page_number = page if page and page > 0 else 1
	limit_number = limit if limit and limit > 0 else default_limit
	return page_number, limit_number


def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], Dict[str, int]]:
	total = query.order_by(None).count()
	rows = query.offset((page - 1) * limit).limit(limit).all()
	meta = {
		"count": len(rows),
		"total": total,
		"currentPage": page,
		"totalPages": math.ceil(total / limit) if limit else 0,
	}
	return rows, meta
