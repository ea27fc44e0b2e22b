from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Request
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# keeps the OFFSET within a signed 64-bit integer for any page size
MAX_PAGE = sys.maxsize // MAX_PAGE_SIZE

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class PaginationMode(str, Enum):
    EXACT = "exact"          # COUNT(*) over the filtered query
    COUNTLESS = "countless"  # no count; hasNext guessed from a full page


@dataclass(frozen=True)
class PageRequest:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _parse_int(raw: Optional[str]) -> Optional[int]:
    # same leniency as JS parseInt: "3abc" -> 3, "abc" -> None
    if raw is None:
        return None
    m = _LEADING_INT.match(str(raw))
    if not m:
        return None
    digits = m.group(1)
    if len(digits.lstrip("+-").lstrip("0")) > 18:
        # saturate instead of converting arbitrarily long digit runs
        return -sys.maxsize if digits.startswith("-") else sys.maxsize
    return int(digits)


def parse_pagination(page: Optional[str] = None, page_size: Optional[str] = None) -> PageRequest:
    """
    Raw query-string values -> bounded page request.
    Zero and unparsable values fall back to the defaults (page 1, 20 per page);
    huge page numbers are capped at MAX_PAGE.
    """
    p = min(MAX_PAGE, max(1, _parse_int(page) or 1))
    size = min(MAX_PAGE_SIZE, max(1, _parse_int(page_size) or DEFAULT_PAGE_SIZE))
    return PageRequest(page=p, page_size=size)


def build_pagination(req: PageRequest, total: Optional[int], returned: int = 0) -> Dict[str, Any]:
    if total is None:
        return {
            "page": req.page,
            "pageSize": req.page_size,
            "total": None,
            "totalPages": None,
            "hasNext": returned >= req.page_size,
            "hasPrev": req.page > 1,
        }
    total_pages = math.ceil(total / req.page_size)
    return {
        "page": req.page,
        "pageSize": req.page_size,
        "total": total,
        "totalPages": total_pages,
        "hasNext": req.page < total_pages,
        "hasPrev": req.page > 1,
    }


def count_rows(db: Session, stmt: Select) -> int:
    subq = stmt.order_by(None).subquery()
    return db.scalar(select(func.count()).select_from(subq)) or 0


def paginate(db: Session, stmt: Select, req: PageRequest,
             mode: PaginationMode = PaginationMode.EXACT) -> Tuple[List[Any], Dict[str, Any]]:
    """Runs stmt for one page and returns (rows, pagination descriptor)."""
    total = count_rows(db, stmt) if mode == PaginationMode.EXACT else None
    rows = db.execute(stmt.offset(req.offset).limit(req.page_size)).all()
    return rows, build_pagination(req, total, len(rows))


def create_pagination_response(items: List[Any], pagination: Dict[str, Any]) -> Dict[str, Any]:
    return {"items": items, "pagination": pagination}


def get_pagination_mode(request: Request) -> PaginationMode:
    """Pagination mode configured for the whole app (PAGINATION_MODE)."""
    return PaginationMode(request.app.state.settings.pagination_mode)
