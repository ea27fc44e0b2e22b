from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from exam_admin.constants import PUBLISHED, SEARCH_SUGGESTIONS, SUGGESTION_THRESHOLD
from exam_admin.database import get_db
from exam_admin.models import Question
from exam_admin.routers.questions import SEARCH_COLUMNS, question_select, row_to_wire
from exam_admin.utils.pagination import paginate, parse_pagination
from exam_admin.utils.query import text_search
from exam_admin.utils.responses import create_response, database_errors
from exam_admin.utils.validators import require_search_term

router = APIRouter(prefix="/search", tags=["Search"])

MAX_KNOWLEDGE_POINTS = 20
MAX_RELATED_POINTS = 5


def suggestions_for(keyword: str, total: int) -> List[str]:
    """Canned follow-up keywords, only offered when the search found little."""
    if total >= SUGGESTION_THRESHOLD:
        return []
    out: List[str] = []
    for trigger, words in SEARCH_SUGGESTIONS.items():
        if trigger in keyword:
            out.extend(words)
    return out


@router.get("/questions")
def search_questions(
    q: Optional[str] = None,
    subject: Optional[str] = None,
    exam_id: Optional[str] = Query(None, alias="examId"),
    difficulty_level: Optional[str] = Query(None, alias="difficultyLevel"),
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="pageSize"),
    db: Session = Depends(get_db),
):
    """Substring search over published questions, newest first (no relevance ranking)."""
    keyword = require_search_term(q)
    req = parse_pagination(page, page_size)
    started = time.perf_counter()

    stmt = question_select().where(Question.status == PUBLISHED, text_search(SEARCH_COLUMNS, keyword))
    if subject:
        stmt = stmt.where(Question.subject == subject)
    if exam_id:
        stmt = stmt.where(Question.exam_id == exam_id)
    if difficulty_level:
        stmt = stmt.where(Question.difficulty_level == difficulty_level)
    stmt = stmt.order_by(Question.created_at.desc(), Question.id.desc())

    # totalResults needs the exact count regardless of the configured mode
    with database_errors("Question search failed"):
        rows, pagination = paginate(db, stmt, req)

    total = pagination["total"]
    return create_response({
        "items": [row_to_wire(r) for r in rows],
        "searchInfo": {
            "query": keyword,
            "totalResults": total,
            "searchTime": round(time.perf_counter() - started, 3),
            "suggestions": suggestions_for(keyword, total),
        },
        "pagination": pagination,
    })


@router.get("/knowledge-points")
def search_knowledge_points(
    q: Optional[str] = None,
    subject: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Knowledge points (of published questions) whose name contains q, with the
    subjects they occur in and the points they co-occur with, most frequent first.
    """
    keyword = require_search_term(q)

    stmt = select(Question.knowledge_points, Question.subject).where(
        Question.status == PUBLISHED, Question.knowledge_points.isnot(None)
    )
    if subject:
        stmt = stmt.where(Question.subject == subject)

    with database_errors("Knowledge point search failed"):
        rows = db.execute(stmt).all()

    stats: Dict[str, Dict[str, Any]] = {}
    for points, question_subject in rows:
        if not isinstance(points, list):
            continue
        for point in points:
            if not point or keyword not in point:
                continue
            entry = stats.setdefault(point, {"name": point, "count": 0, "subjects": {}, "related": {}})
            entry["count"] += 1
            entry["subjects"][question_subject] = None
            for other in points:
                if other != point:
                    entry["related"][other] = None

    ranked = sorted(stats.values(), key=lambda e: e["count"], reverse=True)[:MAX_KNOWLEDGE_POINTS]
    return create_response({
        "knowledgePoints": [
            {
                "name": e["name"],
                "count": e["count"],
                "subjects": list(e["subjects"]),
                "relatedPoints": list(e["related"])[:MAX_RELATED_POINTS],
            }
            for e in ranked
        ]
    })
