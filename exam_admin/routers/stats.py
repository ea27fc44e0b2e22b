from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable

from fastapi import APIRouter, Depends
from sqlalchemy import func, select

from exam_admin.constants import OTHER, PUBLISHED, SUBJECTS
from exam_admin.database import Database, get_database
from exam_admin.models import Exam, Organization, Question
from exam_admin.utils.field_mapper import as_utc
from exam_admin.utils.responses import create_response, database_errors

router = APIRouter(prefix="/statistics", tags=["Statistics"])

RECENT_ACTIVITY_LIMIT = 5


def subject_distribution(subjects: Iterable[str]) -> Dict[str, int]:
    """Counts per fixed subject; anything unknown goes to the "other" bucket."""
    counts = {s: 0 for s in SUBJECTS}
    counts[OTHER] = 0
    for subject in subjects:
        counts[subject if subject in counts else OTHER] += 1
    return counts


def _scalar(database: Database, stmt) -> int:
    with database.session() as db:
        return db.scalar(stmt) or 0


def _rows(database: Database, stmt) -> list:
    with database.session() as db:
        return db.execute(stmt).all()


@router.get("/overview")
def get_overview(database: Database = Depends(get_database)):
    """
    Dashboard numbers: totals, subject distribution of published questions and
    the latest exams as an activity feed.

    The queries are independent and run side by side, each on its own session;
    the first failure fails the whole response.
    """
    queries = {
        "organizations": (_scalar, select(func.count()).select_from(Organization)),
        "exams": (_scalar, select(func.count()).select_from(Exam)),
        "subjects": (_rows, select(Question.subject).where(Question.status == PUBLISHED)),
        "active_exams": (_scalar, select(func.count()).select_from(Exam).where(Exam.status == PUBLISHED)),
        "recent": (
            _rows,
            select(Exam.id, Exam.name, Exam.exam_type, Exam.created_at, Organization.name.label("organization_name"))
            .outerjoin(Organization, Exam.organization_id == Organization.id)
            .order_by(Exam.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT),
        ),
    }

    with ThreadPoolExecutor(max_workers=len(queries)) as pool:
        futures = {name: pool.submit(fn, database, stmt) for name, (fn, stmt) in queries.items()}
        with database_errors("Failed to load statistics"):
            results: Dict[str, Any] = {name: f.result() for name, f in futures.items()}

    subjects = [subject for (subject,) in results["subjects"]]
    recent = [
        {
            "type": "exam_created",
            "title": "New exam created",
            "description": f"{r.name} ({r.exam_type})",
            "organizationName": r.organization_name,
            "timestamp": as_utc(r.created_at),
        }
        for r in results["recent"]
    ]

    return create_response({
        "totalOrganizations": results["organizations"],
        "totalExams": results["exams"],
        "totalQuestions": len(subjects),
        "activeExams": results["active_exams"],
        "subjectDistribution": subject_distribution(subjects),
        "recentActivity": recent,
    })
