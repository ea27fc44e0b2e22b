from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, exists, func, select
from sqlalchemy.orm import Session

from exam_admin.constants import DIFFICULTY_LEVELS, PUBLISHED, SUBJECTS
from exam_admin.database import get_db
from exam_admin.models import Exam, Organization, Question
from exam_admin.models.organization import utcnow
from exam_admin.schemas.exam import ExamIn
from exam_admin.utils.field_mapper import EXAM_FIELDS, apply_values, exam_to_wire, to_storage
from exam_admin.utils.pagination import (
    PaginationMode,
    create_pagination_response,
    get_pagination_mode,
    paginate,
    parse_pagination,
)
from exam_admin.utils.query import apply_sort, text_search
from exam_admin.utils.responses import ConflictError, NotFoundError, create_response, database_errors
from exam_admin.utils.validators import validate_exam

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exams", tags=["Exams"])

SEARCH_COLUMNS = (Exam.name, Exam.description, Exam.exam_code)


def subject_counts(db: Session, exam_ids: Iterable[str]) -> Dict[str, Dict[str, int]]:
    """exam id -> {subject: number of questions}."""
    exam_ids = list(exam_ids)
    counts: Dict[str, Dict[str, int]] = defaultdict(dict)
    if not exam_ids:
        return counts
    rows = db.execute(
        select(Question.exam_id, Question.subject, func.count(Question.id))
        .where(Question.exam_id.in_(exam_ids))
        .group_by(Question.exam_id, Question.subject)
    ).all()
    for exam_id, subject, n in rows:
        counts[exam_id][subject] = n
    return counts


def _load(db: Session, exam_id: str):
    """(exam, organization name, subject counts) or NOT_FOUND."""
    with database_errors("Failed to load exam"):
        row = db.execute(
            select(Exam, Organization.name.label("organization_name"))
            .join(Organization, Exam.organization_id == Organization.id)
            .where(Exam.id == exam_id)
        ).first()
        if not row:
            raise NotFoundError("Exam not found")
        exam, org_name = row
        counts = subject_counts(db, [exam.id]).get(exam.id, {})
    return exam, org_name, counts


@router.get("")
def list_exams(
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="pageSize"),
    search: Optional[str] = None,
    status: Optional[str] = None,
    organization_id: Optional[str] = Query(None, alias="organizationId"),
    exam_type: Optional[str] = Query(None, alias="examType"),
    grade_level: Optional[str] = Query(None, alias="gradeLevel"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
    mode: PaginationMode = Depends(get_pagination_mode),
):
    req = parse_pagination(page, page_size)

    stmt = select(Exam, Organization.name.label("organization_name")).join(
        Organization, Exam.organization_id == Organization.id
    )
    if organization_id:
        stmt = stmt.where(Exam.organization_id == organization_id)
    if exam_type:
        stmt = stmt.where(Exam.exam_type == exam_type)
    if grade_level:
        stmt = stmt.where(Exam.grade_level == grade_level)
    if status:
        stmt = stmt.where(Exam.status == status)
    if search:
        stmt = stmt.where(text_search(SEARCH_COLUMNS, search))
    if start_date:
        stmt = stmt.where(Exam.start_date >= start_date)
    if end_date:
        stmt = stmt.where(Exam.end_date <= end_date)
    stmt = apply_sort(stmt, Exam, EXAM_FIELDS, sort_by, sort_order)

    with database_errors("Failed to list exams"):
        rows, pagination = paginate(db, stmt, req, mode)
        counts = subject_counts(db, [exam.id for exam, _ in rows])

    items = [exam_to_wire(exam, org_name, counts.get(exam.id)) for exam, org_name in rows]
    return create_response(create_pagination_response(items, pagination))


@router.post("")
def create_exam(payload: ExamIn, db: Session = Depends(get_db)):
    body = payload.wire()
    validate_exam(body)

    now = utcnow()
    exam = Exam(id=str(uuid4()), created_at=now, updated_at=now, **to_storage(EXAM_FIELDS, body))
    # no pre-check on organizationId: an unknown id fails on the foreign key
    with database_errors("Failed to create exam"):
        db.add(exam)
        db.commit()
    exam, org_name, counts = _load(db, exam.id)

    logger.info("Exam created: %s (%s)", exam.id, exam.exam_code)
    return create_response(exam_to_wire(exam, org_name, counts), "Exam created", 201)


@router.get("/{exam_id}")
def get_exam(exam_id: str, db: Session = Depends(get_db)):
    exam, org_name, counts = _load(db, exam_id)
    return create_response(exam_to_wire(exam, org_name, counts))


@router.get("/{exam_id}/overview")
def exam_overview(exam_id: str, db: Session = Depends(get_db)):
    """Exam header plus distributions of its published questions."""
    exam, org_name, _ = _load(db, exam_id)
    with database_errors("Failed to load exam question statistics"):
        questions = db.execute(
            select(Question.subject, Question.question_type, Question.difficulty_level)
            .where(Question.exam_id == exam_id, Question.status == PUBLISHED)
        ).all()

    subject_stats = {s: 0 for s in SUBJECTS}
    difficulty = {d: 0 for d in DIFFICULTY_LEVELS}
    types: Dict[str, int] = {}
    for subject, question_type, difficulty_level in questions:
        if subject in subject_stats:
            subject_stats[subject] += 1
        if difficulty_level in difficulty:
            difficulty[difficulty_level] += 1
        if question_type:
            types[question_type] = types.get(question_type, 0) + 1

    return create_response({
        "id": exam.id,
        "examCode": exam.exam_code,
        "examName": exam.name,
        "organizationName": org_name,
        "startDate": exam.start_date,
        "endDate": exam.end_date,
        "gradeLevel": exam.grade_level,
        "examType": exam.exam_type,
        "totalQuestions": len(questions),
        "subjectStatistics": subject_stats,
        "difficultyDistribution": difficulty,
        "typeDistribution": types,
    })


def _update(db: Session, exam_id: str, body: dict):
    with database_errors("Failed to load exam"):
        exam = db.get(Exam, exam_id)
    if not exam:
        raise NotFoundError("Exam not found")
    apply_values(exam, to_storage(EXAM_FIELDS, body, partial=True))
    exam.updated_at = utcnow()
    with database_errors("Failed to update exam"):
        db.commit()
    return _load(db, exam_id)


@router.put("/{exam_id}")
def replace_exam(exam_id: str, payload: ExamIn, db: Session = Depends(get_db)):
    body = payload.wire()
    validate_exam(body)
    exam, org_name, counts = _update(db, exam_id, body)
    return create_response(exam_to_wire(exam, org_name, counts), "Exam updated")


@router.patch("/{exam_id}")
def patch_exam(exam_id: str, payload: ExamIn, db: Session = Depends(get_db)):
    exam, org_name, counts = _update(db, exam_id, payload.wire())
    return create_response(exam_to_wire(exam, org_name, counts), "Exam updated")


@router.delete("/{exam_id}")
def delete_exam(exam_id: str, db: Session = Depends(get_db)):
    """Deletes the exam unless questions reference it; guard and delete are one statement."""
    stmt = (
        delete(Exam)
        .where(Exam.id == exam_id, ~exists().where(Question.exam_id == exam_id))
        .execution_options(synchronize_session=False)
    )
    with database_errors("Failed to delete exam"):
        result = db.execute(stmt)
        if not result.rowcount and db.get(Exam, exam_id) is not None:
            db.rollback()
            raise ConflictError("Cannot delete exam: questions still reference it")
        db.commit()

    logger.info("Exam deleted: %s (%d rows)", exam_id, result.rowcount)
    return create_response(None, "Exam deleted")
