from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from exam_admin.constants import JAPANESE, OTHER, PUBLISHED, VOCABULARY_LEVELS
from exam_admin.database import Database, get_database, get_db
from exam_admin.models import Exam, Organization, Question
from exam_admin.models.organization import utcnow
from exam_admin.schemas.question import BatchRequest, QuestionIn
from exam_admin.utils.field_mapper import (
    QUESTION_BATCH_FIELDS,
    QUESTION_FIELDS,
    apply_values,
    as_utc,
    question_to_wire,
    to_storage,
)
from exam_admin.utils.pagination import (
    PaginationMode,
    create_pagination_response,
    get_pagination_mode,
    paginate,
    parse_pagination,
)
from exam_admin.utils.query import apply_contains_all, apply_sort, split_csv, text_search
from exam_admin.utils.responses import NotFoundError, ValidationError, create_response, database_errors, utc_timestamp
from exam_admin.utils.validators import validate_question

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions", tags=["Questions"])

SEARCH_COLUMNS = (Question.question_text, Question.japanese_text, Question.reference_answer)


def question_select():
    """Questions with organization name and exam name/code joined in."""
    return (
        select(
            Question,
            Organization.name.label("organization_name"),
            Exam.name.label("exam_name"),
            Exam.exam_code.label("exam_code"),
        )
        .outerjoin(Organization, Question.organization_id == Organization.id)
        .outerjoin(Exam, Question.exam_id == Exam.id)
    )


def row_to_wire(row) -> Dict[str, Any]:
    question, org_name, exam_name, exam_code = row
    return question_to_wire(question, org_name, exam_name, exam_code)


def _load(db: Session, question_id: str):
    with database_errors("Failed to load question"):
        row = db.execute(question_select().where(Question.id == question_id)).first()
    if not row:
        raise NotFoundError("Question not found")
    return row


@router.get("")
def list_questions(
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="pageSize"),
    search: Optional[str] = None,
    status: Optional[str] = None,
    exam_id: Optional[str] = Query(None, alias="examId"),
    organization_id: Optional[str] = Query(None, alias="organizationId"),
    subject: Optional[str] = None,
    question_type: Optional[str] = Query(None, alias="questionType"),
    difficulty_level: Optional[str] = Query(None, alias="difficultyLevel"),
    vocabulary_level: Optional[str] = Query(None, alias="vocabularyLevel"),
    has_audio: Optional[str] = Query(None, alias="hasAudio"),
    knowledge_points: Optional[str] = Query(None, alias="knowledgePoints"),
    tags: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
    database: Database = Depends(get_database),
    mode: PaginationMode = Depends(get_pagination_mode),
):
    req = parse_pagination(page, page_size)

    stmt = question_select()
    equals = (
        (Question.exam_id, exam_id),
        (Question.organization_id, organization_id),
        (Question.subject, subject),
        (Question.question_type, question_type),
        (Question.difficulty_level, difficulty_level),
        (Question.vocabulary_level, vocabulary_level),
        (Question.status, status),
    )
    for column, value in equals:
        if value:
            stmt = stmt.where(column == value)

    if has_audio == "true":
        stmt = stmt.where(Question.audio_url.isnot(None))
    elif has_audio == "false":
        stmt = stmt.where(Question.audio_url.is_(None))

    if search:
        stmt = stmt.where(text_search(SEARCH_COLUMNS, search))

    stmt = apply_contains_all(stmt, Question.knowledge_points, split_csv(knowledge_points), database.dialect)
    stmt = apply_contains_all(stmt, Question.tags, split_csv(tags), database.dialect)
    stmt = apply_sort(stmt, Question, QUESTION_FIELDS, sort_by, sort_order)

    with database_errors("Failed to list questions"):
        rows, pagination = paginate(db, stmt, req, mode)

    return create_response(create_pagination_response([row_to_wire(r) for r in rows], pagination))


@router.post("")
def create_question(payload: QuestionIn, db: Session = Depends(get_db)):
    body = payload.wire()
    validate_question(body)

    now = utcnow()
    question = Question(id=str(uuid4()), created_at=now, updated_at=now,
                        **to_storage(QUESTION_FIELDS, body))
    with database_errors("Failed to create question"):
        db.add(question)
        db.commit()
    row = _load(db, question.id)

    logger.info("Question created: %s (exam %s)", question.id, question.exam_id)
    return create_response(row_to_wire(row), "Question created", 201)


@router.get("/japanese/statistics")
def japanese_statistics(
    exam_id: Optional[str] = Query(None, alias="examId"),
    organization_id: Optional[str] = Query(None, alias="organizationId"),
    vocabulary_level: Optional[str] = Query(None, alias="vocabularyLevel"),
    db: Session = Depends(get_db),
):
    """Distributions over published Japanese questions."""
    stmt = select(Question).where(Question.subject == JAPANESE, Question.status == PUBLISHED)
    if exam_id:
        stmt = stmt.where(Question.exam_id == exam_id)
    if organization_id:
        stmt = stmt.where(Question.organization_id == organization_id)
    if vocabulary_level:
        stmt = stmt.where(Question.vocabulary_level == vocabulary_level)

    with database_errors("Failed to load Japanese question statistics"):
        questions = db.scalars(stmt).all()

    levels = {level: 0 for level in VOCABULARY_LEVELS}
    types: Dict[str, int] = {}
    audio = with_japanese_text = grammar_total = kanji_total = 0

    for q in questions:
        level = q.vocabulary_level if q.vocabulary_level in levels else OTHER
        levels[level] += 1
        if q.question_type:
            types[q.question_type] = types.get(q.question_type, 0) + 1
        if q.audio_url:
            audio += 1
        if q.japanese_text:
            with_japanese_text += 1
        if isinstance(q.grammar_points, list):
            grammar_total += len(q.grammar_points)
        if isinstance(q.kanji_list, list):
            kanji_total += len(q.kanji_list)

    total = len(questions)
    return create_response({
        "totalQuestions": total,
        "levelDistribution": levels,
        "typeDistribution": types,
        "audioQuestions": audio,
        "questionsWithJapaneseText": with_japanese_text,
        "averageGrammarPoints": round(grammar_total / total, 1) if total else 0,
        "averageKanjiCount": round(kanji_total / total, 1) if total else 0,
    })


def _join(values) -> str:
    return ", ".join(values or [])


def export_row(row) -> Dict[str, Any]:
    # column headers of the spreadsheet export
    q, org_name, exam_name, exam_code = row
    return {
        "题目编号": q.question_code,
        "学科": q.subject,
        "题型": q.question_type,
        "难度": q.difficulty_level,
        "题目内容": q.question_text,
        "日语原文": q.japanese_text,
        "读音标注": q.pronunciation_guide,
        "参考答案": q.reference_answer,
        "知识点": _join(q.knowledge_points),
        "语法点": _join(q.grammar_points),
        "日语等级": q.vocabulary_level,
        "汉字": _join(q.kanji_list),
        "分值": q.total_score,
        "组织名称": org_name,
        "考试名称": exam_name,
        "考试编号": exam_code,
        "创建时间": as_utc(q.created_at),
    }


@router.post("/batch")
def batch_questions(payload: BatchRequest, db: Session = Depends(get_db)):
    """
    delete | update | export over a list of question ids.
    Runs as one transaction: a storage error aborts the whole batch.
    """
    action = payload.action
    ids: List[str] = payload.question_ids or []
    if not action or not ids:
        raise ValidationError("action and questionIds are required")

    if action == "delete":
        with database_errors("Batch delete failed"):
            found = db.scalars(select(Question.id).where(Question.id.in_(ids))).all()
            db.execute(
                delete(Question).where(Question.id.in_(found)).execution_options(synchronize_session=False)
            )
            db.commit()
        logger.info("Batch deleted %d questions", len(found))
        return create_response({"deletedCount": len(found), "deletedIds": list(found)},
                               f"Deleted {len(found)} questions")

    if action == "update":
        if payload.update_data is None:
            raise ValidationError("updateData is required for a batch update")
        values = to_storage(QUESTION_BATCH_FIELDS, payload.update_data.wire(), partial=True)
        if not values:
            raise ValidationError(
                "updateData has no updatable fields",
                errors=[f"allowed fields: {[f.wire for f in QUESTION_BATCH_FIELDS]}"],
            )
        values["updated_at"] = utcnow()
        with database_errors("Batch update failed"):
            found = db.scalars(select(Question.id).where(Question.id.in_(ids))).all()
            db.execute(
                update(Question).where(Question.id.in_(found)).values(**values)
                .execution_options(synchronize_session=False)
            )
            db.commit()
        logger.info("Batch updated %d questions", len(found))
        return create_response({"updatedCount": len(found), "updatedIds": list(found)},
                               f"Updated {len(found)} questions")

    if action == "export":
        with database_errors("Failed to load questions for export"):
            rows = db.execute(question_select().where(Question.id.in_(ids))).all()
        data = [export_row(r) for r in rows]
        return create_response({"exportData": data, "exportCount": len(data), "exportTime": utc_timestamp()},
                               f"Exported {len(data)} questions")

    raise ValidationError(f"Unsupported batch action: {action}")


@router.get("/{question_id}")
def get_question(question_id: str, db: Session = Depends(get_db)):
    return create_response(row_to_wire(_load(db, question_id)))


def _update(db: Session, question_id: str, body: dict):
    with database_errors("Failed to load question"):
        question = db.get(Question, question_id)
    if not question:
        raise NotFoundError("Question not found")
    apply_values(question, to_storage(QUESTION_FIELDS, body, partial=True))
    question.updated_at = utcnow()
    with database_errors("Failed to update question"):
        db.commit()
    return _load(db, question_id)


@router.put("/{question_id}")
def replace_question(question_id: str, payload: QuestionIn, db: Session = Depends(get_db)):
    body = payload.wire()
    validate_question(body)
    return create_response(row_to_wire(_update(db, question_id, body)), "Question updated")


@router.patch("/{question_id}")
def patch_question(question_id: str, payload: QuestionIn, db: Session = Depends(get_db)):
    return create_response(row_to_wire(_update(db, question_id, payload.wire())), "Question updated")


@router.delete("/{question_id}")
def delete_question(question_id: str, db: Session = Depends(get_db)):
    # unconditional; an unknown id deletes nothing and still succeeds
    with database_errors("Failed to delete question"):
        result = db.execute(
            delete(Question).where(Question.id == question_id).execution_options(synchronize_session=False)
        )
        db.commit()
    logger.info("Question deleted: %s (%d rows)", question_id, result.rowcount)
    return create_response(None, "Question deleted")
