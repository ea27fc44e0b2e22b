"""
Translation between storage rows (snake_case columns) and the wire shape
(camelCase JSON).

Each entity has one allow-listed table of FieldSpec entries. Create, PUT,
PATCH and batch updates all go through to_storage() against the same table,
reads go through to_wire().
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional

from exam_admin.constants import DEFAULT_EXAM_TYPE, SUBJECT_COLUMNS

SCALAR = "scalar"
LIST = "list"
OBJECT = "object"


class FieldSpec(NamedTuple):
    wire: str
    column: str
    kind: str = SCALAR
    default: Any = None
    writable: bool = True
    readable: bool = True
    nullable: bool = True

    @property
    def sortable(self) -> bool:
        return self.kind == SCALAR and self.readable


def _read_only(wire: str, column: str) -> FieldSpec:
    return FieldSpec(wire, column, writable=False)


ORGANIZATION_FIELDS: List[FieldSpec] = [
    _read_only("id", "id"),
    FieldSpec("organizationCode", "organization_code", nullable=False),
    FieldSpec("name", "name", nullable=False),
    FieldSpec("description", "description"),
    FieldSpec("contactInfo", "contact_info", OBJECT),
    FieldSpec("region", "region"),
    FieldSpec("establishmentDate", "establishment_date"),
    FieldSpec("logoUrl", "logo_url"),
    FieldSpec("status", "status", default="active", nullable=False),
    _read_only("createdAt", "created_at"),
    _read_only("updatedAt", "updated_at"),
]

EXAM_FIELDS: List[FieldSpec] = [
    _read_only("id", "id"),
    FieldSpec("organizationId", "organization_id", nullable=False),
    FieldSpec("examCode", "exam_code", nullable=False),
    FieldSpec("name", "name", nullable=False),
    FieldSpec("description", "description"),
    FieldSpec("examType", "exam_type", default=DEFAULT_EXAM_TYPE),
    FieldSpec("gradeLevel", "grade_level"),
    FieldSpec("startDate", "start_date", nullable=False),
    FieldSpec("endDate", "end_date", nullable=False),
    FieldSpec("startTime", "start_time"),
    FieldSpec("endTime", "end_time"),
    FieldSpec("difficultyLevel", "difficulty_level"),
    FieldSpec("status", "status", default="draft", nullable=False),
    # the PDF URLs are only exposed through the derived "subjects" list
    *[FieldSpec(f"{prefix}PdfUrl", f"{prefix}_pdf_url", readable=False) for _, prefix in SUBJECT_COLUMNS],
    FieldSpec("additionalSubjects", "additional_subjects", OBJECT),
    FieldSpec("examDuration", "exam_duration", OBJECT),
    FieldSpec("totalScore", "total_score", OBJECT),
    _read_only("createdAt", "created_at"),
    _read_only("updatedAt", "updated_at"),
]

QUESTION_FIELDS: List[FieldSpec] = [
    _read_only("id", "id"),
    FieldSpec("organizationId", "organization_id", nullable=False),
    FieldSpec("examId", "exam_id", nullable=False),
    FieldSpec("questionCode", "question_code"),
    FieldSpec("subject", "subject", nullable=False),
    FieldSpec("questionType", "question_type", nullable=False),
    FieldSpec("difficultyLevel", "difficulty_level"),
    FieldSpec("questionText", "question_text", nullable=False),
    FieldSpec("japaneseText", "japanese_text"),
    FieldSpec("pronunciationGuide", "pronunciation_guide"),
    FieldSpec("audioUrl", "audio_url"),
    FieldSpec("questionImages", "question_images", LIST),
    FieldSpec("questionAttachments", "question_attachments", LIST),
    FieldSpec("options", "options", LIST),
    FieldSpec("correctAnswers", "correct_answers", LIST),
    FieldSpec("subQuestions", "sub_questions", LIST),
    FieldSpec("referenceAnswer", "reference_answer"),
    FieldSpec("answerImages", "answer_images", LIST),
    FieldSpec("knowledgePoints", "knowledge_points", LIST),
    FieldSpec("grammarPoints", "grammar_points", LIST),
    FieldSpec("vocabularyLevel", "vocabulary_level"),
    FieldSpec("kanjiList", "kanji_list", LIST),
    FieldSpec("totalScore", "total_score", default=0),
    FieldSpec("scoringCriteria", "scoring_criteria"),
    FieldSpec("questionOrder", "question_order"),
    FieldSpec("pageNumber", "page_number"),
    FieldSpec("sectionName", "section_name"),
    FieldSpec("averageScore", "average_score"),
    FieldSpec("correctRate", "correct_rate"),
    FieldSpec("discrimination", "discrimination"),
    FieldSpec("tags", "tags", LIST),
    FieldSpec("source", "source"),
    FieldSpec("copyrightInfo", "copyright_info"),
    FieldSpec("similarQuestions", "similar_questions", LIST),
    FieldSpec("status", "status", default="draft", nullable=False),
    _read_only("createdAt", "created_at"),
    _read_only("updatedAt", "updated_at"),
]

# fields a batch update may touch
QUESTION_BATCH_FIELDS: List[FieldSpec] = [
    f for f in QUESTION_FIELDS
    if f.wire in {"status", "difficultyLevel", "subject", "tags", "knowledgePoints"}
]


def _empty(kind: str) -> Any:
    if kind == LIST:
        return []
    if kind == OBJECT:
        return {}
    return None


def _get(row: Any, column: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(column)
    return getattr(row, column, None)


def as_utc(value: Any) -> Any:
    """Naive datetimes (SQLite drops the offset) are stored UTC; tag them as such."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_wire(fields: Iterable[FieldSpec], row: Any, **extra: Any) -> Dict[str, Any]:
    """Storage row (ORM object or mapping) -> wire dict; null arrays/objects become []/{}."""
    out: Dict[str, Any] = {}
    for f in fields:
        if not f.readable:
            continue
        value = _get(row, f.column)
        if value is None and f.kind != SCALAR:
            value = _empty(f.kind)
        out[f.wire] = as_utc(value)
    out.update(extra)
    return out


def to_storage(fields: Iterable[FieldSpec], body: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Wire dict -> column dict.

    partial=False (create): every writable column is filled, absent or empty
    values take the field default.
    partial=True (update): only keys present in body are copied; a null for a
    non-nullable column is ignored instead of being written.
    """
    values: Dict[str, Any] = {}
    for f in fields:
        if not f.writable:
            continue
        if partial:
            if f.wire not in body:
                continue
            value = body[f.wire]
            if value is None and not f.nullable:
                continue
            values[f.column] = value
        else:
            value = body.get(f.wire)
            if value is None or value == "":
                value = f.default if f.default is not None else _empty(f.kind)
            values[f.column] = value
    return values


def apply_values(row: Any, values: Mapping[str, Any]) -> None:
    for column, value in values.items():
        setattr(row, column, value)


def sortable_columns(fields: Iterable[FieldSpec]) -> Dict[str, str]:
    return {f.wire: f.column for f in fields if f.sortable}


def exam_subjects(exam: Any, subject_counts: Optional[Mapping[str, int]] = None) -> List[Dict[str, Any]]:
    """One ExamSubject entry per subject whose PDF URL column is set."""
    subject_counts = subject_counts or {}
    durations = _get(exam, "exam_duration") or {}
    scores = _get(exam, "total_score") or {}
    subjects = []
    for subject, prefix in SUBJECT_COLUMNS:
        pdf_url = _get(exam, f"{prefix}_pdf_url")
        if not pdf_url:
            continue
        subjects.append({
            "subject": subject,
            "pdfUrl": pdf_url,
            "duration": durations.get(subject) or None,
            "totalScore": scores.get(subject) or None,
            "questionCount": subject_counts.get(subject, 0),
        })
    return subjects


def organization_to_wire(org: Any) -> Dict[str, Any]:
    return to_wire(ORGANIZATION_FIELDS, org)


def exam_to_wire(exam: Any, organization_name: Optional[str],
                 subject_counts: Optional[Mapping[str, int]] = None) -> Dict[str, Any]:
    subject_counts = subject_counts or {}
    return to_wire(
        EXAM_FIELDS,
        exam,
        organizationName=organization_name,
        subjects=exam_subjects(exam, subject_counts),
        totalQuestions=sum(subject_counts.values()),
    )


def question_to_wire(question: Any, organization_name: Optional[str] = None,
                     exam_name: Optional[str] = None, exam_code: Optional[str] = None) -> Dict[str, Any]:
    return to_wire(
        QUESTION_FIELDS,
        question,
        organizationName=organization_name,
        examName=exam_name,
        examCode=exam_code,
    )


