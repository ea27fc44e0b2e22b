from __future__ import annotations

from typing import Any, List, Mapping

from exam_admin.constants import (
    CHOICE_QUESTION_TYPES,
    EXAM_STATUSES,
    JAPANESE,
    ORGANIZATION_STATUSES,
    QUESTION_STATUSES,
    VOCABULARY_LEVELS,
)
from exam_admin.utils.responses import ValidationError


def _too_short(value: Any, min_len: int) -> bool:
    return not value or len(str(value)) < min_len


def _raise_if_any(errors: List[str]) -> None:
    if errors:
        raise ValidationError("Validation failed", errors=errors)


def validate_organization(data: Mapping[str, Any]) -> None:
    errors: List[str] = []
    if _too_short(data.get("organizationCode"), 3):
        errors.append("organizationCode is required and must be at least 3 characters")
    if _too_short(data.get("name"), 2):
        errors.append("name is required and must be at least 2 characters")
    contact_info = data.get("contactInfo")
    if contact_info is not None and not isinstance(contact_info, Mapping):
        errors.append("contactInfo must be an object")
    status = data.get("status")
    if status and status not in ORGANIZATION_STATUSES:
        errors.append(f"status must be one of {sorted(ORGANIZATION_STATUSES)}")
    _raise_if_any(errors)


def validate_exam(data: Mapping[str, Any]) -> None:
    errors: List[str] = []
    if not data.get("organizationId"):
        errors.append("organizationId is required")
    if _too_short(data.get("examCode"), 3):
        errors.append("examCode is required and must be at least 3 characters")
    if _too_short(data.get("name"), 2):
        errors.append("name is required and must be at least 2 characters")
    start, end = data.get("startDate"), data.get("endDate")
    if not start:
        errors.append("startDate is required")
    if not end:
        errors.append("endDate is required")
    if start and end and start > end:
        errors.append("startDate must not be later than endDate")
    status = data.get("status")
    if status and status not in EXAM_STATUSES:
        errors.append(f"status must be one of {sorted(EXAM_STATUSES)}")
    _raise_if_any(errors)


def validate_question(data: Mapping[str, Any]) -> None:
    errors: List[str] = []
    for field in ("organizationId", "examId", "subject", "questionType"):
        if not data.get(field):
            errors.append(f"{field} is required")
    if _too_short(data.get("questionText"), 5):
        errors.append("questionText is required and must be at least 5 characters")

    total_score = data.get("totalScore")
    if total_score and not 0 <= total_score <= 1000:
        errors.append("totalScore must be between 0 and 1000")

    if data.get("questionType") in CHOICE_QUESTION_TYPES:
        options = data.get("options")
        if not isinstance(options, list) or len(options) < 2:
            errors.append("choice questions need at least 2 options")

    if data.get("subject") == JAPANESE:
        level = data.get("vocabularyLevel")
        if level and level not in VOCABULARY_LEVELS:
            errors.append("vocabularyLevel must be N1-N5 or 其他")

    status = data.get("status")
    if status and status not in QUESTION_STATUSES:
        errors.append(f"status must be one of {sorted(QUESTION_STATUSES)}")
    _raise_if_any(errors)


def require_search_term(q: str | None) -> str:
    term = (q or "").strip()
    if not term:
        raise ValidationError("Search keyword must not be empty", errors=["q is required"])
    return term
