from datetime import date, time
from typing import Any, Dict, Optional

from exam_admin.schemas.base import CamelModel


class ExamIn(CamelModel):
    organization_id: Optional[str] = None
    exam_code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    exam_type: Optional[str] = None
    grade_level: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    difficulty_level: Optional[str] = None
    status: Optional[str] = None

    chinese_pdf_url: Optional[str] = None
    math_pdf_url: Optional[str] = None
    english_pdf_url: Optional[str] = None
    physics_pdf_url: Optional[str] = None
    chemistry_pdf_url: Optional[str] = None
    biology_pdf_url: Optional[str] = None
    politics_pdf_url: Optional[str] = None
    history_pdf_url: Optional[str] = None
    geography_pdf_url: Optional[str] = None
    technology_pdf_url: Optional[str] = None
    japanese_pdf_url: Optional[str] = None

    # keyed by subject name
    additional_subjects: Optional[Dict[str, Any]] = None
    exam_duration: Optional[Dict[str, Any]] = None
    total_score: Optional[Dict[str, Any]] = None
