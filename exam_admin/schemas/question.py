from typing import Any, Dict, List, Optional

from exam_admin.schemas.base import CamelModel


class QuestionIn(CamelModel):
    organization_id: Optional[str] = None
    exam_id: Optional[str] = None
    question_code: Optional[str] = None
    subject: Optional[str] = None
    question_type: Optional[str] = None
    difficulty_level: Optional[str] = None
    question_text: Optional[str] = None

    japanese_text: Optional[str] = None
    pronunciation_guide: Optional[str] = None
    audio_url: Optional[str] = None
    grammar_points: Optional[List[str]] = None
    vocabulary_level: Optional[str] = None
    kanji_list: Optional[List[str]] = None

    question_images: Optional[List[str]] = None
    question_attachments: Optional[List[str]] = None
    # stored verbatim: [{label, content, isCorrect, knowledgePoints}]
    options: Optional[List[Dict[str, Any]]] = None
    correct_answers: Optional[List[str]] = None
    sub_questions: Optional[List[Dict[str, Any]]] = None
    reference_answer: Optional[str] = None
    answer_images: Optional[List[str]] = None
    knowledge_points: Optional[List[str]] = None
    tags: Optional[List[str]] = None

    total_score: Optional[float] = None
    scoring_criteria: Optional[str] = None
    average_score: Optional[float] = None
    correct_rate: Optional[float] = None
    discrimination: Optional[float] = None
    question_order: Optional[int] = None
    page_number: Optional[int] = None
    section_name: Optional[str] = None

    source: Optional[str] = None
    copyright_info: Optional[str] = None
    similar_questions: Optional[List[str]] = None
    status: Optional[str] = None


class QuestionBatchUpdate(CamelModel):
    """The fields a batch update may set, typed as in QuestionIn; anything else is dropped."""
    status: Optional[str] = None
    difficulty_level: Optional[str] = None
    subject: Optional[str] = None
    tags: Optional[List[str]] = None
    knowledge_points: Optional[List[str]] = None


class BatchRequest(CamelModel):
    action: Optional[str] = None
    question_ids: Optional[List[str]] = None
    update_data: Optional[QuestionBatchUpdate] = None
