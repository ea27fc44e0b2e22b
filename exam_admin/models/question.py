from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text

from exam_admin.database import Base, JSONType
from exam_admin.models.organization import utcnow


class Question(Base):
    __tablename__ = "questions"

    id = Column(String, primary_key=True, index=True)
    organization_id = Column(
        String, ForeignKey("organizations.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    exam_id = Column(String, ForeignKey("exams.id", ondelete="RESTRICT"), nullable=False, index=True)

    question_code = Column(String, unique=True, index=True, nullable=True)
    subject = Column(String, nullable=False, index=True)
    question_type = Column(String, nullable=False)
    difficulty_level = Column(String, nullable=True)
    question_text = Column(Text, nullable=False)

    # Japanese-specific
    japanese_text = Column(Text, nullable=True)
    pronunciation_guide = Column(Text, nullable=True)
    audio_url = Column(String, nullable=True)
    grammar_points = Column(JSONType, nullable=True)
    vocabulary_level = Column(String, nullable=True)  # N1..N5 | 其他
    kanji_list = Column(JSONType, nullable=True)

    question_images = Column(JSONType, nullable=True)
    question_attachments = Column(JSONType, nullable=True)
    options = Column(JSONType, nullable=True)          # [{label, content, isCorrect, knowledgePoints}]
    correct_answers = Column(JSONType, nullable=True)
    sub_questions = Column(JSONType, nullable=True)
    reference_answer = Column(Text, nullable=True)
    answer_images = Column(JSONType, nullable=True)
    knowledge_points = Column(JSONType, nullable=True)
    tags = Column(JSONType, nullable=True)

    total_score = Column(Float, nullable=True)
    scoring_criteria = Column(Text, nullable=True)
    average_score = Column(Float, nullable=True)
    correct_rate = Column(Float, nullable=True)
    discrimination = Column(Float, nullable=True)

    question_order = Column(Integer, nullable=True)
    page_number = Column(Integer, nullable=True)
    section_name = Column(String, nullable=True)

    source = Column(String, nullable=True)
    copyright_info = Column(String, nullable=True)
    similar_questions = Column(JSONType, nullable=True)

    status = Column(String, nullable=False, default="draft")  # draft | published | archived | reviewed

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
