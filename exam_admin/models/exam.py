from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, Time

from exam_admin.database import Base, JSONType
from exam_admin.models.organization import utcnow


class Exam(Base):
    __tablename__ = "exams"

    id = Column(String, primary_key=True, index=True)
    organization_id = Column(
        String, ForeignKey("organizations.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    exam_code = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    exam_type = Column(String, nullable=True)
    grade_level = Column(String, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    difficulty_level = Column(String, nullable=True)
    status = Column(String, nullable=False, default="draft")  # draft | published | archived | cancelled

    # one paper per subject; a subject appears in Exam.subjects only when its URL is set
    chinese_pdf_url = Column(String, nullable=True)
    math_pdf_url = Column(String, nullable=True)
    english_pdf_url = Column(String, nullable=True)
    physics_pdf_url = Column(String, nullable=True)
    chemistry_pdf_url = Column(String, nullable=True)
    biology_pdf_url = Column(String, nullable=True)
    politics_pdf_url = Column(String, nullable=True)
    history_pdf_url = Column(String, nullable=True)
    geography_pdf_url = Column(String, nullable=True)
    technology_pdf_url = Column(String, nullable=True)
    japanese_pdf_url = Column(String, nullable=True)

    # keyed by subject name
    additional_subjects = Column(JSONType, nullable=True)
    exam_duration = Column(JSONType, nullable=True)
    total_score = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
