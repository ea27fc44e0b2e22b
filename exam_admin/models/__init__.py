from exam_admin.models.organization import Organization
from exam_admin.models.exam import Exam
from exam_admin.models.question import Question

__all__ = ["Organization", "Exam", "Question"]
