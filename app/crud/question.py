from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import QuestionTypeEnum
from app.models.question import Question, QuestionOption


class CRUDQuestion:
    """Read-only view of the question catalog."""

    def get_in_exam(self, db: Session, question_id: int, exam_id: int) -> Optional[Question]:
        return (
            db.query(Question)
            .filter(Question.id == question_id)
            .filter(Question.exam_id == exam_id)
            .first()
        )

    def get_option(self, db: Session, question_id: int, option_index: int) -> Optional[QuestionOption]:
        return (
            db.query(QuestionOption)
            .filter(QuestionOption.question_id == question_id)
            .filter(QuestionOption.option_index == option_index)
            .first()
        )

    def count_by_exam(self, db: Session, exam_id: int) -> int:
        return db.query(Question).filter(Question.exam_id == exam_id).count()

    def count_gradable_by_exam(self, db: Session, exam_id: int) -> int:
        return (
            db.query(Question)
            .filter(Question.exam_id == exam_id)
            .filter(Question.question_type == QuestionTypeEnum.MULTIPLE_CHOICE)
            .count()
        )


question = CRUDQuestion()
