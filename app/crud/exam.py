from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.exam import Exam
from app.schemas.exam import ExamSummary

class CRUDExam(CRUDBase[Exam, ExamSummary, ExamSummary]):

    def get_active(self, db: Session, id: int) -> Optional[Exam]:
        return (
            db.query(Exam)
            .filter(Exam.id == id)
            .filter(Exam.is_active == True)
            .first()
        )


exam = CRUDExam(Exam)
