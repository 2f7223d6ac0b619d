from datetime import datetime
from typing import List, Optional
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.exam_response import ExamResponse
from app.models.question import Question
from app.schemas.exam_response import ResponseSave

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

class CRUDExamResponse(CRUDBase[ExamResponse, ResponseSave, ResponseSave]):

    def get_by_session_and_question(self, db: Session, session_id: int,
                                    question_id: int) -> Optional[ExamResponse]:
        return (
            db.query(ExamResponse)
            .populate_existing()
            .filter(ExamResponse.session_id == session_id)
            .filter(ExamResponse.question_id == question_id)
            .first()
        )

    def get_all_by_session(self, db: Session, session_id: int) -> List[ExamResponse]:
        return (
            db.query(ExamResponse)
            .join(Question, ExamResponse.question_id == Question.id)
            .filter(ExamResponse.session_id == session_id)
            .order_by(Question.question_number, ExamResponse.question_id)
            .all()
        )

    def count_correct(self, db: Session, session_id: int) -> int:
        return (
            db.query(ExamResponse)
            .filter(ExamResponse.session_id == session_id)
            .filter(ExamResponse.is_correct == True)
            .count()
        )

    def upsert(
        self,
        db: Session,
        *,
        session_id: int,
        question_id: int,
        response_text: Optional[str],
        response_option_index: Optional[int],
        is_correct: Optional[bool],
        answered_at: datetime,
    ) -> ExamResponse:
        """One row per (session, question). Overwrites bump revision_count."""
        insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
        if insert is None:
            return self._upsert_portable(
                db,
                session_id=session_id,
                question_id=question_id,
                response_text=response_text,
                response_option_index=response_option_index,
                is_correct=is_correct,
                answered_at=answered_at,
            )

        stmt = insert(ExamResponse).values(
            session_id=session_id,
            question_id=question_id,
            response_text=response_text,
            response_option_index=response_option_index,
            is_correct=is_correct,
            answered_at=answered_at,
            revision_count=0,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ExamResponse.session_id, ExamResponse.question_id],
            set_={
                "response_text": stmt.excluded.response_text,
                "response_option_index": stmt.excluded.response_option_index,
                "is_correct": stmt.excluded.is_correct,
                "answered_at": stmt.excluded.answered_at,
                "revision_count": ExamResponse.revision_count + 1,
                "updated_at": answered_at,
            },
        )
        db.execute(stmt)
        return self.get_by_session_and_question(db, session_id=session_id, question_id=question_id)

    def _upsert_portable(self, db: Session, *, session_id: int, question_id: int, **fields) -> ExamResponse:
        existing = self.get_by_session_and_question(db, session_id=session_id, question_id=question_id)
        if existing is None:
            try:
                with db.begin_nested():
                    return self.create(
                        db,
                        obj_in={"session_id": session_id, "question_id": question_id,
                                "revision_count": 0, **fields},
                    )
            except IntegrityError:
                existing = self.get_by_session_and_question(db, session_id=session_id, question_id=question_id)

        db.query(ExamResponse).filter(ExamResponse.id == existing.id).update(
            {**fields, "revision_count": ExamResponse.revision_count + 1},
            synchronize_session=False,
        )
        return self.get_by_session_and_question(db, session_id=session_id, question_id=question_id)


exam_response = CRUDExamResponse(ExamResponse)
