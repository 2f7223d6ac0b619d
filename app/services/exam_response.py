import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import QuestionTypeEnum
from app.core.exceptions import InvalidAnswerShape, ProctorError, SessionNotActive
from app.crud.exam_response import exam_response as crud_exam_response
from app.crud.exam_session import exam_session as crud_exam_session
from app.crud.question import question as crud_question
from app.models.exam_response import ExamResponse
from app.models.exam_session import ExamSession
from app.models.question import Question
from app.schemas.exam_response import AnswerIn, BulkSaveResult
from app.services.exam_session import exam_session_service
from app.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


class ExamResponseService:

    def _require_active_session(self, db: Session, session_id: int) -> ExamSession:
        session = exam_session_service.get_session(db, session_id)
        if session.is_terminal:
            raise SessionNotActive(
                "Cannot save answers for a session that is no longer in progress.",
                details={"session_id": session_id, "status": session.status.value},
            )
        return session

    def _grade(self, db: Session, question: Question, option_index: Optional[int]) -> Optional[bool]:
        """Point-in-time judgment against the answer key as it stands right now."""
        if option_index is None:
            return None
        option = crud_question.get_option(db, question_id=question.id, option_index=option_index)
        if option is None:
            logger.warning(
                f"Option {option_index} does not exist on question {question.id}; storing answer ungraded"
            )
            return None
        return bool(option.is_correct)

    def _apply(self, db: Session, session: ExamSession, answer: AnswerIn, now: datetime) -> ExamResponse:
        question = crud_question.get_in_exam(db, question_id=answer.question_id, exam_id=session.exam_id)
        if not question:
            raise InvalidAnswerShape(
                "Question does not belong to this session's exam.",
                details={"session_id": session.id, "question_id": answer.question_id},
            )

        if question.question_type == QuestionTypeEnum.MULTIPLE_CHOICE:
            option_index = answer.response_option_index
            response_text = answer.response_text if option_index is None else None
        else:
            option_index = None
            response_text = answer.response_text

        response = crud_exam_response.upsert(
            db,
            session_id=session.id,
            question_id=question.id,
            response_text=response_text,
            response_option_index=option_index,
            is_correct=self._grade(db, question, option_index),
            answered_at=now,
        )
        if not crud_exam_session.refresh_completion(db, id=session.id):
            raise SessionNotActive(
                "Session was finalized while the answer was being saved.",
                details={"session_id": session.id, "question_id": question.id},
            )
        return response

    def save_response(
        self,
        db: Session,
        session_id: int,
        question_id: int,
        response_text: Optional[str] = None,
        response_option_index: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ExamResponse:
        session = self._require_active_session(db, session_id)
        answer = AnswerIn(
            question_id=question_id,
            response_text=response_text,
            response_option_index=response_option_index,
        )
        try:
            response = self._apply(db, session, answer, as_utc(now or utcnow()))
        except ProctorError:
            db.rollback()
            raise
        db.commit()
        db.refresh(response)
        return response

    def bulk_save_responses(
        self,
        db: Session,
        session_id: int,
        answers: List[AnswerIn],
        now: Optional[datetime] = None,
    ) -> BulkSaveResult:
        """Each answer is upserted on its own; one bad item never costs the others."""
        session = self._require_active_session(db, session_id)
        now = as_utc(now or utcnow())

        saved = 0
        failed = 0
        for answer in answers:
            try:
                with db.begin_nested():
                    self._apply(db, session, answer, now)
                saved += 1
            except SessionNotActive:
                db.rollback()
                raise
            except (ProctorError, SQLAlchemyError) as exc:
                failed += 1
                logger.warning(
                    f"Bulk save on session {session_id}: question {answer.question_id} skipped: {exc}"
                )
        db.commit()

        logger.info(f"Bulk save on session {session_id}: {saved} saved, {failed} failed")
        return BulkSaveResult(saved_count=saved, failed_count=failed)

    def get_session_responses(self, db: Session, session_id: int) -> List[ExamResponse]:
        exam_session_service.get_session(db, session_id)
        return crud_exam_response.get_all_by_session(db, session_id=session_id)


exam_response_service = ExamResponseService()
