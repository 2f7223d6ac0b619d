import logging
from datetime import datetime
from typing import Optional, Union
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import SubmissionTypeEnum, TERMINAL_STATUS_BY_CAUSE
from app.core.exceptions import ExamNotFound, PolicyMissing, SessionAccessDenied, SessionNotFound
from app.crud.exam import exam as crud_exam
from app.crud.exam_response import exam_response as crud_exam_response
from app.crud.exam_session import exam_session as crud_exam_session
from app.crud.question import question as crud_question
from app.models.exam_session import ExamSession
from app.schemas.exam import ExamPolicy
from app.schemas.exam_session import ExamSession as ExamSessionSchema, FinalizeResult
from app.services.proctoring_report import proctoring_report_service
from app.utils.clock import as_utc, compute_deadline, elapsed, utcnow

logger = logging.getLogger(__name__)


class ExamSessionService:
    """Owns the session state machine. This is the only place a status is written."""

    def get_exam_policy(self, db: Session, exam_id: int) -> ExamPolicy:
        exam = crud_exam.get_active(db, id=exam_id)
        if not exam:
            raise ExamNotFound(exam_id)

        if exam.duration_minutes is None or exam.duration_minutes <= 0:
            raise PolicyMissing(
                "Exam has no duration configured",
                details={"exam_id": exam_id, "field": "duration_minutes"},
            )
        if exam.max_violations is None:
            raise PolicyMissing(
                "Exam has no violation threshold configured",
                details={"exam_id": exam_id, "field": "max_violations"},
            )

        min_guarantee = exam.min_time_guarantee_minutes
        if min_guarantee is None:
            min_guarantee = settings.DEFAULT_MIN_TIME_GUARANTEE_MINUTES

        return ExamPolicy(
            exam_id=exam.id,
            duration_minutes=exam.duration_minutes,
            max_violations=exam.max_violations,
            min_time_guarantee_minutes=min_guarantee,
        )

    def get_session(self, db: Session, session_id: int) -> ExamSession:
        session = crud_exam_session.get_fresh(db, id=session_id)
        if not session:
            raise SessionNotFound(session_id)
        return session

    def get_owned_session(self, db: Session, session_id: int, student_id: int) -> ExamSession:
        session = self.get_session(db, session_id)
        if session.student_id != student_id:
            raise SessionAccessDenied(session_id)
        return session

    def get_owned_session_by_code(self, db: Session, session_code: str, student_id: int) -> ExamSession:
        """Look a session up by the code shown to the student and to proctors."""
        session = crud_exam_session.get_by_code(db, session_code=session_code.strip().upper())
        if not session:
            raise SessionNotFound(session_code)
        if session.student_id != student_id:
            raise SessionAccessDenied(session.id)
        return session

    def check_existing_session(self, db: Session, student_id: int, exam_id: int) -> Optional[ExamSession]:
        return crud_exam_session.get_live(db, student_id=student_id, exam_id=exam_id)

    def start_or_resume_session(
        self,
        db: Session,
        student_id: int,
        exam_id: int,
        browser_info: Optional[str] = None,
        ip_address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ExamSession:
        existing = crud_exam_session.get_live(db, student_id=student_id, exam_id=exam_id)
        if existing:
            logger.info(f"Resuming session {existing.id} for student {student_id}, exam {exam_id}")
            return existing

        policy = self.get_exam_policy(db, exam_id)
        now = as_utc(now or utcnow())

        try:
            with db.begin_nested():
                session = crud_exam_session.create(db, obj_in={
                    "student_id": student_id,
                    "exam_id": exam_id,
                    "start_time": now,
                    "scheduled_end_time": compute_deadline(now, policy.duration_minutes),
                    "max_violations": policy.max_violations,
                    "min_time_guarantee_minutes": policy.min_time_guarantee_minutes,
                    "browser_info": browser_info,
                    "ip_address": ip_address,
                })
        except IntegrityError:
            # A concurrent start won the partial unique index; hand back its session
            session = crud_exam_session.get_live(db, student_id=student_id, exam_id=exam_id)
            if session is None:
                raise
            logger.info(f"Concurrent start for student {student_id}, exam {exam_id} resolved to session {session.id}")
            return session

        db.commit()
        db.refresh(session)
        logger.info(
            f"Session {session.id} started for student {student_id}, exam {exam_id}; "
            f"deadline {session.scheduled_end_time.isoformat()}"
        )
        return session

    def _compute_final_figures(self, db: Session, session: ExamSession):
        answered = len(crud_exam_response.get_all_by_session(db, session_id=session.id))
        total_questions = crud_question.count_by_exam(db, exam_id=session.exam_id)
        completion = round(answered / total_questions * 100, 2) if total_questions else 0.0

        gradable = crud_question.count_gradable_by_exam(db, exam_id=session.exam_id)
        correct = crud_exam_response.count_correct(db, session_id=session.id)
        score = round(correct / gradable * 100, 2) if gradable else 0.0
        return score, completion

    def finalize(
        self,
        db: Session,
        session_id: int,
        cause: Union[SubmissionTypeEnum, str],
        now: Optional[datetime] = None,
    ) -> FinalizeResult:
        cause = SubmissionTypeEnum(cause)
        now = as_utc(now or utcnow())

        won = crud_exam_session.claim_terminal(
            db,
            id=session_id,
            status=TERMINAL_STATUS_BY_CAUSE[cause],
            submission_type=cause,
            end_time=now,
        )

        if not won:
            # Release whatever we hold before looking at the winner's committed row
            db.rollback()
            session = self.get_session(db, session_id)
            logger.info(
                f"Finalize({cause.value}) on session {session_id} lost; "
                f"already {session.status.value} via {session.submission_type.value if session.submission_type else None}"
            )
            return FinalizeResult(
                session=ExamSessionSchema.model_validate(session),
                computed_score=session.score,
                already_finalized=True,
            )

        session = self.get_session(db, session_id)
        score, completion = self._compute_final_figures(db, session)
        duration = int(elapsed(now, session.start_time).total_seconds())
        crud_exam_session.store_final_figures(
            db,
            id=session_id,
            score=score,
            completion_percentage=completion,
            actual_duration_seconds=duration,
        )
        session = self.get_session(db, session_id)
        proctoring_report_service.create_report(db, session)
        db.commit()

        session = self.get_session(db, session_id)
        logger.info(
            f"Session {session_id} finalized as {session.status.value} ({cause.value}); "
            f"score={score} completion={completion}% violations={session.total_violations}"
        )
        return FinalizeResult(
            session=ExamSessionSchema.model_validate(session),
            computed_score=score,
            already_finalized=False,
        )

    def expire_overdue_sessions(self, db: Session, now: Optional[datetime] = None) -> int:
        now = as_utc(now or utcnow())
        overdue = crud_exam_session.get_overdue_ids(db, now=now, grace_seconds=settings.EXPIRY_GRACE_SECONDS)
        db.rollback()

        expired = 0
        for session_id in overdue:
            result = self.finalize(db, session_id, SubmissionTypeEnum.AUTO_TIME_EXPIRED, now=now)
            if not result.already_finalized:
                expired += 1
        if overdue:
            logger.info(f"Expiry sweep: {len(overdue)} overdue, {expired} expired by the sweep")
        return expired


exam_session_service = ExamSessionService()
