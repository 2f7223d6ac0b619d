import pytest
from sqlalchemy.orm import Session
from app.core.constants import SubmissionTypeEnum
from app.core.exceptions import InvalidAnswerShape, SessionNotActive, SessionNotFound
from app.models.exam_response import ExamResponse
from app.models.question import QuestionOption
from app.schemas.exam_response import AnswerIn
from app.services.exam_response import exam_response_service
from app.services.exam_session import exam_session_service


@pytest.fixture
def live_session(db_session, student, exam):
    return exam_session_service.start_or_resume_session(db_session, student_id=student.id, exam_id=exam.id)


class TestSaveResponse:
    def test_correct_option_is_graded_true(self, db_session: Session, live_session, questions):
        response = exam_response_service.save_response(
            db_session, live_session.id, questions[0].id, response_option_index=1
        )
        assert response.is_correct is True
        assert response.revision_count == 0
        assert response.response_text is None

    def test_wrong_option_is_graded_false(self, db_session: Session, live_session, questions):
        response = exam_response_service.save_response(
            db_session, live_session.id, questions[0].id, response_option_index=3
        )
        assert response.is_correct is False

    def test_repeated_saves_upsert_one_row(self, db_session: Session, live_session, questions):
        for index in (0, 2, 1):
            response = exam_response_service.save_response(
                db_session, live_session.id, questions[0].id, response_option_index=index
            )

        rows = (
            db_session.query(ExamResponse)
            .filter(ExamResponse.session_id == live_session.id)
            .filter(ExamResponse.question_id == questions[0].id)
            .all()
        )
        assert len(rows) == 1
        assert rows[0].id == response.id
        assert rows[0].revision_count == 2
        assert rows[0].response_option_index == 1
        assert rows[0].is_correct is True

    def test_grading_is_not_retroactive(self, db_session: Session, live_session, questions):
        question = questions[0]
        saved = exam_response_service.save_response(db_session, live_session.id, question.id, response_option_index=1)
        assert saved.is_correct is True

        for option in db_session.query(QuestionOption).filter(QuestionOption.question_id == question.id):
            option.is_correct = option.option_index == 0
        db_session.commit()

        stored = exam_response_service.get_session_responses(db_session, live_session.id)
        assert stored[0].id == saved.id
        assert stored[0].is_correct is True

    def test_out_of_range_option_is_stored_ungraded(self, db_session: Session, live_session, questions):
        response = exam_response_service.save_response(
            db_session, live_session.id, questions[0].id, response_option_index=17
        )
        assert response.response_option_index == 17
        assert response.is_correct is None

    def test_negative_option_is_stored_ungraded(self, db_session: Session, live_session, questions):
        response = exam_response_service.save_response(
            db_session, live_session.id, questions[0].id, response_option_index=-1
        )
        assert response.response_option_index == -1
        assert response.is_correct is None

    def test_finalize_between_check_and_write_discards_answer(
        self, db_session: Session, live_session, questions, monkeypatch
    ):
        check = exam_response_service._require_active_session

        def check_then_finalize(db, session_id):
            session = check(db, session_id)
            exam_session_service.finalize(db, session_id, SubmissionTypeEnum.MANUAL)
            return session

        monkeypatch.setattr(exam_response_service, "_require_active_session", check_then_finalize)
        with pytest.raises(SessionNotActive):
            exam_response_service.save_response(
                db_session, live_session.id, questions[0].id, response_option_index=1
            )

        session = exam_session_service.get_session(db_session, live_session.id)
        assert session.completion_percentage == 0.0
        assert session.score == 0.0
        assert db_session.query(ExamResponse).filter(ExamResponse.session_id == live_session.id).count() == 0

    def test_free_text_answer_is_not_graded(self, db_session: Session, student, exam_factory):
        exam = exam_factory(mc_questions=1, text_questions=1)
        session = exam_session_service.start_or_resume_session(db_session, student_id=student.id, exam_id=exam.id)
        text_question = exam.questions[1]

        response = exam_response_service.save_response(
            db_session, session.id, text_question.id, response_text="Because entropy", response_option_index=1
        )
        assert response.response_text == "Because entropy"
        assert response.response_option_index is None
        assert response.is_correct is None

    def test_question_from_another_exam_is_rejected(self, db_session: Session, live_session, exam_factory):
        other = exam_factory()
        with pytest.raises(InvalidAnswerShape):
            exam_response_service.save_response(
                db_session, live_session.id, other.questions[0].id, response_option_index=1
            )

    def test_completion_tracks_distinct_questions(self, db_session: Session, live_session, questions):
        exam_response_service.save_response(db_session, live_session.id, questions[0].id, response_option_index=1)
        exam_response_service.save_response(db_session, live_session.id, questions[0].id, response_option_index=2)
        exam_response_service.save_response(db_session, live_session.id, questions[1].id, response_option_index=2)

        session = exam_session_service.get_session(db_session, live_session.id)
        assert session.completion_percentage == 66.67

    def test_finalized_session_rejects_answers(self, db_session: Session, live_session, questions):
        exam_session_service.finalize(db_session, live_session.id, SubmissionTypeEnum.MANUAL)
        with pytest.raises(SessionNotActive):
            exam_response_service.save_response(db_session, live_session.id, questions[0].id, response_option_index=1)

    def test_unknown_session(self, db_session: Session, questions):
        with pytest.raises(SessionNotFound):
            exam_response_service.save_response(db_session, 31337, questions[0].id, response_option_index=1)


class TestBulkSave:
    def test_bulk_save_counts_failures_without_losing_good_answers(self, db_session: Session, live_session, questions):
        answers = [
            AnswerIn(question_id=questions[0].id, response_option_index=1),
            AnswerIn(question_id=99999, response_option_index=0),
            AnswerIn(question_id=questions[2].id, response_option_index=0),
        ]
        result = exam_response_service.bulk_save_responses(db_session, live_session.id, answers)
        assert result.saved_count == 2
        assert result.failed_count == 1

        stored = exam_response_service.get_session_responses(db_session, live_session.id)
        assert [r.question_id for r in stored] == [questions[0].id, questions[2].id]

    def test_bulk_save_upserts(self, db_session: Session, live_session, questions):
        exam_response_service.save_response(db_session, live_session.id, questions[0].id, response_option_index=0)
        exam_response_service.bulk_save_responses(
            db_session, live_session.id, [AnswerIn(question_id=questions[0].id, response_option_index=1)]
        )
        stored = exam_response_service.get_session_responses(db_session, live_session.id)
        assert len(stored) == 1
        assert stored[0].revision_count == 1
        assert stored[0].is_correct is True

    def test_bulk_save_on_finalized_session(self, db_session: Session, live_session, questions):
        exam_session_service.finalize(db_session, live_session.id, SubmissionTypeEnum.AUTO_TIME_EXPIRED)
        with pytest.raises(SessionNotActive):
            exam_response_service.bulk_save_responses(
                db_session, live_session.id, [AnswerIn(question_id=questions[0].id, response_option_index=1)]
            )

    def test_bulk_save_raced_by_finalize(self, db_session: Session, live_session, questions, monkeypatch):
        check = exam_response_service._require_active_session

        def check_then_finalize(db, session_id):
            session = check(db, session_id)
            exam_session_service.finalize(db, session_id, SubmissionTypeEnum.AUTO_TIME_EXPIRED)
            return session

        monkeypatch.setattr(exam_response_service, "_require_active_session", check_then_finalize)
        answers = [AnswerIn(question_id=q.id, response_option_index=1) for q in questions]
        with pytest.raises(SessionNotActive):
            exam_response_service.bulk_save_responses(db_session, live_session.id, answers)

        session = exam_session_service.get_session(db_session, live_session.id)
        assert session.completion_percentage == 0.0
        assert db_session.query(ExamResponse).filter(ExamResponse.session_id == live_session.id).count() == 0
