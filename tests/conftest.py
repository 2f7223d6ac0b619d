import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("TESTING", "true")

import asyncio
import uuid
import pytest
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient
from app.core.cache import cache
from app.core.config import settings
from app.core.constants import QuestionTypeEnum
from app.core.database import Base, build_engine, get_db
from app.models.exam import Exam
from app.models.question import Question, QuestionOption
from app.models.student import Student
from app.utils import deps as deps_utils
from app.utils.throttle import violation_throttle
import main


@pytest.fixture(scope="function")
def database_engine(tmp_path):
    if settings.TEST_DATABASE_URL:
        engine = build_engine(settings.TEST_DATABASE_URL)
    else:
        engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    if settings.TEST_DATABASE_URL:
        Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def session_factory(database_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=database_engine)

@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(autouse=True)
def _clear_cache():
    asyncio.run(cache.clear())
    yield
    asyncio.run(cache.clear())

@pytest.fixture(scope="function")
def client(db_session):
    window = violation_throttle.window_seconds
    violation_throttle.window_seconds = 0
    main.app.dependency_overrides[get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()
    violation_throttle.window_seconds = window

@pytest.fixture
def student_factory(db_session):
    def _student_factory(full_name="Test Student"):
        student = Student(email=f"student-{uuid.uuid4()}@test.com", full_name=full_name)
        db_session.add(student)
        db_session.commit()
        db_session.refresh(student)
        return student
    return _student_factory

@pytest.fixture
def student(student_factory):
    return student_factory()

@pytest.fixture
def exam_factory(db_session):
    """Builds an exam with ``mc_questions`` four-option questions (option 1 correct)
    followed by ``text_questions`` free-text questions."""
    def _exam_factory(
        duration_minutes=60,
        max_violations=5,
        min_time_guarantee_minutes=5,
        mc_questions=3,
        text_questions=0,
        is_active=True,
    ):
        exam = Exam(
            title=f"Exam {uuid.uuid4().hex[:8]}",
            duration_minutes=duration_minutes,
            max_violations=max_violations,
            min_time_guarantee_minutes=min_time_guarantee_minutes,
            is_active=is_active,
        )
        db_session.add(exam)
        db_session.flush()

        number = 1
        for _ in range(mc_questions):
            question = Question(
                exam_id=exam.id,
                question_number=number,
                question_text=f"Question {number}",
                question_type=QuestionTypeEnum.MULTIPLE_CHOICE,
            )
            question.options = [
                QuestionOption(option_index=i, option_text=f"Option {i}", is_correct=(i == 1))
                for i in range(4)
            ]
            db_session.add(question)
            number += 1
        for _ in range(text_questions):
            db_session.add(Question(
                exam_id=exam.id,
                question_number=number,
                question_text=f"Question {number}",
                question_type=QuestionTypeEnum.FREE_TEXT,
            ))
            number += 1

        db_session.commit()
        db_session.refresh(exam)
        return exam
    return _exam_factory

@pytest.fixture
def exam(exam_factory):
    return exam_factory()

@pytest.fixture
def questions(exam):
    return list(exam.questions)

@pytest.fixture
def auth_headers(student):
    return {"X-Student-Id": str(student.id)}
