# Import every model so Base.metadata is complete for create_all and alembic
from app.core.database import Base
from app.models.student import Student
from app.models.exam import Exam
from app.models.question import Question, QuestionOption
from app.models.exam_session import ExamSession
from app.models.exam_response import ExamResponse
from app.models.violation import Violation
from app.models.session_snapshot import SessionSnapshot
from app.models.proctoring_report import ProctoringReport
