from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.proctoring_report import ProctoringReport
from app.schemas.proctoring_report import ProctoringReport as ProctoringReportSchema

class CRUDProctoringReport(CRUDBase[ProctoringReport, ProctoringReportSchema, ProctoringReportSchema]):

    def get_by_session(self, db: Session, session_id: int) -> Optional[ProctoringReport]:
        return db.query(ProctoringReport).filter(ProctoringReport.session_id == session_id).first()


proctoring_report = CRUDProctoringReport(ProctoringReport)
