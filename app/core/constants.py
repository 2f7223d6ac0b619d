from enum import Enum


class SessionStatusEnum(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    TERMINATED = "terminated"
    EXPIRED = "expired"


class SubmissionTypeEnum(str, Enum):
    MANUAL = "manual"
    AUTO_TIME_EXPIRED = "auto_time_expired"
    AUTO_VIOLATIONS = "auto_violations"


# Terminal status implied by each finalize cause
TERMINAL_STATUS_BY_CAUSE = {
    SubmissionTypeEnum.MANUAL: SessionStatusEnum.COMPLETED,
    SubmissionTypeEnum.AUTO_TIME_EXPIRED: SessionStatusEnum.EXPIRED,
    SubmissionTypeEnum.AUTO_VIOLATIONS: SessionStatusEnum.TERMINATED,
}

class QuestionTypeEnum(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    FREE_TEXT = "free_text"

class ViolationTypeEnum(str, Enum):
    EXAM_STARTED = "exam_started"
    EXAM_RESUMED = "exam_resumed"
    TAB_SWITCH = "tab_switch"
    WINDOW_BLUR = "window_blur"
    RIGHT_CLICK = "right_click"
    DEVELOPER_TOOLS = "developer_tools"
    PASTE_DETECTED = "paste_detected"
    COPY_DETECTED = "copy_detected"
    KEYBOARD_SHORTCUT = "keyboard_shortcut"
    VIEW_SOURCE = "view_source"

class ViolationSeverityEnum(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class ProctoringStatusEnum(str, Enum):
    CLEAN = "clean"
    MINOR_ISSUES = "minor_issues"
    CONCERNING = "concerning"
    FLAGGED_FOR_REVIEW = "flagged_for_review"
