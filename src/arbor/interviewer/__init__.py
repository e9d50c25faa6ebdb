from arbor.interviewer.auto_approve import AutoApproveInterviewer
from arbor.interviewer.base import Interviewer
from arbor.interviewer.console import ConsoleInterviewer
from arbor.interviewer.models import Answer, AnswerValue, Option, Question, QuestionType

__all__ = [
    "Answer",
    "AnswerValue",
    "AutoApproveInterviewer",
    "ConsoleInterviewer",
    "Interviewer",
    "Option",
    "Question",
    "QuestionType",
]
