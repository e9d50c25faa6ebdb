from __future__ import annotations

from arbor.interviewer.models import Answer, AnswerValue, Question, QuestionType


class AutoApproveInterviewer:
    """Answers yes to confirmations and picks the first option of a choice."""

    def ask(self, question: Question) -> Answer:
        if question.type == QuestionType.CONFIRMATION:
            return Answer(value=AnswerValue.YES)
        if question.type == QuestionType.MULTIPLE_CHOICE and question.options:
            return Answer(
                value=question.options[0].key,
                selected_option=question.options[0],
            )
        if question.default is not None:
            return question.default
        return Answer(value=AnswerValue.SKIPPED)
