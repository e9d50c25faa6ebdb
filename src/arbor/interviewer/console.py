from __future__ import annotations

from prompt_toolkit import prompt as pt_prompt

from arbor.interviewer.models import Answer, AnswerValue, Option, Question, QuestionType


class ConsoleInterviewer:
    """Terminal prompter. EOF or Ctrl-C falls back to the question's default."""

    def ask(self, question: Question) -> Answer:
        if question.type == QuestionType.MULTIPLE_CHOICE:
            return self._ask_multiple_choice(question)
        return self._ask_binary(question)

    def _ask_multiple_choice(self, question: Question) -> Answer:
        print(f"[?] {question.text}", flush=True)
        for option in question.options:
            print(f"  [{option.key}] {option.label}", flush=True)

        response = self._read_input("Select: ")
        if response is None:
            return self._handle_no_input(question)

        matched = self._find_option(response.strip().upper(), question.options)
        if matched is not None:
            return Answer(value=matched.key, selected_option=matched)

        # Fallback to first option
        if question.options:
            first = question.options[0]
            return Answer(value=first.key, selected_option=first)
        return Answer(value=AnswerValue.SKIPPED)

    def _ask_binary(self, question: Question) -> Answer:
        print(f"[?] {question.text}", flush=True)
        response = self._read_input("[y/N]: ")
        if response is None:
            return self._handle_no_input(question)

        if response.strip().upper() in ("Y", "YES"):
            return Answer(value=AnswerValue.YES)
        return Answer(value=AnswerValue.NO)

    def _find_option(self, response: str, options: list[Option]) -> Option | None:
        for option in options:
            if response == option.key.upper():
                return option
        for option in options:
            if response == option.label.upper():
                return option
        return None

    def _handle_no_input(self, question: Question) -> Answer:
        if question.default is not None:
            return question.default
        return Answer(value=AnswerValue.SKIPPED)

    def _read_input(self, message: str) -> str | None:
        try:
            return pt_prompt(message)
        except (EOFError, KeyboardInterrupt):
            return None
