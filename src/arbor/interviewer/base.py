from __future__ import annotations

from typing import Protocol, runtime_checkable

from arbor.interviewer.models import Answer, Question


@runtime_checkable
class Interviewer(Protocol):
    def ask(self, question: Question) -> Answer: ...
