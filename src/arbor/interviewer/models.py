from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    CONFIRMATION = "CONFIRMATION"


class AnswerValue(str, Enum):
    YES = "YES"
    NO = "NO"
    SKIPPED = "SKIPPED"


class Option(BaseModel):
    key: str
    label: str


class Answer(BaseModel):
    value: str | AnswerValue = ""
    selected_option: Option | None = None


class Question(BaseModel):
    text: str
    type: QuestionType
    options: list[Option] = Field(default_factory=list)
    stage: str = ""
    default: Answer | None = None
