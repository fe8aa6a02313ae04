"""Database models package."""

from .question import Question, QuestionFile
from .user import User

__all__ = [
    "Question",
    "QuestionFile",
    "User",
]
