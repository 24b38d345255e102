"""User-facing notices returned by client operations."""

from dataclasses import dataclass
from enum import Enum


class NoticeKind(Enum):
    """Severity of a notice shown to the user."""

    SUCCESS = "success"
    INFO = "info"
    VALIDATION = "validation"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A short message for the user, rendered as a dialog or a line of output."""

    kind: NoticeKind
    title: str
    message: str


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a user-triggered operation."""

    ok: bool
    notice: Notice | None = None

    @classmethod
    def success(cls, title: str, message: str) -> "ActionResult":
        return cls(ok=True, notice=Notice(NoticeKind.SUCCESS, title, message))

    @classmethod
    def quiet(cls) -> "ActionResult":
        return cls(ok=True)

    @classmethod
    def info(cls, title: str, message: str) -> "ActionResult":
        return cls(ok=False, notice=Notice(NoticeKind.INFO, title, message))

    @classmethod
    def invalid(cls, title: str, message: str) -> "ActionResult":
        return cls(ok=False, notice=Notice(NoticeKind.VALIDATION, title, message))

    @classmethod
    def error(cls, title: str, message: str) -> "ActionResult":
        return cls(ok=False, notice=Notice(NoticeKind.ERROR, title, message))
