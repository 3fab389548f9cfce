from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SessionError(Exception):
    """Base error envelope. Every rejected call surfaces one of these, never a raw exception.

    ``path`` names the offending field inside a call; ``file`` is set only for call scripts.
    """

    code: str
    message: str
    path: Optional[str] = None
    file: Optional[str] = None

    def __str__(self) -> str:
        parts = [p for p in (self.file, self.path) if p]
        loc = ":".join(parts) if parts else "<call>"
        return f"{loc}: {self.code}: {self.message}"

    def to_dict(self) -> dict:
        out = {"code": self.code, "message": self.message, "path": self.path}
        if self.file is not None:
            out["file"] = self.file
        return out


class CallLoadError(SessionError):
    pass


class ValidationError(SessionError):
    pass


class InvalidReference(SessionError):
    pass
