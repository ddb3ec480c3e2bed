"""Election business records stored in the document backend."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

POSITION_ORDER: tuple[str, ...] = (
    "President",
    "Vice President",
    "Secretary General",
    "Treasurer",
    "Gender and Disability Representative",
    "Sports, Entertainment and Security Secretary",
)
"""Order in which positions appear on the ballot."""

REPORT_CATEGORIES: tuple[str, ...] = (
    "Bribery",
    "Intimidation",
    "Technical Failure",
    "Impersonation",
    "Other",
)


@dataclass(frozen=True)
class Candidate:
    """An approved contestant on the live ballot."""

    id: str
    name: str
    position: str
    course: str | None = None
    brief_info: str | None = None
    photo_url: str | None = None

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Candidate:
        return cls(
            id=doc_id,
            name=str(data.get("name") or "Unknown"),
            position=str(data.get("position") or "Other"),
            course=data.get("course"),
            brief_info=data.get("briefInfo"),
            photo_url=data.get("photoUrl"),
        )


@dataclass(frozen=True)
class BallotPosition:
    """One position on the ballot with its candidates."""

    position: str
    candidates: tuple[Candidate, ...]

    @property
    def candidate_names(self) -> list[str]:
        return [c.name for c in self.candidates]


@dataclass
class Application:
    """A candidate application collected by the application wizard."""

    name: str = ""
    position: str = ""
    admission_number: str = ""
    age: str = ""
    course: str = ""
    email: str = ""
    brief_info: str = ""

    REQUIRED = ("name", "position", "admission_number", "age", "course", "brief_info")

    def missing_fields(self) -> list[str]:
        return [f for f in self.REQUIRED if not str(getattr(self, f)).strip()]

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name.strip(),
            "position": self.position,
            "admissionNumber": self.admission_number.strip(),
            "course": self.course.strip(),
            "age": self.age.strip(),
            "briefInfo": self.brief_info.strip(),
            "email": self.email.strip(),
        }


@dataclass(frozen=True)
class Attachment:
    """A file selected outside the voice flow (photo, PDF, recording)."""

    data: bytes
    filename: str
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class IncidentReport:
    """An election incident reported through the feedback screen."""

    category: str
    description: str
    user_id: str | None = None


@dataclass(frozen=True)
class CandidateTally:
    name: str
    votes: int


@dataclass(frozen=True)
class PositionResult:
    """Tallies for one position, highest vote count first."""

    position: str
    candidates: tuple[CandidateTally, ...] = field(default_factory=tuple)

    @property
    def leader(self) -> CandidateTally | None:
        return self.candidates[0] if self.candidates else None


@dataclass(frozen=True)
class UserProfile:
    """Student account details collected by the signup wizard."""

    full_name: str
    email: str
    reg_number: str
    department: str
    role: str = "student"

    def to_document(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "fullName": data["full_name"],
            "email": data["email"],
            "regNumber": data["reg_number"],
            "department": data["department"],
            "role": data["role"],
        }
