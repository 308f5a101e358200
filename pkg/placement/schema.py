"""
Placement tracker schema.

Application pipeline:
  Applied → Round 1 → Round 2 → Round 3 → HR Round → Placed

Any stage may be reached from any other stage (the board is free-form);
only the set of stages is fixed.
"""
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from .errors import InvalidStageError


class Stage(Enum):
    """The six board columns, in display order."""
    APPLIED = "applied"
    ROUND1 = "round1"
    ROUND2 = "round2"
    ROUND3 = "round3"
    HR_ROUND = "hr-round"
    PLACED = "placed"

    @property
    def label(self) -> str:
        return STAGE_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "Stage":
        """Strict parse of a stage id. Raises InvalidStageError."""
        if isinstance(value, Stage):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStageError(
                f"Invalid stage: {value!r}. "
                f"Valid stages: {', '.join(cls.ids())}"
            ) from None

    @classmethod
    def from_str(cls, value: str) -> "Stage":
        """Lenient parse for stored records; unknown values become APPLIED."""
        try:
            return cls(value)
        except ValueError:
            return cls.APPLIED

    @classmethod
    def ids(cls) -> List[str]:
        return [s.value for s in cls]

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        return isinstance(value, Stage) or value in cls.ids()


STAGE_LABELS: Dict[Stage, str] = {
    Stage.APPLIED: "Applied",
    Stage.ROUND1: "Round 1",
    Stage.ROUND2: "Round 2",
    Stage.ROUND3: "Round 3",
    Stage.HR_ROUND: "HR Round",
    Stage.PLACED: "Placed",
}

# Fields the add/edit dialogs must fill in
REQUIRED_APPLICATION_FIELDS = ("company", "role", "package")
EDITABLE_APPLICATION_FIELDS = REQUIRED_APPLICATION_FIELDS + ("description", "status")


@dataclass
class User:
    """Public identity of a logged-in user (no credential)."""
    name: str
    email: str
    college: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "email": self.email, "college": self.college}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            name=data.get("name", ""),
            email=data.get("email", ""),
            college=data.get("college", ""),
        )


@dataclass
class UserRecord:
    """
    One entry of the user registry.

    The password is kept as plaintext, exactly as entered at signup.
    """
    name: str
    email: str
    password: str
    college: str = ""
    branch: str = ""
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def public(self) -> User:
        return User(name=self.name, email=self.email, college=self.college)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "college": self.college,
            "branch": self.branch,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserRecord":
        return cls(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            college=data.get("college", ""),
            branch=data.get("branch", ""),
            created_at=data.get("createdAt") or datetime.now(timezone.utc).isoformat(),
        )


@dataclass
class Application:
    """A single company/role/package the user applied to (a board card)."""

    id: str
    company: str
    role: str
    package: str
    description: str = ""
    status: Stage = Stage.APPLIED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "company": self.company,
            "role": self.role,
            "package": self.package,
            "description": self.description,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Application":
        """Deserialize a stored record. Unknown statuses fall back to APPLIED."""
        status = data.get("status")
        return cls(
            id=str(data.get("id", "")),
            company=data.get("company", ""),
            role=data.get("role", ""),
            package=data.get("package", ""),
            description=data.get("description") or "",
            status=Stage.from_str(status) if status else Stage.APPLIED,
        )


def missing_fields(fields: Dict[str, Any], required=REQUIRED_APPLICATION_FIELDS) -> List[str]:
    """Names of required fields that are absent or blank."""
    missing = []
    for name in required:
        value = fields.get(name)
        if value is None or not str(value).strip():
            missing.append(name)
    return missing


def stage_or_none(value: Optional[str]) -> Optional[Stage]:
    """Stage for a known stage id, None for anything else."""
    if value is None or not Stage.is_valid(value):
        return None
    return Stage.parse(value)
