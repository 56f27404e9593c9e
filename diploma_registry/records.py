"""
Diploma Registry Data Model

Records stored by the registry and the result shape returned by its commands.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class DegreeType(str, Enum):
    """Degree types accepted at issuance."""
    BACHELOR = "Bachelor"
    MASTER = "Master"
    PHD = "PhD"


class Currency(str, Enum):
    """Currencies a diploma's fees may be denominated in."""
    STX = "STX"
    USD = "USD"
    BTC = "BTC"


@dataclass(frozen=True)
class DiplomaRecord:
    """
    A diploma as stored by the registry.

    gpa is fixed point with two decimals (350 == 3.50).
    issuance_date, expiry and timestamp are block heights.
    """
    institution_id: int
    student_id: int
    template_id: int
    content_hash: bytes
    issuance_date: int
    timestamp: int
    issuer: str
    degree_type: str
    gpa: int
    honors: str
    major: str
    minor: str
    location: str
    currency: str
    status: bool
    expiry: int
    credits: int
    thesis_title: str
    advisor: str
    committee: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary (content hash as hex)."""
        return {
            "institution_id": self.institution_id,
            "student_id": self.student_id,
            "template_id": self.template_id,
            "content_hash": self.content_hash.hex(),
            "issuance_date": self.issuance_date,
            "timestamp": self.timestamp,
            "issuer": self.issuer,
            "degree_type": self.degree_type,
            "gpa": self.gpa,
            "honors": self.honors,
            "major": self.major,
            "minor": self.minor,
            "location": self.location,
            "currency": self.currency,
            "status": self.status,
            "expiry": self.expiry,
            "credits": self.credits,
            "thesis_title": self.thesis_title,
            "advisor": self.advisor,
            "committee": list(self.committee),
        }


@dataclass
class IssuanceRequest:
    """Fields submitted for issuance, before validation."""
    institution_id: Any
    student_id: Any
    template_id: Any
    content_hash: Any
    issuance_date: Any
    degree_type: Any
    gpa: Any
    honors: Any
    major: Any
    minor: Any
    location: Any
    currency: Any
    expiry: Any
    credits: Any
    thesis_title: Any
    advisor: Any
    committee: Any


@dataclass(frozen=True)
class DiplomaUpdateRecord:
    """Latest update applied to a diploma. Replaced, never appended."""
    update_gpa: int
    update_honors: str
    update_timestamp: int
    updater: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "update_gpa": self.update_gpa,
            "update_honors": self.update_honors,
            "update_timestamp": self.update_timestamp,
            "updater": self.updater,
        }


@dataclass(frozen=True)
class Result:
    """
    Outcome of a registry command.

    For issuance, value is the new diploma id on success and the numeric
    error code on failure. Boolean commands carry True/False.
    """
    ok: bool
    value: Any

    @property
    def error_code(self) -> Optional[int]:
        if self.ok or isinstance(self.value, bool):
            return None
        return int(self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "value": self.value}
