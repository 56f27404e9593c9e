"""
Diploma Issuance Gates

The issuance checklist as an ordered list of predicate/error-code pairs.

Design principles:
- Ordered: gates are evaluated in declaration order, first failure wins,
  so the surfaced error code is stable when several fields are invalid
- Fail-closed: a malformed value fails its gate, gates never raise
- Side-effect free: gates only read the request and the context
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Iterable, Optional, Tuple

from .hashing import CONTENT_HASH_LENGTH, hash_key
from .records import Currency, DegreeType, IssuanceRequest

MAX_GPA = 400
MAX_HONORS_LENGTH = 50
MAX_MAJOR_LENGTH = 100
MAX_MINOR_LENGTH = 100
MAX_LOCATION_LENGTH = 100
MAX_THESIS_LENGTH = 200
MAX_ADVISOR_LENGTH = 100
MAX_COMMITTEE_SIZE = 5


class ErrorCode(IntEnum):
    """Stable numeric codes returned by failed issuances."""
    NOT_AUTHORIZED = 100
    INVALID_INSTITUTION = 101
    INVALID_STUDENT = 102
    INVALID_TEMPLATE = 103
    INVALID_HASH = 104
    INVALID_ISSUANCE_DATE = 105
    DIPLOMA_ALREADY_ISSUED = 106
    DIPLOMA_NOT_FOUND = 107
    INSTITUTION_NOT_VERIFIED = 109
    INVALID_GPA = 110
    INVALID_DEGREE_TYPE = 111
    INVALID_UPDATE_PARAM = 113
    MAX_DIPLOMAS_EXCEEDED = 114
    INVALID_HONORS = 115
    INVALID_MAJOR = 116
    INVALID_MINOR = 117
    INVALID_LOCATION = 118
    INVALID_CURRENCY = 119
    INVALID_EXPIRY = 121
    INVALID_CREDITS = 122
    INVALID_THESIS = 123
    INVALID_ADVISOR = 124
    INVALID_COMMITTEE = 125


class GateResult(str, Enum):
    """Gate evaluation result."""
    PASS = "PASS"
    FAIL = "FAIL"


@dataclass
class GateEvaluation:
    """Result of evaluating a single gate."""
    gate_id: str
    result: GateResult
    error_code: Optional[ErrorCode] = None
    observed: Optional[str] = None

    def passed(self) -> bool:
        return self.result == GateResult.PASS

    def to_dict(self) -> dict:
        d = {"gate_id": self.gate_id, "result": self.result.value}
        if self.error_code is not None:
            d["error_code"] = int(self.error_code)
            d["error"] = self.error_code.name
        if self.observed is not None:
            d["observed"] = self.observed
        return d


@dataclass
class IssuanceContext:
    """
    Registry-side view available to the gates.

    The registry builds one per issuance while holding its lock.
    """
    block_height: int
    caller: str
    next_diploma_id: int
    max_diplomas: int
    authority_contract: Optional[str]
    is_verified_authority: Callable[[str], bool]
    hash_issued: Callable[[bytes], bool]


Predicate = Callable[[IssuanceRequest, IssuanceContext], bool]


class IssuanceGate:
    """A single ordered check: a predicate and the code surfaced when it fails."""

    def __init__(self, gate_id: str, error_code: ErrorCode, predicate: Predicate):
        self.gate_id = gate_id
        self.error_code = error_code
        self.predicate = predicate

    def evaluate(self, request: IssuanceRequest, context: IssuanceContext) -> GateEvaluation:
        """Evaluate the gate. Returns PASS or FAIL, never raises."""
        try:
            if self.predicate(request, context):
                return GateEvaluation(gate_id=self.gate_id, result=GateResult.PASS)
        except (TypeError, ValueError, AttributeError) as e:
            return self._fail(str(e))
        return self._fail(self._observe(request))

    def _fail(self, observed: Optional[str]) -> GateEvaluation:
        return GateEvaluation(
            gate_id=self.gate_id,
            result=GateResult.FAIL,
            error_code=self.error_code,
            observed=observed,
        )

    def _observe(self, request: IssuanceRequest) -> Optional[str]:
        value = getattr(request, self.gate_id, None)
        if value is None:
            return None
        if isinstance(value, (bytes, bytearray, memoryview)):
            return f"{len(value)} bytes"
        if isinstance(value, str) and len(value) > 40:
            return f"{len(value)} chars"
        return repr(value)

    def __repr__(self) -> str:
        return f"IssuanceGate({self.gate_id!r}, {self.error_code.name})"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def positive(field_name: str) -> Predicate:
    def check(request, context):
        value = getattr(request, field_name)
        return _is_int(value) and value > 0
    return check


def not_before_current_block(field_name: str) -> Predicate:
    def check(request, context):
        value = getattr(request, field_name)
        return _is_int(value) and value >= context.block_height
    return check


def one_of(field_name: str, allowed: Iterable[str]) -> Predicate:
    allowed = frozenset(allowed)

    def check(request, context):
        value = getattr(request, field_name)
        if isinstance(value, Enum):
            value = value.value
        return isinstance(value, str) and value in allowed
    return check


def bounded_text(field_name: str, max_length: int, required: bool = False) -> Predicate:
    def check(request, context):
        value = getattr(request, field_name)
        if not isinstance(value, str):
            return False
        if required and not value:
            return False
        return len(value) <= max_length
    return check


def gpa_in_range(value: Any) -> bool:
    """Fixed point GPA check shared by issuance and update."""
    return _is_int(value) and 0 <= value <= MAX_GPA


def honors_in_range(value: Any) -> bool:
    return isinstance(value, str) and len(value) <= MAX_HONORS_LENGTH


def _has_capacity(request, context):
    return context.next_diploma_id < context.max_diplomas


def _hash_is_valid(request, context):
    key = hash_key(request.content_hash)
    return key is not None and len(key) == CONTENT_HASH_LENGTH


def _committee_is_valid(request, context):
    committee = request.committee
    if not isinstance(committee, (list, tuple)):
        return False
    if not all(isinstance(member, str) for member in committee):
        return False
    return len(committee) <= MAX_COMMITTEE_SIZE


def _caller_is_authority(request, context):
    return bool(context.is_verified_authority(context.caller))


def _hash_not_issued(request, context):
    return not context.hash_issued(hash_key(request.content_hash))


def _authority_contract_set(request, context):
    return bool(context.authority_contract)


# Evaluation order is observable through the returned error code.
ISSUANCE_GATES: Tuple[IssuanceGate, ...] = (
    IssuanceGate("capacity", ErrorCode.MAX_DIPLOMAS_EXCEEDED, _has_capacity),
    IssuanceGate("institution_id", ErrorCode.INVALID_INSTITUTION, positive("institution_id")),
    IssuanceGate("student_id", ErrorCode.INVALID_STUDENT, positive("student_id")),
    IssuanceGate("template_id", ErrorCode.INVALID_TEMPLATE, positive("template_id")),
    IssuanceGate("content_hash", ErrorCode.INVALID_HASH, _hash_is_valid),
    IssuanceGate("issuance_date", ErrorCode.INVALID_ISSUANCE_DATE, not_before_current_block("issuance_date")),
    IssuanceGate("degree_type", ErrorCode.INVALID_DEGREE_TYPE, one_of("degree_type", [d.value for d in DegreeType])),
    IssuanceGate("gpa", ErrorCode.INVALID_GPA, lambda request, context: gpa_in_range(request.gpa)),
    IssuanceGate("honors", ErrorCode.INVALID_HONORS, bounded_text("honors", MAX_HONORS_LENGTH)),
    IssuanceGate("major", ErrorCode.INVALID_MAJOR, bounded_text("major", MAX_MAJOR_LENGTH, required=True)),
    IssuanceGate("minor", ErrorCode.INVALID_MINOR, bounded_text("minor", MAX_MINOR_LENGTH)),
    IssuanceGate("location", ErrorCode.INVALID_LOCATION, bounded_text("location", MAX_LOCATION_LENGTH, required=True)),
    IssuanceGate("currency", ErrorCode.INVALID_CURRENCY, one_of("currency", [c.value for c in Currency])),
    IssuanceGate("expiry", ErrorCode.INVALID_EXPIRY, not_before_current_block("expiry")),
    IssuanceGate("credits", ErrorCode.INVALID_CREDITS, positive("credits")),
    IssuanceGate("thesis_title", ErrorCode.INVALID_THESIS, bounded_text("thesis_title", MAX_THESIS_LENGTH)),
    IssuanceGate("advisor", ErrorCode.INVALID_ADVISOR, bounded_text("advisor", MAX_ADVISOR_LENGTH)),
    IssuanceGate("committee", ErrorCode.INVALID_COMMITTEE, _committee_is_valid),
    IssuanceGate("caller", ErrorCode.NOT_AUTHORIZED, _caller_is_authority),
    IssuanceGate("duplicate_hash", ErrorCode.DIPLOMA_ALREADY_ISSUED, _hash_not_issued),
    IssuanceGate("authority_contract", ErrorCode.INSTITUTION_NOT_VERIFIED, _authority_contract_set),
)


def evaluate_gates(
    request: IssuanceRequest,
    context: IssuanceContext,
    gates: Iterable[IssuanceGate] = ISSUANCE_GATES,
) -> Optional[GateEvaluation]:
    """
    Run gates in order and stop at the first failure.

    Returns the failing evaluation, or None when every gate passes.
    """
    for gate in gates:
        evaluation = gate.evaluate(request, context)
        if not evaluation.passed():
            return evaluation
    return None
