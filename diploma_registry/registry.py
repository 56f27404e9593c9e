"""
Diploma Registry

The registry stores issued diplomas under dense sequential ids with a
secondary index from content hash to id.

Every command is a single check-then-mutate step under one lock:
- A failed command changes nothing and transfers nothing
- Issuance failures carry the code of the first failing gate
- Update failures are a bare False, whatever the cause
"""

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Sequence

from . import config
from .gates import (
    ISSUANCE_GATES,
    IssuanceContext,
    IssuanceGate,
    evaluate_gates,
    gpa_in_range,
    honors_in_range,
)
from .hashing import hash_key, to_hex
from .ledger import (
    AuthorityOracle,
    BlockClock,
    InMemoryTransferLedger,
    StaticAuthoritySet,
    TransferSink,
)
from .logging_config import audit_log
from .records import DiplomaRecord, DiplomaUpdateRecord, IssuanceRequest, Result


@dataclass
class RegistryState:
    """Mutable registry state. Owned and guarded by DiplomaRegistry."""
    next_diploma_id: int = 0
    max_diplomas: int = config.DEFAULT_MAX_DIPLOMAS
    issuance_fee: int = config.DEFAULT_ISSUANCE_FEE
    authority_contract: Optional[str] = None
    diplomas: Dict[int, DiplomaRecord] = field(default_factory=dict)
    diploma_updates: Dict[int, DiplomaUpdateRecord] = field(default_factory=dict)
    diplomas_by_hash: Dict[bytes, int] = field(default_factory=dict)


class DiplomaRegistry:
    """
    Diploma issuance registry.

    Collaborators are injected so the registry can run against fakes:

        registry = DiplomaRegistry(
            authorities=StaticAuthoritySet(["ST1TEST"]),
            transfers=InMemoryTransferLedger(),
            clock=BlockClock(),
        )
        registry.set_authority_contract("ST2TEST")
        result = registry.issue_diploma(..., caller="ST1TEST")
    """

    def __init__(
        self,
        authorities: Optional[AuthorityOracle] = None,
        transfers: Optional[TransferSink] = None,
        clock: Optional[BlockClock] = None,
        max_diplomas: int = config.DEFAULT_MAX_DIPLOMAS,
        issuance_fee: int = config.DEFAULT_ISSUANCE_FEE,
        gates: Sequence[IssuanceGate] = ISSUANCE_GATES,
    ):
        self.authorities = authorities if authorities is not None else StaticAuthoritySet()
        self.transfers = transfers if transfers is not None else InMemoryTransferLedger()
        self.clock = clock if clock is not None else BlockClock()
        self.gates = tuple(gates)
        self.state = RegistryState(max_diplomas=max_diplomas, issuance_fee=issuance_fee)
        self._lock = threading.RLock()

    # ------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------

    def set_authority_contract(self, identity: str) -> Result:
        """Set the fee-receiving authority contract. Write-once."""
        with self._lock:
            if identity == config.BURN_IDENTITY:
                audit_log.authority_contract_rejected(identity, "burn identity")
                return Result(False, False)
            if self.state.authority_contract:
                audit_log.authority_contract_rejected(identity, "already set")
                return Result(False, False)

            self.state.authority_contract = identity
            audit_log.authority_contract_set(identity)
            return Result(True, True)

    def set_issuance_fee(self, fee: int) -> Result:
        """Overwrite the issuance fee. Requires an authority contract."""
        with self._lock:
            if not self.state.authority_contract:
                audit_log.issuance_fee_rejected(fee)
                return Result(False, False)

            old_fee = self.state.issuance_fee
            self.state.issuance_fee = fee
            audit_log.issuance_fee_set(old_fee, fee)
            return Result(True, True)

    # ------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------

    def issue_diploma(
        self,
        institution_id: int,
        student_id: int,
        template_id: int,
        content_hash: bytes,
        issuance_date: int,
        degree_type: str,
        gpa: int,
        honors: str,
        major: str,
        minor: str,
        location: str,
        currency: str,
        expiry: int,
        credits: int,
        thesis_title: str,
        advisor: str,
        committee: Sequence[str],
        *,
        caller: str,
    ) -> Result:
        """
        Issue a diploma.

        Returns Result(True, id) or Result(False, code) where code is the
        ErrorCode of the first failing gate.
        """
        request = IssuanceRequest(
            institution_id=institution_id,
            student_id=student_id,
            template_id=template_id,
            content_hash=content_hash,
            issuance_date=issuance_date,
            degree_type=degree_type,
            gpa=gpa,
            honors=honors,
            major=major,
            minor=minor,
            location=location,
            currency=currency,
            expiry=expiry,
            credits=credits,
            thesis_title=thesis_title,
            advisor=advisor,
            committee=committee,
        )
        return self.issue(request, caller=caller)

    def issue(self, request: IssuanceRequest, caller: str) -> Result:
        """Issue a diploma from a prepared request."""
        with self._lock:
            block_height = self.clock.block_height
            context = IssuanceContext(
                block_height=block_height,
                caller=caller,
                next_diploma_id=self.state.next_diploma_id,
                max_diplomas=self.state.max_diplomas,
                authority_contract=self.state.authority_contract,
                is_verified_authority=self.authorities.is_verified,
                hash_issued=self._hash_issued,
            )

            failure = evaluate_gates(request, context, self.gates)
            if failure is not None:
                audit_log.issuance_rejected(
                    caller, int(failure.error_code), failure.gate_id, failure.observed
                )
                return Result(False, failure.error_code)

            # A refused transfer raises before anything is written.
            fee = self.state.issuance_fee
            recipient = self.state.authority_contract
            self.transfers.transfer(fee, caller, recipient, block_height)
            audit_log.fee_transfer(fee, caller, recipient)

            key = hash_key(request.content_hash)
            diploma_id = self.state.next_diploma_id
            self.state.diplomas[diploma_id] = DiplomaRecord(
                institution_id=request.institution_id,
                student_id=request.student_id,
                template_id=request.template_id,
                content_hash=key,
                issuance_date=request.issuance_date,
                timestamp=block_height,
                issuer=caller,
                degree_type=_enum_value(request.degree_type),
                gpa=request.gpa,
                honors=request.honors,
                major=request.major,
                minor=request.minor,
                location=request.location,
                currency=_enum_value(request.currency),
                status=True,
                expiry=request.expiry,
                credits=request.credits,
                thesis_title=request.thesis_title,
                advisor=request.advisor,
                committee=tuple(request.committee),
            )
            self.state.diplomas_by_hash[key] = diploma_id
            self.state.next_diploma_id += 1

            audit_log.diploma_issued(diploma_id, caller, to_hex(key), block_height)
            return Result(True, diploma_id)

    def update_diploma(self, diploma_id: int, gpa: int, honors: str, *, caller: str) -> Result:
        """
        Update gpa and honors on a diploma. Only its issuer may do so.

        Returns Result(True, True) or Result(False, False).
        """
        with self._lock:
            diploma = self.state.diplomas.get(diploma_id)
            reason = None
            if diploma is None:
                reason = "not found"
            elif diploma.issuer != caller:
                reason = "caller is not the issuer"
            elif not gpa_in_range(gpa):
                reason = "gpa out of range"
            elif not honors_in_range(honors):
                reason = "honors too long"

            if reason is not None:
                audit_log.update_rejected(diploma_id, caller, reason)
                return Result(False, False)

            block_height = self.clock.block_height
            self.state.diplomas[diploma_id] = replace(
                diploma, gpa=gpa, honors=honors, timestamp=block_height
            )
            self.state.diploma_updates[diploma_id] = DiplomaUpdateRecord(
                update_gpa=gpa,
                update_honors=honors,
                update_timestamp=block_height,
                updater=caller,
            )

            audit_log.diploma_updated(diploma_id, caller, gpa, block_height)
            return Result(True, True)

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def get_diploma(self, diploma_id: int) -> Optional[DiplomaRecord]:
        with self._lock:
            return self.state.diplomas.get(diploma_id)

    def get_diploma_update(self, diploma_id: int) -> Optional[DiplomaUpdateRecord]:
        with self._lock:
            return self.state.diploma_updates.get(diploma_id)

    def get_diploma_count(self) -> Result:
        with self._lock:
            return Result(True, self.state.next_diploma_id)

    def check_diploma_existence(self, content_hash: bytes) -> Result:
        with self._lock:
            return Result(True, self._hash_issued(hash_key(content_hash)))

    def get_diploma_id_by_hash(self, content_hash: bytes) -> Optional[int]:
        key = hash_key(content_hash)
        if key is None:
            return None
        with self._lock:
            return self.state.diplomas_by_hash.get(key)

    def is_verified_authority(self, identity: str) -> Result:
        return Result(True, bool(self.authorities.is_verified(identity)))

    @property
    def issuance_fee(self) -> int:
        with self._lock:
            return self.state.issuance_fee

    @property
    def authority_contract(self) -> Optional[str]:
        with self._lock:
            return self.state.authority_contract

    def _hash_issued(self, key: Optional[bytes]) -> bool:
        return key is not None and key in self.state.diplomas_by_hash


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)
