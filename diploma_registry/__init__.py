"""
Diploma Registry

Issuance registry for diplomas with field-level validation, duplicate
detection by content hash, and authority gating.

The registry evaluates an ordered checklist before every issuance. The first
failing check decides the returned error code; a failed call changes nothing.

Usage:
    from diploma_registry import (
        DiplomaRegistry,
        StaticAuthoritySet,
        InMemoryTransferLedger,
        BlockClock,
        content_hash,
    )

    registry = DiplomaRegistry(
        authorities=StaticAuthoritySet(["ST1TEST"]),
        transfers=InMemoryTransferLedger(),
        clock=BlockClock(),
    )
    registry.set_authority_contract("ST2TEST")

    result = registry.issue_diploma(
        1, 1, 1, content_hash(document_bytes), 100, "Bachelor", 350,
        "Cum Laude", "Computer Science", "Math", "University City", "STX",
        200, 120, "AI Thesis", "Dr. Smith", ["Dr. A", "Dr. B"],
        caller="ST1TEST",
    )
    if result.ok:
        diploma = registry.get_diploma(result.value)
    else:
        code = ErrorCode(result.value)
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Data model
from .records import (
    Currency,
    DegreeType,
    DiplomaRecord,
    DiplomaUpdateRecord,
    IssuanceRequest,
    Result,
)

# Hashing
from .hashing import (
    CONTENT_HASH_LENGTH,
    content_hash,
    from_hex,
    hash_key,
    to_hex,
    verify_content_hash,
)

# Gates
from .gates import (
    ErrorCode,
    GateEvaluation,
    GateResult,
    IssuanceContext,
    IssuanceGate,
    ISSUANCE_GATES,
    evaluate_gates,
)

# Ledger collaborators
from .ledger import (
    AuthorityOracle,
    BlockClock,
    InMemoryTransferLedger,
    StaticAuthoritySet,
    Transfer,
    TransferError,
    TransferSink,
)

# Registry
from .registry import DiplomaRegistry, RegistryState


__all__ = [
    # Version
    "__version__",

    # Data model
    "Currency",
    "DegreeType",
    "DiplomaRecord",
    "DiplomaUpdateRecord",
    "IssuanceRequest",
    "Result",

    # Hashing
    "CONTENT_HASH_LENGTH",
    "content_hash",
    "from_hex",
    "hash_key",
    "to_hex",
    "verify_content_hash",

    # Gates
    "ErrorCode",
    "GateEvaluation",
    "GateResult",
    "IssuanceContext",
    "IssuanceGate",
    "ISSUANCE_GATES",
    "evaluate_gates",

    # Ledger
    "AuthorityOracle",
    "BlockClock",
    "InMemoryTransferLedger",
    "StaticAuthoritySet",
    "Transfer",
    "TransferError",
    "TransferSink",

    # Registry
    "DiplomaRegistry",
    "RegistryState",
]
