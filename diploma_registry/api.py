"""
HTTP facade for the Diploma Registry.

Serves one in-memory registry. The caller identity of each request is taken
from the X-Caller header; the block clock is the registry's in-memory clock.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Header, HTTPException, Request

from .config import (
    AUTHORITY_CONTRACT,
    ISSUANCE_FEE,
    LOG_FILE,
    LOG_JSON,
    LOG_LEVEL,
    MAX_DIPLOMAS,
    is_debug,
    is_production,
    load_authorities,
    validate_config,
)
from .gates import ErrorCode
from .hashing import from_hex
from .ledger import BlockClock, InMemoryTransferLedger, StaticAuthoritySet
from .logging_config import configure_logging, set_request_id
from .models import (
    AdvanceBlocksRequest,
    AuthorityContractRequest,
    CommandResponse,
    DiplomaResponse,
    ExistenceResponse,
    IssuanceFeeRequest,
    IssueDiplomaRequest,
    UpdateDiplomaRequest,
)
from .records import IssuanceRequest
from .registry import DiplomaRegistry

logger = logging.getLogger(__name__)

app = FastAPI(title="Diploma Registry")

# Issuance codes not listed here are field validation failures (422).
ISSUANCE_STATUS = {
    ErrorCode.NOT_AUTHORIZED: 403,
    ErrorCode.DIPLOMA_ALREADY_ISSUED: 409,
    ErrorCode.MAX_DIPLOMAS_EXCEEDED: 409,
    ErrorCode.INSTITUTION_NOT_VERIFIED: 409,
}


def build_registry() -> DiplomaRegistry:
    registry = DiplomaRegistry(
        authorities=StaticAuthoritySet(load_authorities()),
        transfers=InMemoryTransferLedger(),
        clock=BlockClock(),
        max_diplomas=MAX_DIPLOMAS,
        issuance_fee=ISSUANCE_FEE,
    )
    if AUTHORITY_CONTRACT:
        registry.set_authority_contract(AUTHORITY_CONTRACT)
    return registry


REGISTRY = build_registry()


def reset_registry() -> DiplomaRegistry:
    """Replace the served registry with a fresh one."""
    global REGISTRY
    REGISTRY = build_registry()
    return REGISTRY


@app.on_event("startup")
def _startup():
    configure_logging(
        level="DEBUG" if is_debug() and not is_production() else LOG_LEVEL,
        json_format=LOG_JSON,
        log_file=LOG_FILE,
    )
    problems = validate_config(MAX_DIPLOMAS, ISSUANCE_FEE, AUTHORITY_CONTRACT)
    for problem in problems:
        logger.error(problem)
    if problems:
        raise ValueError("invalid configuration: " + "; ".join(problems))
    reset_registry()


@app.middleware("http")
async def _request_id(request: Request, call_next):
    request_id = set_request_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def _decode_hash(content_hash):
    # Undecodable input is passed through so the hash gate rejects it in order.
    if not isinstance(content_hash, str):
        return content_hash
    try:
        return from_hex(content_hash)
    except ValueError:
        return content_hash


def _issuance_error(code: ErrorCode) -> HTTPException:
    return HTTPException(
        ISSUANCE_STATUS.get(code, 422),
        {"error_code": int(code), "error": code.name},
    )


@app.post("/authority-contract")
def set_authority_contract(req: AuthorityContractRequest):
    result = REGISTRY.set_authority_contract(req.identity)
    if not result.ok:
        raise HTTPException(409, "AUTHORITY_CONTRACT_REJECTED")
    return CommandResponse(ok=True, value=True)


@app.post("/issuance-fee")
def set_issuance_fee(req: IssuanceFeeRequest):
    result = REGISTRY.set_issuance_fee(req.fee)
    if not result.ok:
        raise HTTPException(409, "AUTHORITY_CONTRACT_NOT_SET")
    return CommandResponse(ok=True, value=True)


@app.post("/diplomas")
def issue_diploma(req: IssueDiplomaRequest, x_caller: str = Header(...)):
    fields = req.model_dump()
    fields["content_hash"] = _decode_hash(req.content_hash)
    result = REGISTRY.issue(IssuanceRequest(**fields), caller=x_caller)
    if not result.ok:
        raise _issuance_error(ErrorCode(result.error_code))
    return CommandResponse(ok=True, value=result.value)


@app.get("/diplomas/count")
def get_diploma_count():
    return REGISTRY.get_diploma_count().to_dict()


@app.get("/diplomas/by-hash/{content_hash}")
def check_diploma_existence(content_hash: str):
    try:
        key = from_hex(content_hash)
    except ValueError:
        raise _issuance_error(ErrorCode.INVALID_HASH)
    exists = REGISTRY.check_diploma_existence(key).value
    return ExistenceResponse(
        content_hash=key.hex(),
        exists=exists,
        diploma_id=REGISTRY.get_diploma_id_by_hash(key),
    )


@app.get("/diplomas/{diploma_id}")
def get_diploma(diploma_id: int):
    diploma = REGISTRY.get_diploma(diploma_id)
    if diploma is None:
        raise HTTPException(404, "NOT_FOUND")
    return DiplomaResponse(diploma_id=diploma_id, diploma=diploma.to_dict())


@app.put("/diplomas/{diploma_id}")
def update_diploma(diploma_id: int, req: UpdateDiplomaRequest, x_caller: str = Header(...)):
    result = REGISTRY.update_diploma(diploma_id, req.gpa, req.honors, caller=x_caller)
    if not result.ok:
        raise HTTPException(403, "UPDATE_REJECTED")
    return CommandResponse(ok=True, value=True)


@app.get("/diplomas/{diploma_id}/update")
def get_diploma_update(diploma_id: int):
    update = REGISTRY.get_diploma_update(diploma_id)
    if update is None:
        raise HTTPException(404, "NOT_FOUND")
    return update.to_dict()


@app.get("/authorities/{identity}")
def is_verified_authority(identity: str):
    return REGISTRY.is_verified_authority(identity).to_dict()


@app.get("/transfers")
def list_transfers(sender: Optional[str] = None, recipient: Optional[str] = None):
    return [t.to_dict() for t in REGISTRY.transfers.transfers(sender=sender, recipient=recipient)]


@app.post("/blocks/advance")
def advance_blocks(req: AdvanceBlocksRequest):
    return {"block_height": REGISTRY.clock.advance(req.blocks)}
