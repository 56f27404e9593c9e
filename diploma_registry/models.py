from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

class AuthorityContractRequest(BaseModel):
    identity: str

class IssuanceFeeRequest(BaseModel):
    fee: int

# Field types are left to the registry gates so that malformed values are
# rejected with the code of the first failing gate.
class IssueDiplomaRequest(BaseModel):
    institution_id: Any
    student_id: Any
    template_id: Any
    content_hash: Any = Field(description="hex-encoded 32-byte content hash")
    issuance_date: Any
    degree_type: Any
    gpa: Any
    honors: Any = ""
    major: Any
    minor: Any = ""
    location: Any
    currency: Any
    expiry: Any
    credits: Any
    thesis_title: Any = ""
    advisor: Any = ""
    committee: Any = Field(default_factory=list)

class UpdateDiplomaRequest(BaseModel):
    gpa: Any
    honors: Any = ""

class AdvanceBlocksRequest(BaseModel):
    blocks: int = Field(default=1, ge=0)

class CommandResponse(BaseModel):
    ok: bool
    value: Any

class DiplomaResponse(BaseModel):
    diploma_id: int
    diploma: Dict[str, Any]

class ExistenceResponse(BaseModel):
    content_hash: str
    exists: bool
    diploma_id: Optional[int] = None
