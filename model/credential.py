# model/credential.py
from enum import Enum
from typing import Any
from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    certificate = "certificate"
    grade_sheet = "grade_sheet"


class DocumentStatus(str, Enum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"


class AccessRequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class CredentialRecord(BaseModel):
    certId: str
    ownerId: str
    name: str
    docType: DocumentType = DocumentType.certificate
    metadata: dict[str, Any] = Field(default_factory=dict)
    autoVerified: bool = False
    status: DocumentStatus = DocumentStatus.PENDING
    createdAt: int


class AccessRequest(BaseModel):
    requestId: str
    verifierId: str
    studentId: str
    purpose: str | None = None
    status: AccessRequestStatus = AccessRequestStatus.pending
    sharedDocIds: list[str] = Field(default_factory=list)
    createdAt: int
    respondedAt: int | None = None
