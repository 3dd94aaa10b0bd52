# model/api.py
from typing import Literal
from pydantic import BaseModel, Field
from model.certificate import (
    CertificateFact,
    FinalDecision,
    LivenessResult,
    NameMatchResult,
    VerificationStep,
)
from model.credential import AccessRequest, CredentialRecord, DocumentStatus


class FileInfo(BaseModel):
    name: str | None = None
    size: int
    type: str | None = None


class VerificationResponse(BaseModel):
    timestamp: str
    studentName: str
    studentId: str | None = None
    method: Literal["AI_VISION"] = "AI_VISION"
    fileInfo: FileInfo
    steps: list[VerificationStep]
    factSheet: CertificateFact
    nameMatch: NameMatchResult
    verificationUrl: str | None = None
    urlLiveness: LivenessResult | None = None
    decision: FinalDecision


class UploadCertificateResponse(BaseModel):
    verification: VerificationResponse
    record: CredentialRecord


class SetStatusRequest(BaseModel):
    status: DocumentStatus


class AccessRequestCreate(BaseModel):
    verifierId: str = Field(min_length=1)
    studentId: str = Field(min_length=1)
    purpose: str | None = None


class AccessRequestAnswer(BaseModel):
    studentId: str = Field(min_length=1)
    approve: bool
    selectedDocIds: list[str] = Field(default_factory=list)


class ShareRequest(BaseModel):
    ownerId: str = Field(min_length=1)
    docId: str = Field(min_length=1)
    verifierId: str = Field(min_length=1)


class AccessRequestList(BaseModel):
    requests: list[AccessRequest]


class DocumentList(BaseModel):
    documents: list[CredentialRecord]


class SendOtpRequest(BaseModel):
    email: str = Field(min_length=3)
    studentName: str | None = None
    purpose: str | None = None


class SendOtpResponse(BaseModel):
    success: bool
    message: str
    otp: str | None = None


class VerifyOtpRequest(BaseModel):
    email: str = Field(min_length=3)
    otp: str = Field(min_length=1)


class VerifyOtpResponse(BaseModel):
    success: bool
    message: str
