# model/certificate.py
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, field_validator


class MatchMethod(str, Enum):
    missing = "missing"
    exact = "exact"
    parts_match_any_order = "parts_match_any_order"
    substring = "substring"
    character_similarity = "character_similarity"


class StepStatus(str, Enum):
    processing = "processing"
    success = "success"
    failed = "failed"
    not_found = "not_found"
    warning = "warning"


class DecisionStatus(str, Enum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"


class TrustLevel(str, Enum):
    # Ordinal: NONE < LOW < MEDIUM < HIGH < HIGHEST
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    HIGHEST = "HIGHEST"


class StorageAction(str, Enum):
    store_verified = "store_verified"
    store_pending = "store_pending"
    refuse = "refuse"


class CertificateFact(BaseModel):
    """
    What the vision model read off the certificate. Free text is kept as-is
    (dates are not normalized); absent fields are "" / False, never None.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    recipientName: str = ""
    courseName: str = ""
    issuer: str = ""
    issueDate: str = ""
    verificationUrl: str = ""
    hasQRCode: bool = False
    certificateType: str = ""
    additionalInfo: str = ""

    @field_validator(
        "recipientName",
        "courseName",
        "issuer",
        "issueDate",
        "verificationUrl",
        "certificateType",
        "additionalInfo",
        mode="before",
    )
    @classmethod
    def _text_or_empty(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, (dict, list)):
            raise ValueError("expected a plain value")
        return str(v).strip()

    @field_validator("hasQRCode", mode="before")
    @classmethod
    def _strict_true(cls, v: Any) -> bool:
        # Only a JSON `true` counts; "yes", 1 or "true" do not.
        return v is True


class NameMatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    match: bool
    confidence: int
    method: MatchMethod


class LivenessResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    reachable: bool
    httpStatus: Optional[int] = None
    nameFound: bool = False
    note: Optional[str] = None
    error: Optional[str] = None


class VerificationStep(BaseModel):
    index: int
    name: str
    status: StepStatus


class FinalDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: DecisionStatus
    trustLevel: TrustLevel
    verificationMethod: str
    confidence: int
    autoApproved: bool
    requiresManualReview: bool
    rejected: bool
    reason: str


class VerificationReport(BaseModel):
    """Audit bundle of one verification run."""

    steps: list[VerificationStep]
    factSheet: CertificateFact
    nameMatch: NameMatchResult
    urlLiveness: Optional[LivenessResult] = None
    decision: FinalDecision
