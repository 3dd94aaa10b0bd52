# core/trust_engine.py
import logging
from typing import Optional
from model.certificate import (
    DecisionStatus,
    FinalDecision,
    LivenessResult,
    NameMatchResult,
    StorageAction,
    TrustLevel,
)

logger = logging.getLogger(__name__)

REASONS = {
    DecisionStatus.APPROVED: "Certificate verified successfully",
    DecisionStatus.PENDING: "Requires manual review",
    DecisionStatus.REJECTED: "Name mismatch - certificate may not belong to this student",
}


def _decision(
    status: DecisionStatus, trust: TrustLevel, method: str, confidence: int
) -> FinalDecision:
    return FinalDecision(
        status=status,
        trustLevel=trust,
        verificationMethod=method,
        confidence=confidence,
        autoApproved=status == DecisionStatus.APPROVED,
        requiresManualReview=status == DecisionStatus.PENDING,
        rejected=status == DecisionStatus.REJECTED,
        reason=REASONS[status],
    )


def decide(
    name_match: NameMatchResult,
    has_verification_url: bool,
    url_liveness: Optional[LivenessResult],
    has_qr_code: bool,
) -> FinalDecision:
    """
    Ordered rule cascade; the first rule that holds is the outcome.

      no name match                         REJECTED  NONE     NAME_MISMATCH
      conf>=95, URL live, name on page      APPROVED  HIGHEST  AI_URL_VERIFIED_WITH_NAME
      conf>=95, URL live                    APPROVED  HIGH     AI_URL_VERIFIED
      conf>=95, URL printed (inconclusive)  APPROVED  HIGH     AI_URL_EXISTS
      conf>=95, QR code                     APPROVED  HIGH     AI_QR_CODE
      conf>=90, URL printed                 APPROVED  MEDIUM   AI_URL
      conf>=85                              PENDING   MEDIUM   AI_NAME_MATCH
      conf>=70                              PENDING   LOW      AI_PARTIAL_MATCH
    """
    confidence = name_match.confidence

    if not name_match.match:
        return _decision(DecisionStatus.REJECTED, TrustLevel.NONE, "NAME_MISMATCH", confidence)

    reachable = url_liveness is not None and url_liveness.reachable
    name_found = reachable and url_liveness.nameFound

    if confidence >= 95 and reachable and name_found:
        return _decision(
            DecisionStatus.APPROVED, TrustLevel.HIGHEST, "AI_URL_VERIFIED_WITH_NAME", confidence
        )
    if confidence >= 95 and reachable:
        return _decision(DecisionStatus.APPROVED, TrustLevel.HIGH, "AI_URL_VERIFIED", confidence)
    if confidence >= 95 and has_verification_url:
        return _decision(DecisionStatus.APPROVED, TrustLevel.HIGH, "AI_URL_EXISTS", confidence)
    if confidence >= 95 and has_qr_code:
        return _decision(DecisionStatus.APPROVED, TrustLevel.HIGH, "AI_QR_CODE", confidence)
    if confidence >= 90 and has_verification_url:
        return _decision(DecisionStatus.APPROVED, TrustLevel.MEDIUM, "AI_URL", confidence)
    if confidence >= 85:
        return _decision(DecisionStatus.PENDING, TrustLevel.MEDIUM, "AI_NAME_MATCH", confidence)
    if confidence >= 70:
        return _decision(DecisionStatus.PENDING, TrustLevel.LOW, "AI_PARTIAL_MATCH", confidence)

    # compare_names never reports a match below 70; reaching this line means a
    # caller built the NameMatchResult by hand.
    logger.warning(
        "trust.invariant_violation match=True conf=%d method=%s",
        confidence,
        name_match.method.value,
    )
    return _decision(DecisionStatus.PENDING, TrustLevel.LOW, "AI_ONLY", confidence)


def storage_action_for(decision: FinalDecision) -> StorageAction:
    """
    What the credential store may do with a verified upload:
    HIGHEST/HIGH are stored as auto-verified, MEDIUM waits for university review,
    anything else (LOW, NONE, REJECTED) is refused outright.
    """
    if decision.status == DecisionStatus.REJECTED:
        return StorageAction.refuse
    if decision.trustLevel in (TrustLevel.HIGHEST, TrustLevel.HIGH):
        return StorageAction.store_verified
    if decision.trustLevel == TrustLevel.MEDIUM:
        return StorageAction.store_pending
    return StorageAction.refuse
