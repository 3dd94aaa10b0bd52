# service/credential_service.py
import logging
import time
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4
from core.trust_engine import storage_action_for
from model.certificate import StorageAction, VerificationReport
from model.credential import (
    AccessRequest,
    AccessRequestStatus,
    CredentialRecord,
    DocumentStatus,
    DocumentType,
)
from repository.credential_repository import CredentialRepository
from util.enums import ErrorMessage
from util.errors import AppError
from util.functions import content_id

logger = logging.getLogger(__name__)


class CredentialService:
    """
    Consent-gated credential store.

    Documents: PENDING -> APPROVED | REJECTED (university review); auto-verified
    uploads start APPROVED. Verifiers see a student's document only after the
    student shared it, either directly or by approving an access request.
    """

    def __init__(
        self, repo: CredentialRepository, clock: Callable[[], float] = time.time
    ) -> None:
        self._repo = repo
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    async def store_certificate(
        self,
        owner_id: str,
        cert_id: str,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
        auto_verified: bool = False,
        doc_type: DocumentType = DocumentType.certificate,
    ) -> CredentialRecord:
        record = CredentialRecord(
            certId=cert_id,
            ownerId=owner_id,
            name=name,
            docType=doc_type,
            metadata=metadata or {},
            autoVerified=auto_verified,
            status=DocumentStatus.APPROVED if auto_verified else DocumentStatus.PENDING,
            createdAt=self._now(),
        )
        if not await self._repo.create_document(record):
            logger.warning("store.duplicate cert=%s", cert_id)
            raise AppError.of(ErrorMessage.DOCUMENT_EXISTS)
        logger.info(
            "store.ok cert=%s type=%s owner=%s auto=%s status=%s",
            cert_id,
            doc_type.value,
            owner_id,
            auto_verified,
            record.status.value,
        )
        return record

    async def record_verified_upload(
        self, owner_id: str, name: str, file_bytes: bytes, report: VerificationReport
    ) -> CredentialRecord:
        """
        Persist an upload according to its trust decision:
        HIGHEST/HIGH -> stored auto-verified, MEDIUM -> stored pending review,
        anything else -> refused (nothing written).
        """
        action = storage_action_for(report.decision)
        if action == StorageAction.refuse:
            logger.info(
                "store.refused owner=%s trust=%s status=%s",
                owner_id,
                report.decision.trustLevel.value,
                report.decision.status.value,
            )
            raise AppError.of(ErrorMessage.UPLOAD_REFUSED)

        metadata = {
            "decision": report.decision.model_dump(mode="json"),
            "factSheet": report.factSheet.model_dump(mode="json"),
        }
        return await self.store_certificate(
            owner_id=owner_id,
            cert_id=content_id(file_bytes),
            name=name,
            metadata=metadata,
            auto_verified=action == StorageAction.store_verified,
        )

    async def store_grade_sheet(
        self,
        owner_id: str,
        issuer_id: str,
        semester: str,
        academic_year: str,
        file_name: str,
        file_type: str,
        file_bytes: bytes,
    ) -> CredentialRecord:
        """
        Grade sheets come from the issuing university, not the AI pipeline:
        always stored PENDING, never auto-verified.
        """
        metadata = {
            "issuerId": issuer_id,
            "semester": semester,
            "academicYear": academic_year,
            "fileName": file_name,
            "fileSize": len(file_bytes),
            "fileType": file_type,
        }
        return await self.store_certificate(
            owner_id=owner_id,
            cert_id=content_id(file_bytes),
            name=f"{semester} {academic_year}",
            metadata=metadata,
            auto_verified=False,
            doc_type=DocumentType.grade_sheet,
        )

    async def get_certificate(self, cert_id: str) -> CredentialRecord:
        record = await self._repo.get_document(cert_id)
        if record is None:
            raise AppError.of(ErrorMessage.DOCUMENT_NOT_FOUND)
        return record

    async def set_status(self, cert_id: str, status: DocumentStatus) -> CredentialRecord:
        record = await self.get_certificate(cert_id)
        if record.status != DocumentStatus.PENDING or status == DocumentStatus.PENDING:
            raise AppError.of(ErrorMessage.STATUS_LOCKED)
        updated = record.model_copy(update={"status": status})
        await self._repo.save_document(updated)
        logger.info("review.ok cert=%s status=%s", cert_id, status.value)
        return updated

    async def list_owner_documents(self, owner_id: str) -> List[CredentialRecord]:
        return await self._repo.get_documents(await self._repo.owner_document_ids(owner_id))

    async def _shareable(self, owner_id: str, doc_id: str) -> CredentialRecord:
        record = await self.get_certificate(doc_id)
        if record.ownerId != owner_id:
            raise AppError.of(ErrorMessage.NOT_DOCUMENT_OWNER)
        if record.status == DocumentStatus.REJECTED:
            raise AppError.of(ErrorMessage.DOCUMENT_REJECTED)
        return record

    async def request_access(
        self, verifier_id: str, student_id: str, purpose: Optional[str] = None
    ) -> AccessRequest:
        request = AccessRequest(
            requestId=str(uuid4()),
            verifierId=verifier_id,
            studentId=student_id,
            purpose=purpose,
            createdAt=self._now(),
        )
        await self._repo.save_request(request)
        logger.info(
            "access.requested id=%s verifier=%s student=%s",
            request.requestId,
            verifier_id,
            student_id,
        )
        return request

    async def list_access_requests(self, student_id: str) -> List[AccessRequest]:
        out: List[AccessRequest] = []
        for rid in await self._repo.student_request_ids(student_id):
            req = await self._repo.get_request(rid)
            if req is not None:
                out.append(req)
        return sorted(out, key=lambda r: (r.createdAt, r.requestId))

    async def respond_to_access_request(
        self,
        request_id: str,
        student_id: str,
        approve: bool,
        selected_doc_ids: List[str],
    ) -> AccessRequest:
        request = await self._repo.get_request(request_id)
        if request is None:
            raise AppError.of(ErrorMessage.REQUEST_NOT_FOUND)
        if request.studentId != student_id:
            raise AppError.of(ErrorMessage.NOT_REQUEST_RECIPIENT)
        if request.status != AccessRequestStatus.pending:
            raise AppError.of(ErrorMessage.REQUEST_CLOSED)

        shared: List[str] = []
        if approve:
            # Validate every selection before sharing any of them.
            for doc_id in dict.fromkeys(selected_doc_ids):
                await self._shareable(student_id, doc_id)
                shared.append(doc_id)
        if not await self._repo.claim_answer(request_id):
            logger.warning("access.answer.race id=%s", request_id)
            raise AppError.of(ErrorMessage.REQUEST_CLOSED)
        if shared:
            await self._repo.add_shares(request.verifierId, student_id, shared)

        answered = request.model_copy(
            update={
                "status": AccessRequestStatus.approved if approve else AccessRequestStatus.rejected,
                "sharedDocIds": shared,
                "respondedAt": self._now(),
            }
        )
        await self._repo.save_request(answered)
        logger.info(
            "access.answered id=%s approve=%s shared=%d", request_id, approve, len(shared)
        )
        return answered

    async def share_document(self, owner_id: str, doc_id: str, verifier_id: str) -> CredentialRecord:
        record = await self._shareable(owner_id, doc_id)
        await self._repo.add_shares(verifier_id, owner_id, [doc_id])
        logger.info("share.ok doc=%s verifier=%s", doc_id, verifier_id)
        return record

    async def get_shared_documents(self, verifier_id: str, owner_id: str) -> List[CredentialRecord]:
        ids = await self._repo.shared_document_ids(verifier_id, owner_id)
        # A document rejected after it was shared stops being visible.
        return [
            d
            for d in await self._repo.get_documents(ids)
            if d.status != DocumentStatus.REJECTED
        ]
