# service/certificate_service.py
import logging
from typing import Optional, Tuple
from fastapi import UploadFile, status
from core.pdf_image import PDF_MIME
from core.verification_pipeline import VerificationPipeline
from model.api import FileInfo, UploadCertificateResponse, VerificationResponse
from model.certificate import VerificationReport
from model.credential import CredentialRecord
from service.credential_service import CredentialService
from util.enums import ErrorMessage
from util.errors import AppError, ConversionError, VerificationError, VisionServiceError
from util.functions import utc_now_iso

logger = logging.getLogger(__name__)

ACCEPTED_TYPES = {PDF_MIME, "image/png", "image/jpeg", "image/jpg", "image/webp"}


def _failure_envelope(e: VerificationError) -> AppError:
    """
    "We could not evaluate this certificate" -> error envelope with partial steps.
    A completed REJECTED decision never comes through here.
    """
    if isinstance(e, ConversionError):
        error, http_status = "PDF conversion failed", status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(e, VisionServiceError):
        error, http_status = "AI analysis failed", status.HTTP_502_BAD_GATEWAY
    else:
        error, http_status = "Verification failed", status.HTTP_500_INTERNAL_SERVER_ERROR
    return AppError(
        {
            "error": error,
            "message": f"Verification failed, service unavailable: {e.message}",
            "results": {"steps": [s.model_dump(mode="json") for s in e.steps]},
        },
        http_status,
    )


class CertificateService:
    def __init__(self, pipeline: VerificationPipeline, credentials: CredentialService) -> None:
        self._pipeline = pipeline
        self._credentials = credentials

    @staticmethod
    async def _read_upload(file: UploadFile) -> Tuple[bytes, str]:
        mime = (file.content_type or "").lower()
        if mime not in ACCEPTED_TYPES:
            logger.warning("upload.rejected type=%s", mime or "unknown")
            raise AppError.of(ErrorMessage.UNSUPPORTED_FILE_TYPE)
        data = await file.read()
        await file.seek(0)
        if not data:
            raise AppError.of(ErrorMessage.EMPTY_FILE)
        if mime == "image/jpg":
            mime = "image/jpeg"
        return data, mime

    async def _run(
        self, file: UploadFile, student_name: str, student_id: Optional[str]
    ) -> Tuple[bytes, VerificationReport, VerificationResponse]:
        if not (student_name or "").strip():
            raise AppError.of(ErrorMessage.STUDENT_NAME_REQUIRED)
        data, mime = await self._read_upload(file)
        logger.info("verify.start type=%s bytes=%d", mime, len(data))

        try:
            report = await self._pipeline.verify(data, mime, student_name)
        except VerificationError as e:
            logger.error("verify.aborted err=%s steps=%d", type(e).__name__, len(e.steps))
            raise _failure_envelope(e) from e

        response = VerificationResponse(
            timestamp=utc_now_iso(),
            studentName=student_name,
            studentId=student_id,
            fileInfo=FileInfo(name=file.filename, size=len(data), type=mime),
            steps=report.steps,
            factSheet=report.factSheet,
            nameMatch=report.nameMatch,
            verificationUrl=report.factSheet.verificationUrl if report.urlLiveness else None,
            urlLiveness=report.urlLiveness,
            decision=report.decision,
        )
        return data, report, response

    async def verify_certificate(
        self, file: UploadFile, student_name: str, student_id: Optional[str] = None
    ) -> VerificationResponse:
        _, _, response = await self._run(file, student_name, student_id)
        return response

    async def upload_certificate(
        self, file: UploadFile, student_name: str, owner_id: str, certificate_name: str
    ) -> UploadCertificateResponse:
        """Verify, then store according to the trust decision (or refuse)."""
        data, report, response = await self._run(file, student_name, owner_id)
        record = await self._credentials.record_verified_upload(
            owner_id=owner_id,
            name=certificate_name or file.filename or "certificate",
            file_bytes=data,
            report=report,
        )
        return UploadCertificateResponse(verification=response, record=record)

    async def upload_grade_sheet(
        self,
        file: UploadFile,
        owner_id: str,
        issuer_id: str,
        semester: str,
        academic_year: str,
    ) -> CredentialRecord:
        """University-issued grade sheet: stored for review, no AI check."""
        data, mime = await self._read_upload(file)
        logger.info("gradesheet.upload type=%s bytes=%d issuer=%s", mime, len(data), issuer_id)
        return await self._credentials.store_grade_sheet(
            owner_id=owner_id,
            issuer_id=issuer_id,
            semester=semester,
            academic_year=academic_year,
            file_name=file.filename or "grade-sheet",
            file_type=mime,
            file_bytes=data,
        )
