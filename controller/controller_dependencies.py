# controller/controller_dependencies.py
from functools import lru_cache
from fastapi import File, HTTPException, Request, UploadFile
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from core.liveness_checker import LivenessChecker
from core.verification_pipeline import VerificationPipeline
from core.vision_extractor import VisionExtractor
from repository.credential_repository import CredentialRepository
from service.certificate_service import CertificateService
from service.credential_service import CredentialService
from service.otp_service import OtpService, SmtpCodeSender

rate_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)


def get_credential_service() -> CredentialService:
    _repo = CredentialRepository()
    return CredentialService(_repo)


def get_certificate_service() -> CertificateService:
    _pipeline = VerificationPipeline(VisionExtractor(), LivenessChecker())
    _service = CertificateService(_pipeline, get_credential_service())
    return _service


@lru_cache(maxsize=1)
def get_otp_service() -> OtpService:
    # Codes live in process memory; every request must see the same map.
    return OtpService(SmtpCodeSender())


async def _enforce_size(request: Request, upload: UploadFile) -> UploadFile:
    # Fast pre-check via Content-Length if present
    max_bytes = settings.MAX_FILE_MB * 1024 * 1024
    too_large = HTTPException(
        status_code=413,
        detail={
            "ok": False,
            "error": "file_too_large",
            "maxMb": settings.MAX_FILE_MB,
        },
    )
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > max_bytes:
        raise too_large

    # Hard cap while reading (works even without Content-Length)
    blob = await upload.read(max_bytes + 1)
    if len(blob) > max_bytes:
        raise too_large

    await upload.seek(0)
    return upload


async def enforce_max_upload_size(
    request: Request, certificate: UploadFile = File(...)
) -> UploadFile:
    return await _enforce_size(request, certificate)


async def enforce_max_grade_sheet_size(
    request: Request, gradeSheet: UploadFile = File(...)
) -> UploadFile:
    return await _enforce_size(request, gradeSheet)
