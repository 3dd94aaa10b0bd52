# controller/certificate_controller.py
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from controller.controller_dependencies import (
    enforce_max_grade_sheet_size,
    enforce_max_upload_size,
    get_certificate_service,
    get_credential_service,
    rate_limiter,
)
from model.api import SetStatusRequest, UploadCertificateResponse, VerificationResponse
from model.credential import CredentialRecord
from service.certificate_service import CertificateService
from service.credential_service import CredentialService
from util.constants import InternalURIs

certificate_router = APIRouter(dependencies=[Depends(rate_limiter)])


@certificate_router.post(
    InternalURIs.VERIFY_CERTIFICATE,
    response_model=VerificationResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(enforce_max_upload_size)],
)
async def verify_certificate(
    certificate: UploadFile = File(...),
    studentName: str = Form(""),
    studentId: Optional[str] = Form(None),
    service: CertificateService = Depends(get_certificate_service),
) -> VerificationResponse:
    return await service.verify_certificate(certificate, studentName, studentId)


@certificate_router.post(
    InternalURIs.CERTIFICATES,
    response_model=UploadCertificateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_max_upload_size)],
)
async def upload_certificate(
    certificate: UploadFile = File(...),
    studentName: str = Form(""),
    ownerId: str = Form(...),
    certificateName: str = Form(""),
    service: CertificateService = Depends(get_certificate_service),
) -> UploadCertificateResponse:
    return await service.upload_certificate(
        certificate, studentName, ownerId, certificateName
    )


@certificate_router.get(InternalURIs.CERTIFICATE, response_model=CredentialRecord)
async def get_certificate(
    cert_id: str,
    service: CredentialService = Depends(get_credential_service),
) -> CredentialRecord:
    return await service.get_certificate(cert_id)


@certificate_router.post(InternalURIs.CERTIFICATE_STATUS, response_model=CredentialRecord)
async def set_certificate_status(
    cert_id: str,
    payload: SetStatusRequest,
    service: CredentialService = Depends(get_credential_service),
) -> CredentialRecord:
    return await service.set_status(cert_id, payload.status)


@certificate_router.post(
    InternalURIs.GRADE_SHEETS,
    response_model=CredentialRecord,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_max_grade_sheet_size)],
)
async def upload_grade_sheet(
    gradeSheet: UploadFile = File(...),
    ownerId: str = Form(..., min_length=1),
    issuerId: str = Form(..., min_length=1),
    semester: str = Form(..., min_length=1),
    academicYear: str = Form(..., min_length=1),
    service: CertificateService = Depends(get_certificate_service),
) -> CredentialRecord:
    return await service.upload_grade_sheet(
        gradeSheet, ownerId, issuerId, semester, academicYear
    )
