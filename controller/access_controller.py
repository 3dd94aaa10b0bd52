# controller/access_controller.py
from fastapi import APIRouter, Depends, status
from controller.controller_dependencies import get_credential_service, rate_limiter
from model.api import (
    AccessRequestAnswer,
    AccessRequestCreate,
    AccessRequestList,
    DocumentList,
    ShareRequest,
)
from model.credential import AccessRequest, CredentialRecord
from service.credential_service import CredentialService
from util.constants import InternalURIs

access_router = APIRouter(dependencies=[Depends(rate_limiter)])


@access_router.get(InternalURIs.OWNER_DOCUMENTS, response_model=DocumentList)
async def list_owner_documents(
    owner_id: str,
    service: CredentialService = Depends(get_credential_service),
) -> DocumentList:
    return DocumentList(documents=await service.list_owner_documents(owner_id))


@access_router.post(
    InternalURIs.ACCESS_REQUESTS,
    response_model=AccessRequest,
    status_code=status.HTTP_201_CREATED,
)
async def request_access(
    payload: AccessRequestCreate,
    service: CredentialService = Depends(get_credential_service),
) -> AccessRequest:
    return await service.request_access(
        payload.verifierId, payload.studentId, payload.purpose
    )


@access_router.get(InternalURIs.STUDENT_ACCESS_REQUESTS, response_model=AccessRequestList)
async def list_access_requests(
    student_id: str,
    service: CredentialService = Depends(get_credential_service),
) -> AccessRequestList:
    return AccessRequestList(requests=await service.list_access_requests(student_id))


@access_router.post(InternalURIs.ACCESS_REQUEST_RESPOND, response_model=AccessRequest)
async def respond_to_access_request(
    request_id: str,
    payload: AccessRequestAnswer,
    service: CredentialService = Depends(get_credential_service),
) -> AccessRequest:
    return await service.respond_to_access_request(
        request_id, payload.studentId, payload.approve, payload.selectedDocIds
    )


@access_router.post(InternalURIs.SHARES, response_model=CredentialRecord)
async def share_document(
    payload: ShareRequest,
    service: CredentialService = Depends(get_credential_service),
) -> CredentialRecord:
    return await service.share_document(payload.ownerId, payload.docId, payload.verifierId)


@access_router.get(InternalURIs.SHARED_DOCUMENTS, response_model=DocumentList)
async def get_shared_documents(
    verifier_id: str,
    owner_id: str,
    service: CredentialService = Depends(get_credential_service),
) -> DocumentList:
    return DocumentList(documents=await service.get_shared_documents(verifier_id, owner_id))
