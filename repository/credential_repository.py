# repository/credential_repository.py
from typing import Iterable, List, Optional, Set
from redis.asyncio import Redis
from config.cache import get_redis
from model.credential import AccessRequest, CredentialRecord
from repository.namespaces import (
    ACCESS_REQUESTS,
    ANSWERED,
    DOCUMENTS,
    OWNER_DOCS,
    SHARES,
    STUDENT_REQUESTS,
)


def _decode_ids(raw: Iterable[object]) -> Set[str]:
    return {
        v.decode("utf-8") if isinstance(v, (bytes, bytearray)) else str(v) for v in raw
    }


class CredentialRepository:
    """
    Redis-backed credential store.

    Flow:
    - Documents are JSON blobs under DOCUMENTS:<certId>; SET NX makes ids write-once.
    - OWNER_DOCS:<ownerId> indexes an owner's documents.
    - Access requests live under ACCESS_REQUESTS:<id>, indexed per student.
    - SHARES:<verifierId>:<ownerId> holds the doc ids the owner consented to share.
    No TTLs: stored credentials are permanent.
    """

    def __init__(self, redis: Optional[Redis] = None) -> None:
        self._redis = redis

    async def _client(self) -> Redis:
        if self._redis is not None:
            return self._redis
        return await get_redis()

    @staticmethod
    def _doc_key(cert_id: str) -> str:
        return f"{DOCUMENTS}:{cert_id}"

    @staticmethod
    def _owner_key(owner_id: str) -> str:
        return f"{OWNER_DOCS}:{owner_id}"

    @staticmethod
    def _request_key(request_id: str) -> str:
        return f"{ACCESS_REQUESTS}:{request_id}"

    @staticmethod
    def _student_requests_key(student_id: str) -> str:
        return f"{STUDENT_REQUESTS}:{student_id}"

    @staticmethod
    def _share_key(verifier_id: str, owner_id: str) -> str:
        return f"{SHARES}:{verifier_id}:{owner_id}"

    # ---------------- Documents ----------------

    async def create_document(self, record: CredentialRecord) -> bool:
        """Returns False when a document with the same id already exists."""
        r = await self._client()
        payload = record.model_dump_json().encode("utf-8")
        created = await r.set(self._doc_key(record.certId), payload, nx=True)
        if not created:
            return False
        await r.sadd(self._owner_key(record.ownerId), record.certId)
        return True

    async def save_document(self, record: CredentialRecord) -> None:
        r = await self._client()
        await r.set(self._doc_key(record.certId), record.model_dump_json().encode("utf-8"))

    async def get_document(self, cert_id: str) -> Optional[CredentialRecord]:
        if not cert_id:
            return None
        r = await self._client()
        raw = await r.get(self._doc_key(cert_id))
        if raw is None:
            return None
        return CredentialRecord.model_validate_json(raw)

    async def get_documents(self, cert_ids: Iterable[str]) -> List[CredentialRecord]:
        out: List[CredentialRecord] = []
        for cid in sorted(cert_ids):
            rec = await self.get_document(cid)
            if rec is not None:
                out.append(rec)
        return out

    async def owner_document_ids(self, owner_id: str) -> Set[str]:
        r = await self._client()
        return _decode_ids(await r.smembers(self._owner_key(owner_id)))

    # ---------------- Access requests ----------------

    async def save_request(self, request: AccessRequest) -> None:
        r = await self._client()
        await r.set(
            self._request_key(request.requestId),
            request.model_dump_json().encode("utf-8"),
        )
        await r.sadd(self._student_requests_key(request.studentId), request.requestId)

    async def get_request(self, request_id: str) -> Optional[AccessRequest]:
        if not request_id:
            return None
        r = await self._client()
        raw = await r.get(self._request_key(request_id))
        if raw is None:
            return None
        return AccessRequest.model_validate_json(raw)

    async def claim_answer(self, request_id: str) -> bool:
        """
        Write-once marker taken before an answer is applied. Only the first of
        several concurrent answers gets True.
        """
        r = await self._client()
        return bool(await r.set(f"{ANSWERED}:{request_id}", b"1", nx=True))

    async def student_request_ids(self, student_id: str) -> Set[str]:
        r = await self._client()
        return _decode_ids(await r.smembers(self._student_requests_key(student_id)))

    # ---------------- Shares ----------------

    async def add_shares(self, verifier_id: str, owner_id: str, doc_ids: Iterable[str]) -> int:
        ids = list(doc_ids)
        if not ids:
            return 0
        r = await self._client()
        return int(await r.sadd(self._share_key(verifier_id, owner_id), *ids))

    async def shared_document_ids(self, verifier_id: str, owner_id: str) -> Set[str]:
        r = await self._client()
        return _decode_ids(await r.smembers(self._share_key(verifier_id, owner_id)))
