# util/functions.py
import hashlib
from datetime import datetime, timezone


def content_id(data: bytes) -> str:
    """
    Content address for an uploaded document: hex SHA-256 of its bytes.
    Same file -> same id, so re-uploads collide instead of duplicating.
    """
    return hashlib.sha256(data).hexdigest()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def mask_email(email: str) -> str:
    # Logs carry "j***@example.com", never the full address.
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"
