# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "certverify"

DOCUMENTS: Final[str] = f"{ROOT}:docs"  # one JSON record per document id
OWNER_DOCS: Final[str] = f"{ROOT}:owner"  # set of document ids per owner
ACCESS_REQUESTS: Final[str] = f"{ROOT}:access"  # one JSON record per request id
STUDENT_REQUESTS: Final[str] = f"{ROOT}:student:requests"  # set of request ids per student
SHARES: Final[str] = f"{ROOT}:shares"  # set of shared doc ids per (verifier, owner)
ANSWERED: Final[str] = f"{ROOT}:access:answered"  # write-once marker per answered request
