# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    INTERNAL_ERROR = ErrorInfo("Internal Error", status.HTTP_502_BAD_GATEWAY)
    STUDENT_NAME_REQUIRED = ErrorInfo(
        "Student name is required", status.HTTP_400_BAD_REQUEST
    )
    UNSUPPORTED_FILE_TYPE = ErrorInfo(
        "Unsupported file type. Upload a PDF, PNG, JPEG or WEBP certificate",
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    )
    EMPTY_FILE = ErrorInfo("No certificate file provided", status.HTTP_400_BAD_REQUEST)
    UPLOAD_REFUSED = ErrorInfo(
        "Certificate verification failed. This certificate cannot be uploaded. "
        "Please ensure the certificate is authentic and matches your name.",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    DOCUMENT_EXISTS = ErrorInfo("Document already stored", status.HTTP_409_CONFLICT)
    DOCUMENT_NOT_FOUND = ErrorInfo("Document not found", status.HTTP_404_NOT_FOUND)
    STATUS_LOCKED = ErrorInfo(
        "Only pending documents can be reviewed", status.HTTP_409_CONFLICT
    )
    NOT_DOCUMENT_OWNER = ErrorInfo(
        "Document does not belong to this owner", status.HTTP_403_FORBIDDEN
    )
    DOCUMENT_REJECTED = ErrorInfo(
        "Rejected documents cannot be shared", status.HTTP_409_CONFLICT
    )
    REQUEST_NOT_FOUND = ErrorInfo("Access request not found", status.HTTP_404_NOT_FOUND)
    REQUEST_CLOSED = ErrorInfo(
        "Access request was already answered", status.HTTP_409_CONFLICT
    )
    NOT_REQUEST_RECIPIENT = ErrorInfo(
        "Access request is addressed to another student", status.HTTP_403_FORBIDDEN
    )
    OTP_SEND_FAILED = ErrorInfo("Failed to send OTP", status.HTTP_502_BAD_GATEWAY)
    OTP_NOT_FOUND = ErrorInfo("No OTP found for this email", status.HTTP_400_BAD_REQUEST)
    OTP_EXPIRED = ErrorInfo("OTP has expired", status.HTTP_400_BAD_REQUEST)
    OTP_INVALID = ErrorInfo("Invalid OTP", status.HTTP_400_BAD_REQUEST)
