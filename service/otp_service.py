# service/otp_service.py
import asyncio
import logging
import secrets
import smtplib
import time
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Callable, Dict, Optional, Protocol
from config.settings import settings
from util.enums import ErrorMessage
from util.errors import AppError
from util.functions import mask_email

logger = logging.getLogger(__name__)


class CodeSender(Protocol):
    async def send(self, email: str, code: str, student_name: Optional[str]) -> None: ...


class SmtpCodeSender:
    """Delivers one-time codes as plain-text mail over STARTTLS."""

    def __init__(
        self,
        host: str = settings.SMTP_HOST,
        port: int = settings.SMTP_PORT,
        user: str = settings.SMTP_USER,
        password: str = settings.SMTP_PASSWORD,
        timeout: float = settings.SMTP_TIMEOUT_SECONDS,
    ) -> None:
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._timeout = timeout

    def _message(self, email: str, code: str, student_name: Optional[str]) -> EmailMessage:
        ttl_min = max(1, settings.OTP_TTL_SECONDS // 60)
        msg = EmailMessage()
        msg["Subject"] = settings.OTP_EMAIL_SUBJECT
        msg["From"] = self._user
        msg["To"] = email
        msg.set_content(
            f"Hello {student_name or 'Student'},\n\n"
            "Your university is requesting to update your student details.\n"
            f"Verification code: {code}\n"
            f"The code expires in {ttl_min} minutes. Share it only with your "
            "university administrator.\n"
        )
        return msg

    def _send_blocking(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            smtp.starttls()
            if self._user:
                smtp.login(self._user, self._password)
            smtp.send_message(msg)

    async def send(self, email: str, code: str, student_name: Optional[str]) -> None:
        await asyncio.to_thread(self._send_blocking, self._message(email, code, student_name))


@dataclass(frozen=True)
class OtpEntry:
    code: str
    expires_at: float
    purpose: Optional[str] = None


def generate_code() -> str:
    return str(secrets.randbelow(900_000) + 100_000)


class OtpService:
    """
    One-time codes keyed by email. At most one live code per email: issuing a
    new one replaces the old. A code is consumed on successful verification
    and dropped once seen expired.
    """

    def __init__(
        self,
        sender: CodeSender,
        ttl_seconds: int = settings.OTP_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        code_factory: Callable[[], str] = generate_code,
    ) -> None:
        self._sender = sender
        self._ttl = ttl_seconds
        self._clock = clock
        self._new_code = code_factory
        self._codes: Dict[str, OtpEntry] = {}

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    async def send_code(
        self, email: str, student_name: Optional[str] = None, purpose: Optional[str] = None
    ) -> str:
        key = self._key(email)
        entry = OtpEntry(
            code=self._new_code(), expires_at=self._clock() + self._ttl, purpose=purpose
        )
        self._codes[key] = entry
        try:
            await self._sender.send(email.strip(), entry.code, student_name)
        except (smtplib.SMTPException, OSError) as e:
            # Only drop the code this call issued; a concurrent request may have replaced it.
            if self._codes.get(key) is entry:
                del self._codes[key]
            logger.error("otp.send.error to=%s err=%s", mask_email(key), type(e).__name__)
            raise AppError.of(ErrorMessage.OTP_SEND_FAILED) from e
        logger.info("otp.sent to=%s purpose=%s", mask_email(key), purpose)
        return entry.code

    def verify_code(self, email: str, code: str) -> None:
        key = self._key(email)
        entry = self._codes.get(key)
        if entry is None:
            raise AppError.of(ErrorMessage.OTP_NOT_FOUND)
        if self._clock() > entry.expires_at:
            self._codes.pop(key, None)
            logger.info("otp.expired to=%s", mask_email(key))
            raise AppError.of(ErrorMessage.OTP_EXPIRED)
        if not secrets.compare_digest(entry.code, code.strip()):
            logger.warning("otp.mismatch to=%s", mask_email(key))
            raise AppError.of(ErrorMessage.OTP_INVALID)
        self._codes.pop(key, None)
        logger.info("otp.verified to=%s", mask_email(key))
