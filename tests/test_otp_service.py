"""Tests for service.otp_service."""

import asyncio
import smtplib
from unittest.mock import MagicMock, patch

import pytest

from service.otp_service import OtpService, SmtpCodeSender, generate_code
from util.errors import AppError


class RecordingSender:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def send(self, email, code, student_name):
        if self.error is not None:
            raise self.error
        self.sent.append((email, code, student_name))


def _codes(*values):
    it = iter(values)
    return lambda: next(it)


class TestGenerateCode:
    def test_six_digits(self):
        for _ in range(50):
            code = generate_code()
            assert len(code) == 6
            assert code.isdigit()
            assert code[0] != "0"


class TestOtpService:
    def test_send_then_verify(self, clock):
        sender = RecordingSender()
        service = OtpService(sender, ttl_seconds=300, clock=clock, code_factory=_codes("123456"))

        code = asyncio.run(service.send_code("Student@Uni.edu", "Jane Doe", "details-update"))

        assert code == "123456"
        assert sender.sent == [("Student@Uni.edu", "123456", "Jane Doe")]
        service.verify_code("student@uni.edu", "123456")

    def test_code_is_single_use(self, clock):
        service = OtpService(RecordingSender(), clock=clock, code_factory=_codes("111111"))
        asyncio.run(service.send_code("a@b.c"))
        service.verify_code("a@b.c", "111111")

        with pytest.raises(AppError) as exc:
            service.verify_code("a@b.c", "111111")
        assert exc.value.detail == "No OTP found for this email"

    def test_unknown_email(self, clock):
        service = OtpService(RecordingSender(), clock=clock)
        with pytest.raises(AppError) as exc:
            service.verify_code("nobody@b.c", "000000")
        assert exc.value.status_code == 400
        assert exc.value.detail == "No OTP found for this email"

    def test_wrong_code_keeps_entry(self, clock):
        service = OtpService(RecordingSender(), clock=clock, code_factory=_codes("222222"))
        asyncio.run(service.send_code("a@b.c"))

        with pytest.raises(AppError) as exc:
            service.verify_code("a@b.c", "999999")
        assert exc.value.detail == "Invalid OTP"
        service.verify_code("a@b.c", "222222")

    def test_expiry_removes_entry(self, clock):
        service = OtpService(RecordingSender(), ttl_seconds=300, clock=clock, code_factory=_codes("333333"))
        asyncio.run(service.send_code("a@b.c"))

        clock.advance(300)
        with pytest.raises(AppError) as exc:
            service.verify_code("a@b.c", "000000")
        assert exc.value.detail == "Invalid OTP"

        clock.advance(1)
        with pytest.raises(AppError) as exc:
            service.verify_code("a@b.c", "333333")
        assert exc.value.detail == "OTP has expired"
        with pytest.raises(AppError) as exc:
            service.verify_code("a@b.c", "333333")
        assert exc.value.detail == "No OTP found for this email"

    def test_new_code_replaces_previous(self, clock):
        service = OtpService(RecordingSender(), clock=clock, code_factory=_codes("444444", "555555"))
        asyncio.run(service.send_code("a@b.c"))
        asyncio.run(service.send_code("a@b.c"))

        with pytest.raises(AppError):
            service.verify_code("a@b.c", "444444")
        service.verify_code("a@b.c", "555555")

    def test_send_failure_drops_code(self, clock):
        sender = RecordingSender(error=smtplib.SMTPAuthenticationError(535, b"bad credentials"))
        service = OtpService(sender, clock=clock, code_factory=_codes("666666"))

        with pytest.raises(AppError) as exc:
            asyncio.run(service.send_code("a@b.c"))
        assert exc.value.status_code == 502

        with pytest.raises(AppError) as exc:
            service.verify_code("a@b.c", "666666")
        assert exc.value.detail == "No OTP found for this email"


class TestSmtpCodeSender:
    def test_sends_plain_text_message(self):
        sender = SmtpCodeSender(host="smtp.test", port=2525, user="noreply@uni.edu", password="pw", timeout=3)
        smtp = MagicMock()
        with patch("service.otp_service.smtplib.SMTP") as smtp_cls:
            smtp_cls.return_value.__enter__.return_value = smtp
            asyncio.run(sender.send("jane@uni.edu", "123456", "Jane Doe"))

        smtp_cls.assert_called_once_with("smtp.test", 2525, timeout=3)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("noreply@uni.edu", "pw")
        msg = smtp.send_message.call_args.args[0]
        assert msg["To"] == "jane@uni.edu"
        assert "123456" in msg.get_content()
        assert "Jane Doe" in msg.get_content()
