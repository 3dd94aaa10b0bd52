"""Tests for service.certificate_service upload handling."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from service.certificate_service import CertificateService
from util.errors import AppError


def _upload(content_type, read):
    upload = MagicMock()
    upload.content_type = content_type
    upload.filename = "cert.png"
    upload.read = read
    upload.seek = AsyncMock()
    return upload


class TestReadUpload:
    def test_read_failure_propagates_unchanged(self):
        upload = _upload("image/png", AsyncMock(side_effect=OSError("disk gone")))
        with pytest.raises(OSError, match="disk gone"):
            asyncio.run(CertificateService._read_upload(upload))

    def test_empty_file(self):
        upload = _upload("image/png", AsyncMock(return_value=b""))
        with pytest.raises(AppError) as exc:
            asyncio.run(CertificateService._read_upload(upload))
        assert exc.value.status_code == 400

    def test_jpg_alias_is_normalized(self):
        upload = _upload("image/jpg", AsyncMock(return_value=b"jpeg"))
        data, mime = asyncio.run(CertificateService._read_upload(upload))
        assert (data, mime) == (b"jpeg", "image/jpeg")
        upload.seek.assert_awaited_once_with(0)

    def test_unsupported_type_is_not_read(self):
        read = AsyncMock(return_value=b"text")
        with pytest.raises(AppError) as exc:
            asyncio.run(CertificateService._read_upload(_upload("text/html", read)))
        assert exc.value.status_code == 415
        read.assert_not_awaited()
