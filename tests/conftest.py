"""Shared fixtures for the certificate verification test suite."""

import os

import pytest

# Settings are read at import time; make sure they validate.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost:3000")
os.environ.setdefault("RATE_LIMIT_TIMES", "100")
os.environ.setdefault("RATE_LIMIT_SECONDS", "60")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")

from model.certificate import CertificateFact  # noqa: E402


class FakeClock:
    """Manually advanced time source for expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fact_sheet():
    """A typical vision answer for a Coursera-style certificate."""
    return CertificateFact(
        recipientName="Navaneeth M",
        courseName="Python for Data Science",
        issuer="IBM",
        issueDate="March 3, 2024",
        verificationUrl="coursera.org/verify/ABC123",
        hasQRCode=False,
        certificateType="Course Completion",
    )
