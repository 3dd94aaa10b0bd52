"""Tests for core.verification_pipeline."""

import asyncio

import pytest

from core.verification_pipeline import VerificationPipeline
from model.certificate import (
    CertificateFact,
    DecisionStatus,
    LivenessResult,
    StepStatus,
    TrustLevel,
)
from tests.doubles import StubExtractor, StubLiveness
from util.errors import ConversionError, VisionServiceError


def _steps(report_or_error):
    return [(s.index, s.name, s.status) for s in report_or_error.steps]


class TestImageUpload:
    def test_full_run_with_live_url(self, fact_sheet):
        extractor = StubExtractor(fact=fact_sheet)
        liveness = StubLiveness()
        pipeline = VerificationPipeline(extractor, liveness)

        report = asyncio.run(pipeline.verify(b"png-bytes", "image/png", "M Navaneeth"))

        assert _steps(report) == [
            (1, "AI Vision Analysis", StepStatus.success),
            (2, "Name Verification", StepStatus.success),
            (3, "URL Verification", StepStatus.success),
        ]
        assert report.nameMatch.confidence == 95
        assert report.decision.status == DecisionStatus.APPROVED
        assert report.decision.trustLevel == TrustLevel.HIGHEST
        assert extractor.calls == [(b"png-bytes", "M Navaneeth", "image/png")]
        assert liveness.calls == [("coursera.org/verify/ABC123", "M Navaneeth")]

    def test_missing_url_is_recorded_without_liveness(self, fact_sheet):
        fact = fact_sheet.model_copy(update={"verificationUrl": "Not found", "hasQRCode": True})
        liveness = StubLiveness()
        pipeline = VerificationPipeline(StubExtractor(fact=fact), liveness)

        report = asyncio.run(pipeline.verify(b"img", "image/jpeg", "Navaneeth M"))

        assert report.steps[-1].status == StepStatus.not_found
        assert report.urlLiveness is None
        assert liveness.calls == []
        assert report.decision.verificationMethod == "AI_QR_CODE"

    @pytest.mark.parametrize(
        "liveness,status",
        [
            (LivenessResult(reachable=False, httpStatus=404), StepStatus.failed),
            (LivenessResult(reachable=False, note="blocked", error="ReadTimeout"), StepStatus.warning),
        ],
    )
    def test_url_step_status(self, fact_sheet, liveness, status):
        pipeline = VerificationPipeline(StubExtractor(fact=fact_sheet), StubLiveness(liveness))
        report = asyncio.run(pipeline.verify(b"img", "image/png", "Navaneeth M"))
        assert report.steps[-1].status == status
        assert report.decision.verificationMethod == "AI_URL_EXISTS"

    def test_name_mismatch_completes_with_rejection(self, fact_sheet):
        pipeline = VerificationPipeline(StubExtractor(fact=fact_sheet), StubLiveness())
        report = asyncio.run(pipeline.verify(b"img", "image/png", "Alice Wong"))
        assert report.steps[1].status == StepStatus.failed
        assert report.decision.status == DecisionStatus.REJECTED

    def test_empty_recipient_name_is_missing(self):
        fact = CertificateFact(issuer="IBM")
        pipeline = VerificationPipeline(StubExtractor(fact=fact), StubLiveness())
        report = asyncio.run(pipeline.verify(b"img", "image/png", "Jane Doe"))
        assert report.nameMatch.method.value == "missing"
        assert report.decision.rejected is True

    def test_vision_failure_aborts_with_one_failed_step(self):
        liveness = StubLiveness()
        pipeline = VerificationPipeline(
            StubExtractor(error=VisionServiceError("Vision model returned HTTP 503")), liveness
        )

        with pytest.raises(VisionServiceError) as exc:
            asyncio.run(pipeline.verify(b"img", "image/png", "Jane Doe"))

        assert _steps(exc.value) == [(1, "AI Vision Analysis", StepStatus.failed)]
        assert liveness.calls == []


class TestPdfUpload:
    def test_pdf_is_rendered_before_vision(self, fact_sheet):
        rendered = []

        def renderer(data, max_dimension):
            rendered.append((data, max_dimension))
            return b"rendered-png"

        extractor = StubExtractor(fact=fact_sheet)
        pipeline = VerificationPipeline(
            extractor, StubLiveness(), pdf_renderer=renderer, pdf_max_dimension=512
        )

        report = asyncio.run(pipeline.verify(b"%PDF", "application/pdf", "Navaneeth M"))

        assert rendered == [(b"%PDF", 512)]
        assert extractor.calls == [(b"rendered-png", "Navaneeth M", "image/png")]
        assert [s.name for s in report.steps][:2] == ["PDF Conversion", "AI Vision Analysis"]
        assert report.steps[0].status == StepStatus.success

    def test_conversion_failure_stops_before_vision(self):
        def renderer(data, max_dimension):
            raise ConversionError("PDF conversion failed: FileDataError")

        extractor = StubExtractor()
        pipeline = VerificationPipeline(extractor, StubLiveness(), pdf_renderer=renderer)

        with pytest.raises(ConversionError) as exc:
            asyncio.run(pipeline.verify(b"%PDF", "application/pdf", "Jane Doe"))

        assert _steps(exc.value) == [(1, "PDF Conversion", StepStatus.failed)]
        assert extractor.calls == []
