# core/verification_pipeline.py
import asyncio
import logging
from typing import Callable, List, Optional
from config.settings import settings
from core.liveness_checker import LivenessChecker, has_verification_url
from core.name_matcher import compare_names
from core.pdf_image import PDF_MIME, render_first_page_png
from core.trust_engine import decide
from core.vision_extractor import VisionExtractor
from model.certificate import (
    LivenessResult,
    StepStatus,
    VerificationReport,
    VerificationStep,
)
from util.errors import ConversionError, VisionServiceError
from util.timing import timed

logger = logging.getLogger(__name__)

STEP_PDF = "PDF Conversion"
STEP_VISION = "AI Vision Analysis"
STEP_NAME = "Name Verification"
STEP_URL = "URL Verification"

PdfRenderer = Callable[[bytes, int], bytes]


def _begin(steps: List[VerificationStep], name: str) -> VerificationStep:
    step = VerificationStep(index=len(steps) + 1, name=name, status=StepStatus.processing)
    steps.append(step)
    return step


def _url_step_status(result: LivenessResult) -> StepStatus:
    if result.reachable:
        return StepStatus.success
    if result.httpStatus is not None:
        return StepStatus.failed
    # auth wall / timeout: inconclusive, not evidence against the certificate
    return StepStatus.warning


class VerificationPipeline:
    """
    End-to-end certificate check for one upload:
    1) PDF -> PNG (PDFs only)
    2) Vision model reads the fact sheet
    3) Expected name vs printed name
    4) Verification URL liveness (only when the certificate prints one)
    5) Trust decision
    Steps 1-2 are fatal on failure; the error carries the steps recorded so far.
    Each run keeps its own state; one instance may serve concurrent requests.
    """

    def __init__(
        self,
        extractor: VisionExtractor,
        liveness: LivenessChecker,
        pdf_renderer: PdfRenderer = render_first_page_png,
        pdf_max_dimension: int = settings.PDF_MAX_DIMENSION,
    ) -> None:
        self._extractor = extractor
        self._liveness = liveness
        self._render_pdf = pdf_renderer
        self._pdf_max_dimension = pdf_max_dimension

    async def verify(
        self, file_bytes: bytes, mime_type: str, expected_student_name: str
    ) -> VerificationReport:
        steps: List[VerificationStep] = []

        with timed(logger, "verify.pipeline", mime=mime_type, bytes=len(file_bytes)):
            image_bytes, image_mime = file_bytes, mime_type
            if mime_type == PDF_MIME:
                step = _begin(steps, STEP_PDF)
                try:
                    image_bytes = await asyncio.to_thread(
                        self._render_pdf, file_bytes, self._pdf_max_dimension
                    )
                except ConversionError as e:
                    step.status = StepStatus.failed
                    e.steps = steps
                    raise
                step.status = StepStatus.success
                image_mime = "image/png"

            step = _begin(steps, STEP_VISION)
            try:
                fact = await self._extractor.extract_facts(
                    image_bytes, expected_student_name, image_mime
                )
            except VisionServiceError as e:
                logger.error("verify.vision.error msg=%s", e.message)
                step.status = StepStatus.failed
                e.steps = steps
                raise
            step.status = StepStatus.success

            step = _begin(steps, STEP_NAME)
            name_match = compare_names(expected_student_name, fact.recipientName)
            step.status = StepStatus.success if name_match.match else StepStatus.failed
            logger.info(
                "verify.name conf=%d method=%s match=%s",
                name_match.confidence,
                name_match.method.value,
                name_match.match,
            )

            has_url = has_verification_url(fact.verificationUrl)
            liveness: Optional[LivenessResult] = None
            if has_url:
                step = _begin(steps, STEP_URL)
                liveness = await self._liveness.check_url(
                    fact.verificationUrl, expected_student_name
                )
                step.status = _url_step_status(liveness)
            else:
                steps.append(
                    VerificationStep(
                        index=len(steps) + 1, name=STEP_URL, status=StepStatus.not_found
                    )
                )

            decision = decide(name_match, has_url, liveness, fact.hasQRCode)

        logger.info(
            "verify.decision status=%s trust=%s method=%s",
            decision.status.value,
            decision.trustLevel.value,
            decision.verificationMethod,
        )
        return VerificationReport(
            steps=steps,
            factSheet=fact,
            nameMatch=name_match,
            urlLiveness=liveness,
            decision=decision,
        )
