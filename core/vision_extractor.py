# core/vision_extractor.py
import asyncio
import base64
import json
import logging
from typing import Any, Dict, Optional
import httpx
from pydantic import ValidationError
from config.settings import settings
from model.certificate import CertificateFact
from util.errors import VisionServiceError
from util.timing import timed

logger = logging.getLogger(__name__)


def build_prompt(expected_student_name: str) -> str:
    # The prompt template contains literal JSON braces, so no str.format here.
    return settings.VISION_PROMPT.replace("{student_name}", expected_student_name.strip())


def extract_json_span(text: str) -> str:
    """
    Return the first balanced top-level {...} in free text.
    Braces inside JSON string literals are ignored, so a URL or note containing
    "}" does not end the object early. Raises VisionServiceError when no
    complete object exists.
    """
    start = text.find("{")
    if start < 0:
        raise VisionServiceError("Could not parse JSON from AI response")

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    raise VisionServiceError("AI response contains an unterminated JSON object")


def parse_fact_sheet(text: str) -> CertificateFact:
    """
    Untrusted model text -> typed CertificateFact.
    Phase 1 isolates the JSON span, phase 2 validates it against the schema.
    """
    span = extract_json_span(text)
    try:
        obj = json.loads(span)
    except json.JSONDecodeError as e:
        raise VisionServiceError(f"AI response is not valid JSON: {e.msg}") from e

    if not isinstance(obj, dict):
        raise VisionServiceError("AI response JSON is not an object")

    try:
        return CertificateFact.model_validate(obj)
    except ValidationError as e:
        raise VisionServiceError(
            f"AI response does not match the certificate schema ({e.error_count()} errors)"
        ) from e


def _response_text(data: Dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise VisionServiceError("Vision model returned no candidates")

    texts = [
        p.get("text") for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)
    ]
    text = "".join(texts).strip()
    if not text:
        raise VisionServiceError("Vision model returned an empty answer")
    return text


class VisionExtractor:
    """
    Reads a certificate image with a Gemini vision model.
    One call per image, no retries: any failure surfaces as VisionServiceError.
    """

    def __init__(
        self,
        api_key: str = settings.GEMINI_API_KEY,
        model: str = settings.GEMINI_MODEL,
        api_url: str = settings.GEMINI_API_URL,
        timeout: float = settings.VISION_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = api_url.replace("{model}", model)
        self._timeout = timeout
        self._transport = transport

    def _payload(self, image_bytes: bytes, expected_student_name: str, mime_type: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {"text": build_prompt(expected_student_name)},
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": base64.b64encode(image_bytes).decode("ascii"),
                            }
                        },
                    ]
                }
            ],
            "generationConfig": {"temperature": 0.0},
        }

    async def _send(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = {
            "x-goog-api-key": self._api_key,
            "content-type": "application/json",
        }
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            return await client.post(self._url, headers=headers, json=payload)

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        # httpx timeouts apply per read; wait_for bounds the whole exchange.
        try:
            r = await asyncio.wait_for(self._send(payload), self._timeout)
        except asyncio.TimeoutError as e:
            logger.error("vision.timeout after_s=%s", self._timeout)
            raise VisionServiceError(
                f"Vision model timed out after {self._timeout:g}s"
            ) from e
        except httpx.HTTPError as e:
            logger.error("vision.request_error err=%s", type(e).__name__)
            raise VisionServiceError(f"Vision model unreachable: {type(e).__name__}") from e

        if r.status_code // 100 != 2:
            logger.error("vision.bad_status status=%d", r.status_code)
            raise VisionServiceError(f"Vision model returned HTTP {r.status_code}")

        try:
            data = r.json()
        except ValueError as e:
            raise VisionServiceError("Vision model returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise VisionServiceError("Vision model returned an unexpected body")
        return data

    async def extract_facts(
        self,
        image_bytes: bytes,
        expected_student_name: str,
        mime_type: str = "image/png",
    ) -> CertificateFact:
        payload = self._payload(image_bytes, expected_student_name, mime_type)
        with timed(logger, "vision.extract", model=self._model, bytes=len(image_bytes)):
            data = await self._post(payload)

        fact = parse_fact_sheet(_response_text(data))
        logger.info(
            "vision.extract.fields name=%s url=%s qr=%s",
            bool(fact.recipientName),
            bool(fact.verificationUrl),
            fact.hasQRCode,
        )
        return fact
