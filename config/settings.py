# config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(..., validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(..., validation_alias="RATE_LIMIT_SECONDS")
    MAX_FILE_MB: int = Field(default=10, validation_alias="MAX_FILE_MB")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Vision model (Gemini generateContent REST API)
    GEMINI_API_KEY: str = Field(..., validation_alias="GEMINI_API_KEY")
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash", validation_alias="GEMINI_MODEL")
    GEMINI_API_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
        validation_alias="GEMINI_API_URL",
    )
    VISION_TIMEOUT_SECONDS: float = Field(default=30.0, validation_alias="VISION_TIMEOUT_SECONDS")

    # Verification URL liveness check
    LIVENESS_TIMEOUT_SECONDS: float = Field(default=10.0, validation_alias="LIVENESS_TIMEOUT_SECONDS")
    LIVENESS_MAX_BYTES: int = Field(default=1024 * 1024, validation_alias="LIVENESS_MAX_BYTES")
    LIVENESS_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )

    # PDF -> PNG rendering (long edge in pixels)
    PDF_MAX_DIMENSION: int = Field(default=1024, validation_alias="PDF_MAX_DIMENSION")

    # One-time codes (student detail edits)
    OTP_TTL_SECONDS: int = Field(default=300, validation_alias="OTP_TTL_SECONDS")
    SMTP_HOST: str = Field(default="smtp.gmail.com", validation_alias="SMTP_HOST")
    SMTP_PORT: int = Field(default=587, validation_alias="SMTP_PORT")
    SMTP_USER: str = Field(default="", validation_alias="SMTP_USER")
    SMTP_PASSWORD: str = Field(default="", validation_alias="SMTP_PASSWORD")
    SMTP_TIMEOUT_SECONDS: float = Field(default=10.0, validation_alias="SMTP_TIMEOUT_SECONDS")
    OTP_EMAIL_SUBJECT: str = "BlockVerify - Student Details Update Verification"

    # Logging knobs
    LOGGER_NAME: str = "cert-verify"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    # Prompts
    VISION_PROMPT: str = (
        "You are a certificate verification expert. Analyze this certificate image and extract the "
        "following information as a single JSON object:\n"
        "\n"
        "{\n"
        '  "recipientName": "Full name of the person who received the certificate",\n'
        '  "courseName": "Name of the course or certification",\n'
        '  "issuer": "Organization that issued the certificate (e.g., IBM, Coursera)",\n'
        '  "issueDate": "Date when the certificate was issued, as printed",\n'
        '  "verificationUrl": "Any URL shown on the certificate for verification, or \\"Not found\\"",\n'
        '  "hasQRCode": true or false,\n'
        '  "certificateType": "Type of certificate (e.g., Course Completion, Professional Certificate)",\n'
        '  "additionalInfo": "Any other relevant information"\n'
        "}\n"
        "\n"
        "RULES:\n"
        "1. Look carefully for ANY URL on the certificate: bottom edge, corners, small print, "
        'or text near "Verify at:".\n'
        '2. The recipient name may be printed in a different order (e.g., "M Navaneeth" or "Navaneeth M").\n'
        "3. Report the EXACT name printed on the certificate. Do not copy the expected name below "
        "unless it is what the certificate actually shows.\n"
        "4. Set hasQRCode to true only if a QR code is visible.\n"
        "\n"
        'Expected student name for verification: "{student_name}"\n'
        "\n"
        "Return ONLY the JSON object. No code fences, no extra prose."
    )


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
