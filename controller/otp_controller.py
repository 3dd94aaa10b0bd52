# controller/otp_controller.py
from fastapi import APIRouter, Depends
from config.settings import settings
from controller.controller_dependencies import get_otp_service, rate_limiter
from model.api import SendOtpRequest, SendOtpResponse, VerifyOtpRequest, VerifyOtpResponse
from service.otp_service import OtpService
from util.constants import InternalURIs
from util.enums import Environment

otp_router = APIRouter(dependencies=[Depends(rate_limiter)])


@otp_router.post(
    InternalURIs.SEND_OTP,
    response_model=SendOtpResponse,
    response_model_exclude_none=True,
)
async def send_otp(
    payload: SendOtpRequest,
    service: OtpService = Depends(get_otp_service),
) -> SendOtpResponse:
    code = await service.send_code(payload.email, payload.studentName, payload.purpose)
    return SendOtpResponse(
        success=True,
        message="OTP sent successfully",
        # Echoed only in development so the flow can be driven without a mailbox.
        otp=code if settings.APP_ENV == Environment.DEV else None,
    )


@otp_router.post(InternalURIs.VERIFY_OTP, response_model=VerifyOtpResponse)
async def verify_otp(
    payload: VerifyOtpRequest,
    service: OtpService = Depends(get_otp_service),
) -> VerifyOtpResponse:
    service.verify_code(payload.email, payload.otp)
    return VerifyOtpResponse(success=True, message="OTP verified successfully")
