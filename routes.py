# routes.py
from fastapi import FastAPI
from controller.access_controller import access_router
from controller.certificate_controller import certificate_router
from controller.otp_controller import otp_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(certificate_router)
    app.include_router(access_router)
    app.include_router(otp_router)
