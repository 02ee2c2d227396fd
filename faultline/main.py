"""FastAPI application entrypoint for faultline."""

from fastapi import FastAPI

from faultline.api.error_codes import router as error_codes_router
from faultline.core.config import get_fault_settings
from faultline.core.errors import register_error_handlers
from faultline.core.logging import configure_logging


def create_app() -> FastAPI:
    """Build the API app with failure translation installed.

    Settings are loaded here so a malformed environment fails at startup.
    """
    configure_logging(get_fault_settings())

    application = FastAPI(title="faultline")
    register_error_handlers(application)
    application.include_router(error_codes_router)

    @application.get("/health")
    def health() -> dict[str, str]:
        """Health check stub endpoint for service readiness."""
        return {"status": "ok"}

    return application


app = create_app()
