from __future__ import annotations
import logging

from fastapi import FastAPI

from vitalbridge import __version__
from vitalbridge.vitals_serial.api import get_router as get_vitals_router
from vitalbridge.vitals_serial.xVitalsSerialService import xVitalsSerialService

logger = logging.getLogger("gateway")


def create_app(svc: xVitalsSerialService) -> FastAPI:
    """Build the HTTP app around an already constructed serial service.

    The service is not started here; the app serves placeholders and
    ``status: disconnected`` until the port is open.
    """
    app = FastAPI(title="VitalBridge", version=__version__)
    app.state.vitals = svc  # type: ignore[attr-defined]
    app.include_router(get_vitals_router(svc))
    logger.debug("App ready with %d routes", len(app.routes))
    return app
