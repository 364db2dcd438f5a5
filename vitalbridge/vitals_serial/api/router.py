from __future__ import annotations
from typing import Any, Dict

from fastapi import APIRouter

from ..xVitalsSerialService import xVitalsSerialService


def get_router(svc: xVitalsSerialService) -> APIRouter:
    r = APIRouter(prefix="/api", tags=["vitals"])

    @r.get("/healthz")
    def healthz() -> Dict[str, Any]:
        return {"ok": True, "status": svc.status()}

    @r.get("/data")
    def data() -> Dict[str, Any]:
        return svc.payload()

    return r
