from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from api.redlining import error_response
from pins.store import PinStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _store(request: Request) -> PinStore:
    return request.app.state.pins


@router.get("/add-pin")
def add_pin(
    request: Request,
    userId: str | None = None,
    pinId: str | None = None,
    latitude: str | None = None,
    longitude: str | None = None,
    timestamp: str | None = None,
):
    if None in (userId, pinId, latitude, longitude, timestamp):
        return error_response(400, "Missing required parameters")
    try:
        pin = {
            "id": pinId,
            "latitude": float(latitude),  # type: ignore[arg-type]
            "longitude": float(longitude),  # type: ignore[arg-type]
            "userId": userId,
            "timestamp": int(timestamp),  # type: ignore[arg-type]
        }
    except ValueError:
        return error_response(400, "Invalid numeric parameters")

    try:
        _store(request).add_document(userId, pinId, pin)  # type: ignore[arg-type]
    except Exception as e:
        logger.exception("add-pin failed")
        return error_response(500, str(e))
    return {"result": "success", "pin": pin}


@router.get("/get-all-pins")
def get_all_pins(request: Request):
    try:
        pins = _store(request).get_all_pins()
    except Exception as e:
        logger.exception("get-all-pins failed")
        return error_response(500, str(e))
    return {"result": "success", "pins": pins}


@router.get("/drop-pins")
def drop_pins(request: Request, userId: str | None = None):
    if userId is None:
        return error_response(400, "Missing required userId parameter")
    try:
        _store(request).clear_user(userId)
    except Exception as e:
        logger.exception("drop-pins failed")
        return error_response(500, str(e))
    return {
        "result": "success",
        "message": f"All pins for user {userId} have been cleared",
    }
