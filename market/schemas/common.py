# market/schemas/common.py
# JSON envelope shared by every endpoint: {success, message?, error?, data?}.
from typing import Any

from fastapi.encoders import jsonable_encoder


def ok(message: str, data: Any = None, **extra) -> dict:
    """Success envelope. Extra keys (e.g. old_status) are merged at the top level."""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    body.update(jsonable_encoder(extra))
    return body


def fail(error: str, message: str | None = None) -> dict:
    body = {"success": False, "error": error}
    if message:
        body["message"] = message
    return body
