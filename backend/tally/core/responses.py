"""
Tally Backend - Response Envelope
==================================

What:  Wraps every JSON payload in the same envelope.
How:   Pure functions; the HTTP status is always chosen by the caller.

    get_success(data)     → {"ok": true,  "data": data}
    get_failure(message)  → {"ok": false, "message": message}

Exception handlers extend the failure envelope with `error`, `details`
and `request_id` through keyword arguments.
"""

from typing import Any, Dict


def get_success(data: Any = None) -> Dict[str, Any]:
    return {"ok": True, "data": data}


def get_failure(message: str = "Request failed", **extra: Any) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"ok": False, "message": message}
    # None values are dropped so optional fields do not show up as nulls
    envelope.update({key: value for key, value in extra.items() if value is not None})
    return envelope
