"""Small helpers shared by the Google token and calendar clients."""

from __future__ import annotations

import json
from typing import Any

import httpx


def read_json(response: httpx.Response) -> Any:
    """Decode a JSON body, degrading to ``{}`` when it isn't JSON."""
    try:
        return response.json()
    except ValueError:
        return {}


def is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300


def failure_message(label: str, response: httpx.Response, data: Any) -> str:
    """``"<label>: <status> <body>"`` with the parsed body, or the raw text."""
    if data == {} and response.text.strip():
        body = " ".join(response.text.split())
    else:
        body = json.dumps(data)
    return f"{label}: {response.status_code} {body}"
