"""Client for the managed backend's remote functions."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from fri.config import Settings
from fri.errors import ServiceError
from fri.utils.logging import get_logger


logger = get_logger(__name__)


class EdgeFunctionsClient:
    """Invoke Supabase edge functions with a JSON body."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        key = self.settings.get_functions_key()
        return {
            "Authorization": f"Bearer {key}",
            "apikey": key,
        }

    def invoke(self, function_name: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST ``body`` to a function and return its JSON response.

        Transport failures and non-2xx answers raise ``ServiceError``. A 2xx
        answer carrying an ``error`` key is returned as-is for the caller to
        interpret. Missing Supabase settings are reported as ``ServiceError``
        before any request is made.
        """
        try:
            url = self.settings.get_functions_url(function_name)
            headers = self._headers()
        except ValueError as exc:
            logger.error("functions.invoke.misconfigured: %s", exc)
            raise ServiceError(str(exc)) from exc

        try:
            with httpx.Client(
                timeout=self.settings.http_timeout_seconds, transport=self._transport
            ) as client:
                response = client.post(url, json=body, headers=headers)
                if response.is_error:
                    raise ServiceError(_error_message(response))
                payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("functions.invoke.failed", extra={"function": function_name, "error": str(exc)})
            raise ServiceError(str(exc)) from exc
        except ValueError as exc:
            raise ServiceError(f"{function_name} returned a non-JSON response") from exc

        if not isinstance(payload, dict):
            raise ServiceError(f"{function_name} returned an unexpected payload")
        return payload


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"HTTP {response.status_code}"
