"""
Govee Adapter

For Govee Wi-Fi lights via the Govee developer cloud API
"""

import logging
import requests
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy.orm import Session

from .base import VendorAdapter
from ..models import AbstractCommand, CommandName, ExecutionResult
from ...core.exceptions import CommandValidationError, TransportError, VendorProtocolError

logger = logging.getLogger(__name__)


class GoveeAdapter(VendorAdapter):
    """
    Adapter for Govee lights

    Protocol: REST (HTTPS), PUT /v1/devices/control
    Authentication: Govee-API-Key header
    The API takes one attribute per request, so a brightness command is
    sent as "turn on" followed by "brightness".
    """

    brand = "govee"

    def __init__(
        self,
        session_factory: Callable[[], Session],
        api_key: str,
        api_url: str = "https://developer-api.govee.com",
        timeout: float = 5.0
    ):
        super().__init__(session_factory)
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def transform(self, command: AbstractCommand) -> List[Dict[str, Any]]:
        if command.name == CommandName.BRIGHTNESS.value:
            return [
                {"name": "turn", "value": "on"},
                {"name": "brightness", "value": int(command.value)}
            ]

        if command.name == CommandName.TURN.value:
            return [{"name": "turn", "value": command.value}]

        raise ValueError(f"Govee cannot transform command '{command.name}'")

    def send_command(self, device: str, payload: List[Dict[str, Any]], model: Optional[str] = None) -> ExecutionResult:
        if not model:
            raise CommandValidationError(f"Govee device {device} has no model; the API requires one")

        url = f"{self.api_url}/v1/devices/control"
        for cmd in payload:
            self._put(url, {"device": device, "model": model, "cmd": cmd})

        return ExecutionResult(
            success=True,
            message="Command sent successfully",
            data={"device": device, "model": model, "cmds": payload}
        )

    def _put(self, url: str, body: Dict[str, Any]):
        try:
            response = requests.put(
                url,
                json=body,
                headers={
                    "Govee-API-Key": self.api_key,
                    "Content-Type": "application/json"
                },
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            raise TransportError("Timed out talking to Govee API")
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed to communicate with Govee API: {e}") from e

        if response.status_code != 200:
            raise TransportError(
                f"Failed to communicate with Govee API (HTTP {response.status_code}): {response.text}"
            )

        try:
            result = response.json()
        except ValueError:
            raise VendorProtocolError(f"Govee API returned a non-JSON body: {response.text[:200]}")

        if not isinstance(result, dict) or result.get("code") != 200:
            message = result.get("message") if isinstance(result, dict) else None
            raise VendorProtocolError(message or f"Govee API reported an error: {result}")
