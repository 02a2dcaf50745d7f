"""
Philips Hue Adapter

For Hue bridges on the local network
Uses the CLIP v2 REST API
"""

import logging
import requests
import urllib3
from typing import Any, Callable, Dict, Optional
from sqlalchemy.orm import Session

from .base import VendorAdapter
from ..models import AbstractCommand, CommandName, ExecutionResult
from ...core.exceptions import TransportError, VendorProtocolError

logger = logging.getLogger(__name__)


class HueAdapter(VendorAdapter):
    """
    Adapter for Philips Hue lights

    Protocol: CLIP v2 (REST over HTTPS)
    Endpoint: PUT /clip/v2/resource/light/{id}
    Authentication: hue-application-key header
    TLS: bridges present a self-signed certificate; verification is an
    explicit setting (HUE_VERIFY_TLS)
    """

    brand = "hue"

    def __init__(
        self,
        session_factory: Callable[[], Session],
        bridge_ip: str,
        api_key: str,
        verify_tls: bool = False,
        timeout: float = 5.0
    ):
        super().__init__(session_factory)
        self.bridge_ip = bridge_ip
        self.api_key = api_key
        self.verify_tls = verify_tls
        self.timeout = timeout

        if not verify_tls:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def transform(self, command: AbstractCommand) -> Dict[str, Any]:
        if command.name == CommandName.BRIGHTNESS.value:
            # Bridge ignores dimming on a light that is off, so always send on=true with it
            return {
                "on": {"on": True},
                "dimming": {"brightness": int(command.value)}
            }

        if command.name == CommandName.TURN.value:
            return {"on": {"on": command.value == "on"}}

        # validate() runs first, so this means a subclass widened the vocabulary
        raise ValueError(f"Hue cannot transform command '{command.name}'")

    def send_command(self, device: str, payload: Dict[str, Any], model: Optional[str] = None) -> ExecutionResult:
        url = f"https://{self.bridge_ip}/clip/v2/resource/light/{device}"

        try:
            response = requests.put(
                url,
                json=payload,
                headers={
                    "hue-application-key": self.api_key,
                    "Content-Type": "application/json"
                },
                timeout=self.timeout,
                verify=self.verify_tls
            )
        except requests.exceptions.Timeout:
            raise TransportError(f"Timed out talking to Hue bridge at {self.bridge_ip}")
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed to communicate with Hue bridge: {e}") from e

        if response.status_code != 200:
            raise TransportError(
                f"Failed to communicate with Hue bridge (HTTP {response.status_code}): {response.text}"
            )

        try:
            body = response.json()
        except ValueError:
            body = None

        error = self._extract_error(body)
        if error:
            raise VendorProtocolError(error)

        return ExecutionResult(
            success=True,
            message="Command sent successfully",
            data={"device": device, "payload": payload}
        )

    @staticmethod
    def _extract_error(body: Any) -> Optional[str]:
        """Pull an error description out of a v1 ([{"error": ...}]) or v2 ({"errors": [...]}) body"""
        if isinstance(body, list) and body and isinstance(body[0], dict) and "error" in body[0]:
            error = body[0]["error"]
            if isinstance(error, dict):
                return error.get("description") or str(error)
            return str(error)

        if isinstance(body, dict) and body.get("errors"):
            descriptions = [
                e.get("description", str(e)) if isinstance(e, dict) else str(e)
                for e in body["errors"]
            ]
            return "; ".join(descriptions)

        return None
