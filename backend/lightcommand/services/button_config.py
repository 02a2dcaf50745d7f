"""
Remote Button Configuration

Maps (remote_name, button_number) to a device or group and a command
template. Loaded once at process start from a JSON file shaped like:

    {
        "GV5125615A": {
            "1": {"device": "e5c95310-...", "command": {"name": "brightness", "value": 30}},
            "5": {"device": "e5c95310-...", "command": {"name": "turn", "value": "off"}}
        },
        "GV5122427B": {
            "1": {"group": "25", "command": {"name": "toggle", "value": 100}}
        }
    }
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from pydantic import BaseModel, field_validator, model_validator

from ..commands.models import AbstractCommand
from ..commands.adapters.base import normalize_command
from ..core.exceptions import CommandValidationError

logger = logging.getLogger(__name__)


class ButtonAction(BaseModel):
    """What a single button does: exactly one of device/group, plus a command"""
    device: Optional[str] = None
    group: Optional[str] = None
    command: AbstractCommand

    class Config:
        frozen = True

    @field_validator("device", "group", mode="before")
    @classmethod
    def _as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) and not isinstance(value, bool) else value

    @field_validator("command", mode="after")
    @classmethod
    def _check_command(cls, command: AbstractCommand) -> AbstractCommand:
        try:
            return normalize_command(command, allow_toggle=True)
        except CommandValidationError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def _one_target(self) -> "ButtonAction":
        if bool(self.device) == bool(self.group):
            raise ValueError("Button action needs exactly one of 'device' or 'group'")
        return self

    @property
    def target(self) -> str:
        return f"group {self.group}" if self.group else f"device {self.device}"


class ButtonConfig:
    """Immutable button mapping"""

    def __init__(self, actions: Mapping[Tuple[str, int], ButtonAction]):
        self._actions = MappingProxyType(dict(actions))

    def lookup(self, remote_name: str, button_number: int) -> Optional[ButtonAction]:
        return self._actions.get((remote_name, int(button_number)))

    def __len__(self) -> int:
        return len(self._actions)

    @classmethod
    def from_dict(cls, raw: Dict[str, Dict[Union[str, int], Any]]) -> "ButtonConfig":
        """
        Build from the nested {remote: {button: action}} form

        Raises:
            ValueError: a button number is not an integer or an action is invalid
        """
        actions = {}
        for remote_name, buttons in raw.items():
            for button_number, action in buttons.items():
                try:
                    number = int(button_number)
                except (TypeError, ValueError):
                    raise ValueError(f"Remote {remote_name}: button '{button_number}' is not a number")
                actions[(remote_name, number)] = ButtonAction.model_validate(action)
        return cls(actions)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ButtonConfig":
        """Load and validate the JSON mapping file"""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)

        config = cls.from_dict(raw)
        logger.info(f"Loaded {len(config)} button mapping(s) from {path}")
        return config
