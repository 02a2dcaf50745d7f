"""
Base Vendor Adapter

Abstract base class for all brand adapters (Hue, Govee, ...)
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..models import (
    AbstractCommand,
    BatchResult,
    CommandName,
    CommandOutcome,
    ExecutionResult,
    QueuedCommand
)
from ...core.exceptions import CommandError, CommandValidationError
from ...services.command_queue import CommandQueueService

logger = logging.getLogger(__name__)


def normalize_command(command: Any, allow_toggle: bool = False) -> AbstractCommand:
    """
    Check an abstract command against the vocabulary and coerce its value

    Accepts an AbstractCommand or its raw JSON form. Numeric strings are
    accepted for brightness/toggle; booleans are not numbers here.

    Raises:
        CommandValidationError: unknown name or malformed value
    """
    if not isinstance(command, AbstractCommand):
        if not isinstance(command, dict) or 'name' not in command:
            raise CommandValidationError('Invalid command format')
        try:
            command = AbstractCommand.model_validate(command)
        except PydanticValidationError as e:
            raise CommandValidationError(f'Invalid command format: {e}') from e

    name, value = command.name, command.value

    if name in (CommandName.BRIGHTNESS.value, CommandName.TOGGLE.value):
        if name == CommandName.TOGGLE.value and not allow_toggle:
            raise CommandValidationError('Toggle must be resolved to turn/brightness before dispatch')
        level = _as_int(value)
        if level is None:
            raise CommandValidationError('Brightness value must be a number')
        if not 0 <= level <= 100:
            raise CommandValidationError(f'Brightness value must be between 0 and 100, got {level}')
        return AbstractCommand(name=name, value=level)

    if name == CommandName.TURN.value:
        if value not in ('on', 'off'):
            raise CommandValidationError('Turn command must specify "on" or "off"')
        return AbstractCommand(name=name, value=value)

    raise CommandValidationError(f'Unsupported command type: {name}')


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class VendorAdapter(ABC):
    """
    Base class for all vendor adapters

    Each brand extends this class and implements transform/send_command
    for its wire protocol. The batch loop (claim, dispatch, mark complete)
    is shared. Each step gets its own session so no transaction is held
    open across a vendor call.
    """

    brand: str = ""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def validate(self, command: Any) -> AbstractCommand:
        """Validate before any network call; returns the normalized command"""
        return normalize_command(command)

    @abstractmethod
    def transform(self, command: AbstractCommand) -> Any:
        """
        Translate an abstract command into the vendor payload

        Must depend only on the command, never on prior device state.
        """
        pass

    @abstractmethod
    def send_command(self, device: str, payload: Any, model: Optional[str] = None) -> ExecutionResult:
        """
        Deliver a payload to the vendor

        Returns:
            ExecutionResult on success

        Raises:
            TransportError: network failure or non-success HTTP status
            VendorProtocolError: error envelope in a successful response
        """
        pass

    def dispatch(self, record: QueuedCommand) -> ExecutionResult:
        """Run one claimed record through validate -> transform -> send_command"""
        if not record.device:
            raise CommandValidationError('Device ID is required')

        command = self.validate(record.command)
        payload = self.transform(command)
        return self.send_command(record.device, payload, model=record.model)

    def process_batch(self, max_commands: int = 10) -> BatchResult:
        """
        Claim up to max_commands for this brand and deliver them

        Every claimed command is marked completed or failed exactly once;
        a failure never stops the rest of the batch.
        """
        db = self.session_factory()
        try:
            commands = CommandQueueService.claim_batch(db, self.brand, max_commands)
        finally:
            db.close()

        results = []
        for record in commands:
            start_time = time.time()
            try:
                result = self.dispatch(record)
            except CommandError as e:
                error_msg = str(e)
                logger.warning(
                    f"✗ {self.get_name()} failed command {record.id} "
                    f"for device {record.device}: {error_msg}"
                )
                self._complete(record.id, False, error_msg)
                results.append(CommandOutcome(
                    command_id=record.id,
                    device=record.device,
                    success=False,
                    error=error_msg
                ))
                continue
            except Exception as e:
                error_msg = f"Unexpected error: {e}"
                logger.error(
                    f"✗ {self.get_name()} error executing command {record.id} "
                    f"for device {record.device}: {e}",
                    exc_info=True
                )
                self._complete(record.id, False, error_msg)
                results.append(CommandOutcome(
                    command_id=record.id,
                    device=record.device,
                    success=False,
                    error=error_msg
                ))
                continue

            execution_time_ms = int((time.time() - start_time) * 1000)
            self._complete(record.id, True)
            logger.info(
                f"✓ {self.get_name()} completed command {record.id} "
                f"for device {record.device} in {execution_time_ms}ms"
            )
            results.append(CommandOutcome(
                command_id=record.id,
                device=record.device,
                success=True,
                result=result
            ))

        return BatchResult(
            success=True,
            processed=len(results),
            results=results
        )

    def _complete(self, command_id: int, success: bool, error_message: Optional[str] = None):
        db = self.session_factory()
        try:
            CommandQueueService.mark_complete(db, command_id, success, error_message)
        finally:
            db.close()

    def get_name(self) -> str:
        """Get adapter name for logging"""
        return self.__class__.__name__
