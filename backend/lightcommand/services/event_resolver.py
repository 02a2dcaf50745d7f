"""
Remote Button Event Resolver

Turns raw remote_buttons rows into queued commands.

Each press is claimed with a compare-and-set (received -> processing) in
the same transaction that enqueues its commands, so two resolvers racing
on one press enqueue at most once between them. Presses with no mapping
are drained straight to executed.
"""

import logging
from typing import Callable, List, Optional, Tuple
from sqlalchemy import and_
from sqlalchemy.orm import Session

from ..commands.models import AbstractCommand, CommandName
from ..models.device import Device
from ..models.remote_button import RemoteButton
from .button_config import ButtonAction, ButtonConfig
from .command_queue import CommandQueueService
from .device_directory import get_device, get_group_devices, get_group_power_state
from .polling import PollingService

logger = logging.getLogger(__name__)


def resolve_toggle(power_state: Optional[str], template: AbstractCommand) -> AbstractCommand:
    """
    Concrete command for a toggle given the current power state

    On -> turn off. Anything else (off, unknown) -> brightness at the
    template's value, which also turns the light on.
    """
    if power_state == 'on':
        return AbstractCommand(name=CommandName.TURN.value, value='off')
    return AbstractCommand(name=CommandName.BRIGHTNESS.value, value=template.value)


class EventResolver:
    """Resolves button presses against an immutable ButtonConfig"""

    def __init__(self, session_factory: Callable[[], Session], button_config: ButtonConfig):
        self.session_factory = session_factory
        self.button_config = button_config

    def resolve_pending(self, limit: int = 10) -> int:
        """
        Resolve the oldest received presses

        Returns:
            Number of presses this call moved to executed
        """
        db = self.session_factory()
        try:
            events = db.query(
                RemoteButton.id,
                RemoteButton.remote_name,
                RemoteButton.button_number
            ).filter(
                RemoteButton.status == 'received'
            ).order_by(
                RemoteButton.timestamp.asc(),
                RemoteButton.id.asc()
            ).limit(limit).all()
            db.rollback()  # end the read transaction before claiming

            handled = 0
            for event_id, remote_name, button_number in events:
                if self.resolve_event(db, event_id, remote_name, button_number) is not None:
                    handled += 1
            return handled
        finally:
            db.close()

    def resolve_event(
        self,
        db: Session,
        event_id: int,
        remote_name: str,
        button_number: int
    ) -> Optional[List[int]]:
        """
        Resolve one press

        Returns:
            Queue ids enqueued for the press (possibly empty), or None if
            another resolver claimed it first
        """
        action = self.button_config.lookup(remote_name, button_number)

        try:
            if action is None:
                drained = self._transition(db, event_id, 'received', 'executed')
                db.commit()
                if not drained:
                    return None
                logger.debug(f"No mapping for {remote_name} button {button_number}; drained press {event_id}")
                return []

            if not self._transition(db, event_id, 'received', 'processing'):
                db.rollback()
                logger.debug(f"Press {event_id} already claimed by another resolver")
                return None

            queued = []
            for device, command in self._plan(db, action):
                queued.append(CommandQueueService.enqueue(
                    db,
                    device=device.device,
                    brand=device.brand,
                    command=command,
                    model=device.model,
                    commit=False
                ))

            self._transition(db, event_id, 'processing', 'executed')
            db.commit()

        except Exception:
            db.rollback()
            raise

        logger.info(
            f"Command processed for {action.target} "
            f"({remote_name} button {button_number}): {len(queued)} queued"
        )
        return queued

    def _plan(self, db: Session, action: ButtonAction) -> List[Tuple[Device, AbstractCommand]]:
        """Devices to command and what to send them"""
        if action.group:
            member_ids = get_group_devices(db, action.group)
            if not member_ids:
                logger.warning(f"Group {action.group} has no devices")
                return []

            command = action.command
            if command.name == CommandName.TOGGLE.value:
                # One decision for the whole group, from the first member's state
                command = resolve_toggle(get_group_power_state(db, action.group), command)

            plan = []
            for device_id in member_ids:
                device = get_device(db, device_id)
                if device is None:
                    logger.warning(f"Group {action.group}: device {device_id} not found, skipping")
                    continue
                plan.append((device, command))
            return plan

        device = get_device(db, action.device)
        if device is None:
            logger.warning(f"Device {action.device} not found; nothing queued")
            return []

        command = action.command
        if command.name == CommandName.TOGGLE.value:
            command = resolve_toggle(device.power_state, command)
        return [(device, command)]

    @staticmethod
    def _transition(db: Session, event_id: int, from_status: str, to_status: str) -> bool:
        """Conditional status update; False means the row was not in from_status"""
        updated = db.query(RemoteButton).filter(
            and_(
                RemoteButton.id == event_id,
                RemoteButton.status == from_status
            )
        ).update({RemoteButton.status: to_status}, synchronize_session=False)
        return updated == 1


class ButtonEventProcessor(PollingService):
    """Polls remote_buttons and resolves presses into queued commands"""

    name = "button event processor"

    def __init__(self, resolver: EventResolver, batch_size: int = 10, **kwargs):
        super().__init__(**kwargs)
        self.resolver = resolver
        self.batch_size = batch_size

    def poll_once(self) -> int:
        return self.resolver.resolve_pending(self.batch_size)
