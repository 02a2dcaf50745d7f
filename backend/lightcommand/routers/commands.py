"""
Command Queue API

Entry point for UI-issued commands and operator actions on the queue.
Commands are only ever queued here; the per-brand processors deliver them.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Any, Dict

from ..db.database import get_db
from ..commands.models import CommandRequest, CommandResponse
from ..commands.adapters.base import normalize_command
from ..core.exceptions import CommandValidationError
from ..services.command_queue import CommandQueueService
from ..services.device_directory import get_device

logger = logging.getLogger(__name__)

router = APIRouter(tags=["commands"])


@router.post("/commands", response_model=CommandResponse, status_code=201)
def queue_command(request: CommandRequest, db: Session = Depends(get_db)):
    """
    Queue a command for a single device

    Example:
        POST /api/v1/commands
        {
            "device": "e5c95310-d979-4484-a524-b7e424e17f88",
            "command": {"name": "brightness", "value": 50}
        }
    """
    try:
        command = normalize_command(request.command)
    except CommandValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    device = get_device(db, request.device)
    if not device:
        raise HTTPException(status_code=404, detail=f"Device {request.device} not found")

    queue_id = CommandQueueService.enqueue(
        db,
        device=device.device,
        brand=device.brand,
        command=command,
        model=device.model
    )
    logger.info(f"Queued {command.name}={command.value} for {device.device} ({device.brand}) as {queue_id}")

    return CommandQueueService.get_command(db, queue_id)


@router.get("/commands/{command_id}", response_model=CommandResponse)
def get_command(command_id: int, db: Session = Depends(get_db)):
    """Get a queued command and its status"""
    cmd = CommandQueueService.get_command(db, command_id)
    if not cmd:
        raise HTTPException(status_code=404, detail=f"Command {command_id} not found")
    return cmd


@router.post("/commands/{command_id}/resubmit", response_model=CommandResponse, status_code=201)
def resubmit_command(command_id: int, db: Session = Depends(get_db)):
    """Re-queue a failed command as a new record"""
    try:
        new_id = CommandQueueService.resubmit(db, command_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return CommandQueueService.get_command(db, new_id)


@router.get("/queue/metrics")
def queue_metrics(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Queue health metrics"""
    return CommandQueueService.get_queue_metrics(db)
