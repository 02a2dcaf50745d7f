"""
Command Models

Pydantic models shared by the resolver, the queue client and the
vendor adapters. AbstractCommand is the vendor-neutral contract;
everything vendor-specific lives in the adapters.
"""

from datetime import datetime
from typing import Dict, Any, List, Optional
from enum import Enum
from pydantic import BaseModel


class CommandStatus(str, Enum):
    """Command queue status"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ButtonStatus(str, Enum):
    """Remote button event status"""
    RECEIVED = "received"
    PROCESSING = "processing"
    EXECUTED = "executed"


class CommandName(str, Enum):
    """Abstract command vocabulary"""
    BRIGHTNESS = "brightness"  # value: int 0-100, implies power on
    TURN = "turn"  # value: "on" | "off"
    TOGGLE = "toggle"  # value: brightness to use when turning on; resolved before enqueue


class AbstractCommand(BaseModel):
    """Vendor-neutral instruction, stored as JSON in command_queue.command"""
    name: str
    value: Any = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {"name": "brightness", "value": 50}
        }


class QueuedCommand(BaseModel):
    """Detached snapshot of a claimed command_queue row"""
    id: int
    device: str
    model: Optional[str] = None
    brand: str
    command: Any  # raw JSON; validated by the adapter at dispatch time
    status: CommandStatus
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExecutionResult(BaseModel):
    """Result of a vendor call"""
    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class CommandOutcome(BaseModel):
    """Per-command entry in a batch result"""
    command_id: int
    device: str
    success: bool
    result: Optional[ExecutionResult] = None
    error: Optional[str] = None


class BatchResult(BaseModel):
    """Aggregate result of one process_batch call"""
    success: bool = True
    processed: int = 0
    results: List[CommandOutcome] = []


# Pydantic models for API

class CommandRequest(BaseModel):
    """Request to queue a command for a device"""
    device: str
    command: AbstractCommand

    class Config:
        json_schema_extra = {
            "example": {
                "device": "e5c95310-d979-4484-a524-b7e424e17f88",
                "command": {"name": "turn", "value": "off"}
            }
        }


class CommandResponse(BaseModel):
    """Queue record as returned by the API"""
    id: int
    device: str
    model: Optional[str] = None
    brand: str
    command: Any
    status: CommandStatus
    error_message: Optional[str] = None
    created_at: datetime
    processed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
