"""
Command Pipeline

Abstract commands, the vendor adapters that deliver them, and the
registry that maps a brand to its adapter. Everything goes through
the durable command_queue table.
"""

from .models import (
    AbstractCommand,
    BatchResult,
    ButtonStatus,
    CommandName,
    CommandOutcome,
    CommandRequest,
    CommandResponse,
    CommandStatus,
    ExecutionResult,
    QueuedCommand
)

__all__ = [
    "AbstractCommand",
    "BatchResult",
    "ButtonStatus",
    "CommandName",
    "CommandOutcome",
    "CommandRequest",
    "CommandResponse",
    "CommandStatus",
    "ExecutionResult",
    "QueuedCommand"
]
