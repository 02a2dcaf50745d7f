"""
Command Queue Service

Claim/complete protocol over the shared command_queue table.

Several worker processes poll the same table, so every state change is a
conditional UPDATE on the current status; the row count tells us whether
this caller won. No transaction is left open when a method returns.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..commands.models import AbstractCommand, QueuedCommand
from ..models.command_queue import CommandQueue

logger = logging.getLogger(__name__)


class CommandQueueService:
    """Service for managing command queue operations"""

    @staticmethod
    def enqueue(
        db: Session,
        device: str,
        brand: str,
        command: AbstractCommand,
        model: Optional[str] = None,
        commit: bool = True
    ) -> int:
        """
        Enqueue a command for execution

        Args:
            db: Database session
            device: Vendor device id
            brand: Brand key used to route to an adapter
            command: Abstract command
            model: Device model (some vendors need it on the wire)
            commit: Commit immediately; pass False to join the caller's transaction

        Returns:
            Command queue ID
        """
        queue_entry = CommandQueue(
            device=device,
            model=model,
            brand=brand,
            command=command.model_dump(),
            status='pending',
            created_at=datetime.now()
        )

        db.add(queue_entry)
        db.flush()

        if commit:
            db.commit()

        return queue_entry.id

    @staticmethod
    def reclaim_stale(db: Session, now: Optional[datetime] = None) -> int:
        """
        Reset commands stuck in 'processing' past the staleness window

        Runs inside the caller's transaction. A single UPDATE, so each stale
        row is reset once per pass.
        """
        now = now or datetime.now()
        cutoff = now - timedelta(minutes=settings.STALE_CLAIM_MINUTES)

        return db.query(CommandQueue).filter(
            and_(
                CommandQueue.status == 'processing',
                CommandQueue.processed_at < cutoff
            )
        ).update(
            {CommandQueue.status: 'pending', CommandQueue.processed_at: None},
            synchronize_session=False
        )

    @staticmethod
    def try_claim(db: Session, command_id: int, now: datetime) -> bool:
        """Compare-and-set a single row pending -> processing; False if someone else got it"""
        claimed = db.query(CommandQueue).filter(
            and_(
                CommandQueue.id == command_id,
                CommandQueue.status == 'pending'
            )
        ).update(
            {CommandQueue.status: 'processing', CommandQueue.processed_at: now},
            synchronize_session=False
        )
        return claimed == 1

    @staticmethod
    def claim_batch(db: Session, brand: str, limit: int = 10) -> List[QueuedCommand]:
        """
        Atomically claim the oldest pending commands for a brand

        Stale claims are reclaimed first. Returned snapshots are detached from
        the session; the claim transaction is committed before returning.
        """
        now = datetime.now()

        try:
            reclaimed = CommandQueueService.reclaim_stale(db, now)
            if reclaimed:
                logger.info(f"Reclaimed {reclaimed} stale command(s) stuck in processing")

            candidates = db.query(CommandQueue).filter(
                and_(
                    CommandQueue.status == 'pending',
                    CommandQueue.brand == brand
                )
            ).order_by(
                CommandQueue.created_at.asc(),
                CommandQueue.id.asc()
            ).limit(limit).with_for_update(skip_locked=True).all()

            claimed = []
            for cmd in candidates:
                if not CommandQueueService.try_claim(db, cmd.id, now):
                    logger.debug(f"Command {cmd.id} claimed by another worker")
                    continue

                claimed.append(QueuedCommand(
                    id=cmd.id,
                    device=cmd.device,
                    model=cmd.model,
                    brand=cmd.brand,
                    command=cmd.command,
                    status='processing',
                    created_at=cmd.created_at,
                    processed_at=now
                ))

            db.commit()
            return claimed

        except Exception:
            db.rollback()
            raise

    @staticmethod
    def mark_complete(
        db: Session,
        command_id: int,
        success: bool,
        error_message: Optional[str] = None
    ) -> bool:
        """
        Record the final status of a claimed command

        Safe to call more than once; the last write wins. Returns False if
        the command does not exist.
        """
        try:
            updated = db.query(CommandQueue).filter(
                CommandQueue.id == command_id
            ).update(
                {
                    CommandQueue.status: 'completed' if success else 'failed',
                    CommandQueue.processed_at: datetime.now(),
                    CommandQueue.error_message: None if success else error_message
                },
                synchronize_session=False
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        if not updated:
            logger.warning(f"mark_complete: command {command_id} not found")
        return bool(updated)

    @staticmethod
    def get_command(db: Session, command_id: int) -> Optional[CommandQueue]:
        """Fetch a single queue record"""
        return db.query(CommandQueue).filter(CommandQueue.id == command_id).first()

    @staticmethod
    def resubmit(db: Session, command_id: int) -> int:
        """
        Re-submit a failed command as a new pending record

        The failed row is left untouched so its error stays inspectable.
        Failed commands are never re-queued automatically; this is the
        operator's explicit action.
        """
        cmd = CommandQueueService.get_command(db, command_id)
        if not cmd:
            raise LookupError(f"Command {command_id} not found")
        if cmd.status != 'failed':
            raise ValueError(f"Command {command_id} is {cmd.status}, only failed commands can be resubmitted")

        try:
            command = AbstractCommand.model_validate(cmd.command)
        except PydanticValidationError as e:
            raise ValueError(f"Command {command_id} has a malformed payload: {e}") from e

        new_id = CommandQueueService.enqueue(
            db,
            device=cmd.device,
            brand=cmd.brand,
            command=command,
            model=cmd.model
        )
        logger.info(f"Command {command_id} resubmitted as {new_id}")
        return new_id

    @staticmethod
    def get_queue_metrics(db: Session) -> Dict[str, Any]:
        """Get queue health metrics"""
        now = datetime.now()
        stuck_threshold = now - timedelta(minutes=settings.STALE_CLAIM_MINUTES)

        status_counts = dict(
            db.query(CommandQueue.status, func.count(CommandQueue.id))
            .group_by(CommandQueue.status)
            .all()
        )

        pending_by_brand = dict(
            db.query(CommandQueue.brand, func.count(CommandQueue.id))
            .filter(CommandQueue.status == 'pending')
            .group_by(CommandQueue.brand)
            .all()
        )

        # Check for stuck commands (processing past the staleness window)
        stuck_count = db.query(CommandQueue).filter(
            and_(
                CommandQueue.status == 'processing',
                CommandQueue.processed_at < stuck_threshold
            )
        ).count()

        pending_count = status_counts.get('pending', 0)

        return {
            "pending_count": pending_count,
            "processing_count": status_counts.get('processing', 0),
            "completed_count": status_counts.get('completed', 0),
            "failed_count": status_counts.get('failed', 0),
            "pending_by_brand": pending_by_brand,
            "stuck_commands": stuck_count,
            "healthy": stuck_count == 0 and pending_count < 1000
        }
