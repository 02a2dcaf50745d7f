from sqlalchemy import Column, Integer, String, DateTime, JSON, Text, Index
from datetime import datetime

from ..db.database import Base


class CommandQueue(Base):
    """
    Durable command queue shared by every worker process

    Status lifecycle: pending -> processing -> completed | failed,
    with processing -> pending when a stale claim is reclaimed.
    """
    __tablename__ = "command_queue"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Target
    device = Column(String, nullable=False, index=True)  # vendor device id (Hue light UUID, Govee MAC)
    model = Column(String, nullable=True)
    brand = Column(String, nullable=False, index=True)  # 'hue', 'govee', ...

    # Abstract command: {"name": "brightness", "value": 50}
    command = Column(JSON, nullable=False)

    # Queue management
    status = Column(String, default='pending', nullable=False, index=True)  # 'pending', 'processing', 'completed', 'failed'

    # Python-side default keeps sub-second resolution for FIFO ordering
    created_at = Column(DateTime(timezone=True), default=datetime.now, nullable=False, index=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)  # claim time while processing, finish time after

    error_message = Column(Text, nullable=True)

    __table_args__ = (
        Index('idx_brand_status_created', 'brand', 'status', 'created_at'),
    )
