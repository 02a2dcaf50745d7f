from sqlalchemy import Column, Integer, String, DateTime, Index
from datetime import datetime

from ..db.database import Base


class RemoteButton(Base):
    """
    Raw button press inserted by the BLE/X10 listeners

    Status lifecycle: received -> processing -> executed. Presses with no
    mapping go straight to executed.
    """
    __tablename__ = "remote_buttons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    remote_name = Column(String, nullable=False)  # e.g. "GV5125615A"
    button_number = Column(Integer, nullable=False)
    status = Column(String, default='received', nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), default=datetime.now, nullable=False)

    __table_args__ = (
        Index('idx_status_timestamp', 'status', 'timestamp'),
    )
