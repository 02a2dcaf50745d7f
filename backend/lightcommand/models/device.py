from sqlalchemy import Column, String, JSON

from ..db.database import Base


class Device(Base):
    """Device directory row (maintained by the UI, read-only here)"""
    __tablename__ = "devices"

    device = Column(String, primary_key=True)  # vendor device id
    model = Column(String, nullable=True)
    brand = Column(String, nullable=False, index=True)
    power_state = Column("powerState", String, nullable=True)  # 'on', 'off', or null (unknown)


class DeviceGroup(Base):
    """Named set of devices; member order matters (first member stands in for group state)"""
    __tablename__ = "device_groups"

    id = Column(String, primary_key=True)
    devices = Column(JSON, nullable=False, default=list)  # ["<device id>", ...]
