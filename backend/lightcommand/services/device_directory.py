"""
Device Directory

Read-only lookups against the devices and device_groups tables.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from ..models.device import Device, DeviceGroup


def get_device(db: Session, device_id: str) -> Optional[Device]:
    """Device row (model, brand, power state) or None"""
    return db.query(Device).filter(Device.device == device_id).first()


def get_group_devices(db: Session, group_id: str) -> List[str]:
    """Ordered member device ids; empty if the group is unknown"""
    group = db.query(DeviceGroup).filter(DeviceGroup.id == str(group_id)).first()
    if not group or not group.devices:
        return []
    return list(group.devices)


def get_group_power_state(db: Session, group_id: str) -> Optional[str]:
    """
    Power state of the group, sampled from its first member

    Members are assumed to be in sync; if they drift apart this reports
    whatever the first member says.
    """
    devices = get_group_devices(db, group_id)
    if not devices:
        return None

    device = get_device(db, devices[0])
    return device.power_state if device else None
