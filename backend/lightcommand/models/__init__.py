# Models package
from .command_queue import CommandQueue
from .device import Device, DeviceGroup
from .remote_button import RemoteButton

__all__ = [
    "CommandQueue",
    "Device",
    "DeviceGroup",
    "RemoteButton",
]
