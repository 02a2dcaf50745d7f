"""
Error taxonomy for the command pipeline

Per-command errors (CommandError and subclasses) are recorded on the
command row and never abort the rest of a batch. StoreConnectivityError
is handled at the loop level by reconnecting.
"""


class LightCommandError(Exception):
    """Base class for all LightCommand errors"""


class CommandError(LightCommandError):
    """A single queued command could not be delivered"""


class CommandValidationError(CommandError):
    """Abstract command is malformed or outside the supported vocabulary"""


class TransportError(CommandError):
    """Network or HTTP-level failure talking to a vendor bridge"""


class VendorProtocolError(CommandError):
    """Vendor accepted the request but reported an error in the body"""


class StoreConnectivityError(LightCommandError):
    """The queue store cannot be reached"""
