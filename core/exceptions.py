# core/exceptions.py


class CollisionFinderError(Exception):
    """Base class for errors raised by the collision finder"""


class ConfigurationError(CollisionFinderError):
    """Invalid hashing or application configuration"""


class ImageDecodeError(CollisionFinderError):
    """
    A single image could not be opened or decoded.

    Raised per item; the batch driver drops the item and carries on.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
