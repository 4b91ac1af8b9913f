"""
Failure kinds raised while serializing an instance tree.

Every fatal failure is a subclass of SerializationError. Non-fatal
failures (an unreadable property, an unreadable or uninstantiable
descendant) are reported through the module loggers and never raised out
of Serializer.serialize().
"""

from __future__ import annotations


class SerializationError(Exception):
    """Base class for all errors raised by treescript."""


class AccessRestricted(SerializationError):
    """A node or property cannot be read in the current access context."""


class Uninstantiable(SerializationError):
    """A class cannot produce a default instance to diff against."""

    def __init__(self, class_name: str):
        self.class_name = class_name
        super().__init__(f"class {class_name} cannot be created")


class UnsupportedRoot(SerializationError):
    """The node is a service singleton and is addressed by lookup instead."""


class SizeExceeded(SerializationError):
    """Output would exceed the per-unit size or local variable limits."""

    def __init__(self, message: str, length: int | None = None):
        self.length = length
        super().__init__(message)


class NameExhausted(SerializationError):
    """No free numeric suffix was found for a duplicated identifier."""
