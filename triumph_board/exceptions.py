"""Exceptions raised by the Triumph Board data layer."""


class TriumphBoardError(Exception):
    """Base class for data layer errors."""


class StoreInitializationError(TriumphBoardError):
    """The entity store could not be opened. Fatal at startup."""


class StoreNotConnectedError(TriumphBoardError, RuntimeError):
    """A collection was requested before connect() or after disconnect()."""


class DisplayOrderOverflowError(TriumphBoardError, ValueError):
    """The next display order would not fit the collection's integer width."""
