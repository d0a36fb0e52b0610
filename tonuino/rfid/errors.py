"""
Exceptions raised by card access backends.

The protocol layer maps these onto TagResult values, so none of them
reach callers of TagProtocol.
"""


class CardError(Exception):
    """Base exception for card communication faults."""
    pass


class TagLostError(CardError):
    """The card left the field or stopped answering."""
    pass


class TagFormatError(CardError):
    """The card reports a format the backend cannot handle."""
    pass


class ReaderError(CardError):
    """No usable reader is attached."""
    pass
