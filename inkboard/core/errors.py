"""
Error types raised by the editing model and the export engine.
"""


class InkboardError(Exception):
    """Base class for all errors raised by this package."""


class LoadError(InkboardError):
    """The source bytes could not be parsed as a PDF document."""


class LastPageError(InkboardError):
    """Attempt to delete the only remaining page."""


class OutOfRangeError(InkboardError, IndexError):
    """A page index or item id was referenced that does not exist."""


class ExportError(InkboardError):
    """The PDF codec failed while parsing, embedding or serializing."""


class DecodeError(InkboardError):
    """An image payload could not be decoded by the codec."""


class ItemWarning(UserWarning):
    """An item could not be drawn at export and has been skipped."""

    kind = "item"

    def __init__(self, item_id: str, reason: str):
        super().__init__(f"Skipped {self.kind} {item_id}: {reason}")
        self.item_id = item_id
        self.reason = reason


class DecodeWarning(ItemWarning):
    """An individual image payload was malformed and has been skipped."""

    kind = "image"
