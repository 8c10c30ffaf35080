"""Custom exceptions for the torn-paper renderer."""


class TornPaperError(Exception):
    """Base exception for all torn-paper errors."""


class DecodeFailureError(TornPaperError):
    """Raised when uploaded bytes cannot be turned into a bitmap.

    Typical causes: truncated file, unsupported format, zero-size image.
    The render session converts it into a placeholder frame.
    """


class ToneAdjustmentError(TornPaperError):
    """Raised when the tone pre-pass fails on the source image."""


class ExportError(TornPaperError):
    """Raised when the rendered frame cannot be encoded for download."""
