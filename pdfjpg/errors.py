class PdfJpgError(Exception):
    """Base class for everything raised by pdfjpg."""


class InvalidUploadError(PdfJpgError, ValueError):
    def __init__(self, message: str = "Please upload a PDF file"):
        super().__init__(message)


class ConversionInProgressError(PdfJpgError, RuntimeError):
    def __init__(self, message: str = "A conversion is already running"):
        super().__init__(message)


class ConversionError(PdfJpgError, RuntimeError):
    """The PDF could not be decoded or one of its pages could not be rendered."""


class ConversionCancelled(PdfJpgError):
    """Raised between pages when the caller no longer wants the result."""
