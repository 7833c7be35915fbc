"""Custom exceptions for docx_cascade."""

from typing import Optional


class DocxCascadeError(Exception):
    """Base exception for docx_cascade errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ParsingError(DocxCascadeError):
    """Exception raised while loading the document package."""

    pass


class FontError(DocxCascadeError):
    """Exception raised during font lookup or registration."""

    pass


class RenderingError(DocxCascadeError):
    """Exception raised when a layout sink cannot produce output."""

    pass
