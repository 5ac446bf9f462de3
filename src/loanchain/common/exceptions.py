"""Custom exceptions for LoanChain extraction."""


class DocumentProcessingError(Exception):
    """Base exception for document processing errors."""

    def __init__(self, message: str, document_id: str | None = None, cause: Exception | None = None):
        self.message = message
        self.document_id = document_id
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "documentId": self.document_id,
            "cause": str(self.cause) if self.cause else None,
        }


class DocumentUnreadable(DocumentProcessingError):
    """The input document could not be opened or parsed as a PDF."""
    pass


class RemoteExtractionFailed(DocumentProcessingError):
    """The remote extraction service failed or answered with malformed data."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, document_id, cause)
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = super().to_dict()
        result.update({
            "statusCode": self.status_code,
            "body": self.body,
        })
        return result


class DocumentRejected(DocumentProcessingError):
    """The remote extractor judged the document not to be a loan agreement.

    Not a technical failure: the reason is meant for the user.
    """

    def __init__(self, reason: str, document_id: str | None = None):
        super().__init__(reason, document_id)
        self.reason = reason


class ConfigurationError(DocumentProcessingError):
    """Extraction was requested with missing or invalid configuration."""
    pass
