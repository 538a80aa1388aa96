"""Domain errors raised by the blob store and catalog.

Services raise these; routes and the app's exception handlers translate
them to HTTP responses. Nothing here imports FastAPI.
"""


class PdfHubError(Exception):
    """Base for all expected, per-request failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PdfHubError):
    status_code = 400


class UnsupportedMediaType(ValidationError):
    status_code = 415

    def __init__(self, mime_type: str | None):
        super().__init__(f"Only PDF files are allowed (got {mime_type or 'no content type'})")
        self.mime_type = mime_type


class PayloadTooLarge(ValidationError):
    status_code = 413

    def __init__(self, limit: int):
        super().__init__(f"File exceeds the upload limit of {limit} bytes")
        self.limit = limit


class NotFoundError(PdfHubError):
    status_code = 404


class RecordNotFound(NotFoundError):
    def __init__(self, record_id: str):
        super().__init__("file not found")
        self.record_id = record_id


class BlobNotFound(NotFoundError):
    def __init__(self, storage_path: str):
        super().__init__(f"Blob not found: {storage_path}")
        self.storage_path = storage_path
