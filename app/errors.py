"""
Error taxonomy shared by the services, the repository and the HTTP layer.

    BlogError
    ├── ValidationError   empty required field, unhashed password
    ├── NotFound          single-row lookup matched nothing
    ├── Conflict          uniqueness constraint violated
    ├── Timeout           storage deadline exceeded
    ├── PolicyViolation   password rotation to the current password
    └── StorageError      anything else the store reported

Services raise ``ValidationError`` before any I/O and let the storage-origin
errors through unchanged.  The HTTP layer maps each class to a status code.
"""


class BlogError(Exception):
    """Base class for every error the core reports to its callers."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(BlogError):
    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class NotFound(BlogError):
    def __init__(self, entity: str, entity_id: int) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class Conflict(BlogError):
    pass


class Timeout(BlogError):
    def __init__(self, operation: str, seconds: float) -> None:
        self.operation = operation
        self.seconds = seconds
        super().__init__(f"{operation} did not complete within {seconds:g}s")


class PolicyViolation(BlogError):
    pass


class StorageError(BlogError):
    pass
