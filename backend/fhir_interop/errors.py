"""Error types shared by the repository and service layers."""


class NotFoundError(LookupError):
    """Raised when a point lookup, update, or delete matches no record."""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} with ID '{resource_id}' not found")


class StorageError(Exception):
    """Raised for storage failures detected before reaching the engine."""


class InvalidIdentifierError(StorageError):
    """Raised when an ID is not a valid storage-native identifier."""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"invalid {resource_type.lower()} ID: {resource_id!r}")
