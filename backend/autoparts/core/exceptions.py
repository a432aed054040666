"""AutoParts ERP: service-layer exception hierarchy."""


class AutoPartsError(Exception):
    """Base exception for AutoParts ERP errors."""

    default_code = "error"

    def __init__(self, message=None, code=None, details=None):
        self.message = message or "An error occurred in AutoParts ERP"
        self.code = code or self.default_code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self):
        error_dict = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.code:
            error_dict["code"] = self.code
        if self.details:
            error_dict["details"] = self.details
        return error_dict


class ValidationError(AutoPartsError):
    """Invalid input or missing required identifiers. The operation is aborted."""

    default_code = "validation_error"


class InvalidTransitionError(ValidationError):
    """A state machine transition that is not allowed from the current status."""

    default_code = "invalid_transition"

    def __init__(self, entity, current, target, message=None):
        super().__init__(
            message or f"{entity} cannot move from '{current}' to '{target}'",
            details={"entity": entity, "current": current, "target": target},
        )


class NotFoundError(AutoPartsError):
    """Entity id absent from its collection."""

    default_code = "not_found"

    def __init__(self, entity, entity_id, message=None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            message or f"{entity} {entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )


class IntegrationWarning(AutoPartsError):
    """Part of a multi-step operation failed; partial results were kept.

    Never raised across the service boundary. Services log it and hand it back
    in their result so the caller can warn the user.
    """

    default_code = "integration_warning"


class StorageError(AutoPartsError):
    """Unclassified persistence failure (serialization, capacity, driver)."""

    default_code = "storage_error"
