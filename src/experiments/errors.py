"""Error taxonomy for experiment handling.

ValidationError (400) and NotFoundError (404) are surfaced to callers with
their message. InternalFailure (500) carries only a generic message; the
underlying exception is logged where it is caught. Reasoning-service errors
live in src.agents.llm_client and never reach this layer.
"""


class ExperimentError(Exception):
    """Base class for errors rendered as ``{"error": message}``."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# 400: validation
# ---------------------------------------------------------------------------


class ValidationError(ExperimentError):
    status_code = 400


class MalformedContentType(ValidationError):
    def __init__(self) -> None:
        super().__init__("Content-Type must be application/json")


class MalformedBody(ValidationError):
    def __init__(self, message: str = "Invalid JSON in request body") -> None:
        super().__init__(message)


class MissingSensorData(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            "At least one sensor value (ph, tds, turbidity) is required",
        )


class InvalidSensorValue(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Sensor value '{field}' must be a number")
        self.field = field


class InvalidIdentifier(ValidationError):
    def __init__(self, field: str = "experiment ID") -> None:
        super().__init__(f"Invalid UUID format for {field}")
        self.field = field


class MissingField(ValidationError):
    pass


# ---------------------------------------------------------------------------
# 404: not found
# ---------------------------------------------------------------------------


class NotFoundError(ExperimentError):
    status_code = 404


class ExperimentNotFound(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Experiment not found")


class UserNotFound(NotFoundError):
    def __init__(self) -> None:
        super().__init__("User not found")


# ---------------------------------------------------------------------------
# 409: conflict
# ---------------------------------------------------------------------------


class ConflictError(ExperimentError):
    status_code = 409


class UserAlreadyExists(ConflictError):
    def __init__(self) -> None:
        super().__init__("User already exists")


# ---------------------------------------------------------------------------
# 500: generic internal failures
# ---------------------------------------------------------------------------


class InternalFailure(ExperimentError):
    status_code = 500


class ExperimentUpdateFailed(InternalFailure):
    def __init__(self) -> None:
        super().__init__("Failed to update experiment")
