INVALID_ARGUMENT = "invalid-argument"
FAILED_PRECONDITION = "failed-precondition"
INTERNAL = "internal"

STATUS_CODES = {
    INVALID_ARGUMENT: 400,
    FAILED_PRECONDITION: 400,
    INTERNAL: 500,
}


class FunctionsError(Exception):
    """Error raised by the AI proxy entry points, tagged with a callable error code."""

    def __init__(self, code: str, message: str):
        if code not in STATUS_CODES:
            raise ValueError(f"Unknown functions error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.code]

    def to_dict(self) -> dict:
        return {"error": {"status": self.code, "message": self.message}}


class RepairError(ValueError):
    pass


class NoArrayFound(RepairError):
    pass


class TruncatedBeyondRepair(RepairError):
    pass
