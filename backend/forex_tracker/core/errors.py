class TrackerError(Exception):
    code = "tracker_error"

    def __init__(self, code: str | None = None, message: str | None = None):
        self.code = code or self.code
        self.message = message or self.code
        super().__init__(self.message)

    def as_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(TrackerError):
    code = "validation_error"


class NotFoundError(TrackerError):
    code = "not_found"
