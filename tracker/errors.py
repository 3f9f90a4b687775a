class TrackerError(Exception):
    """Base error; `status` is the HTTP status the router answers with."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TrackerError):
    status = 400


class NotFoundError(TrackerError):
    status = 404


class ParseError(TrackerError):
    status = 400

    def __init__(self, message: str = "Invalid JSON"):
        super().__init__(message)


class IOFault(TrackerError):
    status = 500
