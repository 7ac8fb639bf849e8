"""Error taxonomy shared by every service and router."""

from fastapi import HTTPException


class InvalidInputError(HTTPException):
    """Missing or malformed fields, bad vote values, unrecognized embeds."""

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=400, detail=detail)


class UnauthorizedError(HTTPException):
    """No identity presented where one is required."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=401, detail=detail)


class ForbiddenError(HTTPException):
    """Identity presented but it does not own the target."""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=403, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class AlreadyExistsError(HTTPException):
    """Duplicate like/save/vote insert, including unique-constraint races."""

    def __init__(self, detail: str = "Already exists"):
        super().__init__(status_code=400, detail=detail)


class DependencyError(HTTPException):
    """A backing store or media host is missing or misconfigured."""

    def __init__(self, detail: str = "Service dependency unavailable"):
        super().__init__(status_code=503, detail=detail)
