# This project was developed with assistance from AI tools.
"""RFC 7807 Problem Details body returned for every API error."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Problem Details (https://datatracker.ietf.org/doc/html/rfc7807).

    ``instance`` is the request path, e.g. ``/api/loans/7/documents``.
    """

    type: str = "about:blank"
    title: str
    status: int
    detail: str = ""
    instance: str = ""
    request_id: str = Field(default="", description="Echo of X-Request-ID, or a generated id.")
