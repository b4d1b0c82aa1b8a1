# address_verification/schemas/misc.py
import math
from pydantic import BaseModel


class Message(BaseModel):
    """
    A simple schema for returning a message in an API response.
    """

    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
