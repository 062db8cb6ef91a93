"""
Response envelope and pagination helpers
"""
import math
from typing import Any, Optional

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    current: int = Field(..., description="Current page (1-based)")
    pages: int = Field(..., description="Total pages")
    total: int = Field(..., description="Total matching records")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(current=page, pages=math.ceil(total / limit) if limit else 0, total=total)


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def envelope(data: Any = None, message: Optional[str] = None, **extra) -> dict:
    """Standard success body: {"success": true, "message"?, "data"?, ...extra}"""
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body
