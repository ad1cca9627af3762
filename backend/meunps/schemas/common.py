"""
Response envelopes shared by every route.
"""
from pydantic import BaseModel
from typing import Generic, TypeVar

DataT = TypeVar("DataT")


class DataResponse(BaseModel, Generic[DataT]):
    """{"success": true, "data": ...}"""
    success: bool = True
    data: DataT


class MessageResponse(BaseModel):
    """{"success": true, "message": ...}"""
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    error: str
