"""Common schemas."""
from typing import Union
from pydantic import BaseModel


class DeletedResponse(BaseModel):
    """Acknowledgement returned by delete endpoints."""

    id: Union[int, str]
    message: str
