from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    status: int = 200
    data: Any = None


def send(data: Any, status: int = 200) -> ApiResponse:
    return ApiResponse(status=status, data=data)
