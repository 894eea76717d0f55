"""
Result envelope returned by every preference service operation.

A result is either a ``ServiceSuccess`` (carrying ``data``) or a
``ServiceFailure`` (carrying a non-empty ``errors`` list); the ``success``
literal is the discriminator.
"""

from typing import Any, Generic, List, Literal, Optional, TypeVar, Union
from pydantic import BaseModel, Field

T = TypeVar("T")


class FieldError(BaseModel):
    """One field-scoped problem with a request"""

    field: str = Field(..., description="Field the error refers to")
    message: str = Field(..., description="Human-readable message")
    value: Optional[Any] = Field(None, description="Offending value, when relevant")


class ServiceSuccess(BaseModel, Generic[T]):
    success: Literal[True] = True
    data: Optional[T] = None
    message: Optional[str] = None


class ServiceFailure(BaseModel):
    success: Literal[False] = False
    errors: List[FieldError] = Field(..., min_length=1)
    message: Optional[str] = None


ServiceResult = Union[ServiceSuccess, ServiceFailure]


def failure(field: str, message: str, value: Any = None) -> ServiceFailure:
    """Shortcut for a failure carrying a single error"""
    return ServiceFailure(errors=[FieldError(field=field, message=message, value=value)])
