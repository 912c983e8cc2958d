"""
Enveloppe de réponse commune / Common response envelope.
{success, message?, data?} ; les erreurs ajoutent `errors` (voir main.py).
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

# Borne des identifiants et numéros de page (INTEGER SQL) / Bound for ids and page numbers (SQL INTEGER)
MAX_INT = 2**31 - 1


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None


class Pagination(BaseModel):
    current_page: int
    last_page: int
    per_page: int
    total: int


class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    data: list[T]
    pagination: Pagination
