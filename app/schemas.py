"""Pydantic schemas for the character record and API response bodies."""

from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict

STATUSES = ("Alive", "Dead", "unknown")
GENDERS = ("Male", "Female", "Genderless", "unknown")


class Character(BaseModel):
    """One character as loaded from the upstream API.

    Only ``id`` and ``name`` are required; the remaining fields are optional so a
    partially populated upstream record still loads. Extra upstream fields
    (origin, location, episode, ...) are dropped.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    status: Optional[str] = None
    species: Optional[str] = None
    gender: Optional[str] = None
    image: Optional[str] = None


class CharactersPage(BaseModel):
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_prev: bool
    has_next: bool
    out_of_range: bool
    results: List[Character]


class FilterOptions(BaseModel):
    status: List[str]
    gender: List[str]
    species: List[str]


class HealthcheckOut(BaseModel):
    status: Literal["ok", "degraded"]
    upstream_ok: bool
    character_count: int
    last_load_age: Optional[float] = None


class ProblemDetail(BaseModel):
    """RFC 7807-style problem response (simplified)."""

    type: str = "about:blank"
    title: str
    status: int
    detail: Optional[str] = None
    instance: Optional[str] = None
