# --- keep this shim at the very top ---
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# --------------------------------------

import httpx
import pytest
import pytest_asyncio

from contextlib import asynccontextmanager

import app.main as app_main  # patch names bound inside main.py
from app import ingest
from app.page_cache import page_cache
from app.schemas import Character


def make_character(
    id: int,
    name: str,
    status: str | None = "Alive",
    gender: str | None = "Male",
    species: str | None = "Human",
) -> Character:
    return Character(
        id=id,
        name=name,
        status=status,
        gender=gender,
        species=species,
        image=f"https://example.test/{id}.jpeg",
    )


@pytest.fixture(autouse=True)
def empty_dataset_and_test_lifespan(monkeypatch):
    """
    Start every test with no characters loaded and an empty result cache.
    - Module-level dataset globals are restored by monkeypatch afterwards.
    - Replace app lifespan so TestClient startup doesn't hit the upstream API.
    """
    monkeypatch.setattr(ingest, "_characters", [])
    monkeypatch.setattr(ingest, "_by_id", {})
    monkeypatch.setattr(ingest, "_last_load_ts", None)
    page_cache.invalidate_all()

    @asynccontextmanager
    async def test_lifespan(_app):
        yield

    monkeypatch.setattr(
        app_main.app.router, "lifespan_context", test_lifespan, raising=False
    )

    yield

    page_cache.invalidate_all()


@pytest.fixture
def three_characters():
    """Rick, Morty, Summer: the small dataset most pipeline tests use."""
    return [
        make_character(1, "Rick", status="Alive", gender="Male", species="Human"),
        make_character(2, "Morty", status="Alive", gender="Male", species="Human"),
        make_character(3, "Summer", status="Dead", gender="Female", species="Human"),
    ]


@pytest.fixture
def loaded(three_characters):
    """Install `three_characters` as the in-memory dataset."""
    ingest.set_dataset(three_characters)
    return three_characters


@pytest_asyncio.fixture
async def test_client():
    transport = httpx.ASGITransport(app=app_main.app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as c:
        yield c
