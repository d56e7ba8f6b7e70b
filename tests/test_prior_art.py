import pytest
from httpx import AsyncClient

RECORD = {
    "patent_number": "US10000001B2",
    "title": "Landing platform",
    "abstract": "A platform with adjustable legs.",
    "claims": ["A platform comprising adjustable legs."],
    "publication_date": "2018-06-19",
}


@pytest.mark.asyncio
async def test_create_and_list_prior_art(async_client: AsyncClient, register):
    headers, _ = await register()
    response = await async_client.post("/api/prior-art", json=RECORD, headers=headers)
    assert response.status_code == 201
    assert response.json()["publication_date"] == "2018-06-19"

    listed = await async_client.get("/api/prior-art", headers=headers)
    assert [r["patent_number"] for r in listed.json()] == ["US10000001B2"]


@pytest.mark.asyncio
async def test_duplicate_patent_number_rejected(async_client: AsyncClient, register):
    headers, _ = await register()
    await async_client.post("/api/prior-art", json=RECORD, headers=headers)
    response = await async_client.post("/api/prior-art", json=RECORD, headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_prior_art_requires_authentication(async_client: AsyncClient):
    assert (await async_client.get("/api/prior-art")).status_code == 401


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    response = await async_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
