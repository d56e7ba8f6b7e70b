import pytest
from uuid import UUID
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from src.auth.models import User
from src.config import settings
from src.documents.models import Document
from src.documents.service import DocumentService
from src.documents.storage import LocalFileStorage
from src.exceptions import BadInput
from src.patents.service import PatentService


async def _upload(client, headers, patent_id, filename="drawing.png", content=b"\x89PNG fake", **form):
    return await client.post(
        f"/api/patents/{patent_id}/documents",
        files={"file": (filename, content, "image/png")},
        data=form,
        headers=headers,
    )


@pytest.mark.asyncio
async def test_upload_stores_file_under_generated_name(
    async_client: AsyncClient, register, create_patent, storage: LocalFileStorage
):
    headers, _ = await register()
    patent = await create_patent(headers)

    response = await _upload(async_client, headers, patent["id"], name="Figure 1", type="drawing")
    assert response.status_code == 201, response.text
    doc = response.json()
    assert doc["name"] == "Figure 1"
    assert doc["type"] == "drawing"
    assert doc["filename"] == "drawing.png"
    assert doc["size"] == len(b"\x89PNG fake")
    assert doc["url"].startswith("/uploads/")
    assert doc["url"].endswith(".png")
    assert doc["url"] != "/uploads/drawing.png"
    assert storage.path_for_url(doc["url"]).read_bytes() == b"\x89PNG fake"

    patent_view = await async_client.get(f"/api/patents/{patent['id']}", headers=headers)
    assert [d["id"] for d in patent_view.json()["documents"]] == [doc["id"]]


@pytest.mark.asyncio
async def test_upload_defaults_name_and_type(async_client: AsyncClient, register, create_patent):
    headers, _ = await register()
    patent = await create_patent(headers)
    doc = (await _upload(async_client, headers, patent["id"])).json()
    assert doc["name"] == "drawing.png"
    assert doc["type"] == "image/png"


@pytest.mark.asyncio
async def test_empty_upload_rejected(async_client: AsyncClient, register, create_patent):
    headers, _ = await register()
    patent = await create_patent(headers)
    response = await _upload(async_client, headers, patent["id"], content=b"")
    assert response.status_code == 400
    assert response.json()["code"] == "BAD_USER_INPUT"


@pytest.mark.asyncio
async def test_oversized_upload_rejected(async_client: AsyncClient, register, create_patent, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)
    headers, _ = await register()
    patent = await create_patent(headers)
    response = await _upload(async_client, headers, patent["id"], content=b"123456789")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_get_and_delete_document(
    async_client: AsyncClient, register, create_patent, storage: LocalFileStorage
):
    headers, _ = await register()
    patent = await create_patent(headers)
    first = (await _upload(async_client, headers, patent["id"], filename="a.pdf")).json()
    second = (await _upload(async_client, headers, patent["id"], filename="b.pdf")).json()
    base = f"/api/patents/{patent['id']}/documents"

    listed = await async_client.get(base, headers=headers)
    assert [d["id"] for d in listed.json()] == [first["id"], second["id"]]

    fetched = await async_client.get(f"{base}/{first['id']}", headers=headers)
    assert fetched.json()["filename"] == "a.pdf"

    response = await async_client.delete(f"{base}/{first['id']}", headers=headers)
    assert response.status_code == 204
    assert not storage.path_for_url(first["url"]).exists()
    assert storage.path_for_url(second["url"]).exists()
    assert (await async_client.get(f"{base}/{first['id']}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_documents_follow_patent_ownership(async_client: AsyncClient, register, create_patent):
    alice, _ = await register("alice@example.com")
    bob, _ = await register("bob@example.com")
    patent = await create_patent(alice)
    doc = (await _upload(async_client, alice, patent["id"])).json()

    assert (await _upload(async_client, bob, patent["id"])).status_code == 404
    response = await async_client.delete(f"/api/patents/{patent['id']}/documents/{doc['id']}", headers=bob)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_document_of_other_patent_not_found(async_client: AsyncClient, register, create_patent):
    headers, _ = await register()
    one = await create_patent(headers, title="One")
    two = await create_patent(headers, title="Two")
    doc = (await _upload(async_client, headers, one["id"])).json()

    response = await async_client.get(f"/api/patents/{two['id']}/documents/{doc['id']}", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_deleting_patent_removes_document_files_and_records(
    async_client: AsyncClient, register, create_patent, storage: LocalFileStorage, db_session
):
    headers, _ = await register()
    patent = await create_patent(headers)
    docs = [
        (await _upload(async_client, headers, patent["id"], filename=name)).json()
        for name in ("a.png", "b.pdf")
    ]
    paths = [storage.path_for_url(d["url"]) for d in docs]
    assert all(p.exists() for p in paths)

    response = await async_client.delete(f"/api/patents/{patent['id']}", headers=headers)
    assert response.status_code == 204

    assert not any(p.exists() for p in paths)
    remaining = await db_session.execute(select(func.count()).select_from(Document))
    assert remaining.scalar_one() == 0


def _fail_commits(monkeypatch, session):
    async def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "commit", failing_commit)


@pytest.mark.asyncio
async def test_failed_patent_delete_keeps_files_and_records(
    async_client: AsyncClient, register, create_patent, storage: LocalFileStorage, db_session, monkeypatch
):
    headers, user = await register()
    patent = await create_patent(headers)
    doc = (await _upload(async_client, headers, patent["id"])).json()
    path = storage.path_for_url(doc["url"])
    owner = await db_session.get(User, UUID(user["id"]))

    _fail_commits(monkeypatch, db_session)
    with pytest.raises(OperationalError):
        await PatentService(db_session, storage).delete_patent(UUID(patent["id"]), owner)
    monkeypatch.undo()

    assert path.exists()
    remaining = await db_session.execute(select(func.count()).select_from(Document))
    assert remaining.scalar_one() == 1


@pytest.mark.asyncio
async def test_failed_document_delete_keeps_file(
    async_client: AsyncClient, register, create_patent, storage: LocalFileStorage, db_session, monkeypatch
):
    headers, _ = await register()
    patent = await create_patent(headers)
    doc = (await _upload(async_client, headers, patent["id"])).json()
    path = storage.path_for_url(doc["url"])

    _fail_commits(monkeypatch, db_session)
    with pytest.raises(OperationalError):
        await DocumentService(db_session, storage).delete_document(UUID(patent["id"]), UUID(doc["id"]))
    monkeypatch.undo()

    assert path.exists()
    response = await async_client.get(f"/api/patents/{patent['id']}/documents/{doc['id']}", headers=headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_discard_skips_files_it_cannot_remove(storage: LocalFileStorage):
    kept = await storage.save(b"a", "a.txt")
    removed = await storage.discard([kept, "/elsewhere/file.txt"])
    assert removed == 1
    assert not storage.path_for_url(kept).exists()


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_storage_preserves_extension_and_generates_unique_names(storage: LocalFileStorage):
    url_a = await storage.save(b"a", "Report.PDF")
    url_b = await storage.save(b"b", "Report.PDF")
    assert url_a != url_b
    assert url_a.endswith(".pdf")


@pytest.mark.asyncio
async def test_storage_delete_missing_file_is_quiet(storage: LocalFileStorage):
    url = await storage.save(b"a", "x.txt")
    await storage.delete(url)
    await storage.delete(url)
    assert not storage.path_for_url(url).exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["/uploads/../secret.txt", "/uploads/nested/../../x", "/elsewhere/file.txt"])
async def test_storage_refuses_paths_outside_root(storage: LocalFileStorage, url):
    with pytest.raises(BadInput):
        await storage.delete(url)
