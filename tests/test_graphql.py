import json
import pytest
from httpx import AsyncClient

from src.gql.schema import schema
from src.patents.service import PatentService

REGISTER = """
mutation Register($input: RegisterInput!) {
  register(input: $input) { token user { id email firstName plan } }
}
"""

CREATE_PATENT = """
mutation Create($input: PatentInput!) {
  createPatent(input: $input) { id title status inventors jurisdictions owner { email } }
}
"""

UPDATE_STATUS = """
mutation Status($id: ID!, $status: String!) {
  updatePatentStatus(id: $id, status: $status) { id status filingDate }
}
"""

GET_PATENT = """
query Get($id: ID!) { getPatent(id: $id) { id status documents { id name url } } }
"""


async def _gql(client: AsyncClient, query: str, variables=None, token=None):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    response = await client.post("/graphql", json={"query": query, "variables": variables or {}}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


async def _register(client, email="gql@example.com"):
    result = await _gql(client, REGISTER, {"input": {
        "email": email,
        "password": "password123",
        "firstName": "Grace",
        "lastName": "Hopper",
    }})
    assert "errors" not in result, result
    return result["data"]["register"]


@pytest.mark.asyncio
async def test_register_and_me(async_client: AsyncClient):
    payload = await _register(async_client)
    assert payload["user"]["firstName"] == "Grace"
    assert payload["user"]["plan"] == "free"

    result = await _gql(async_client, "{ me { id email } }", token=payload["token"])
    assert result["data"]["me"]["id"] == payload["user"]["id"]


@pytest.mark.asyncio
async def test_login_with_bad_password_has_error_code(async_client: AsyncClient):
    await _register(async_client)
    result = await _gql(
        async_client,
        'mutation { login(input: {email: "gql@example.com", password: "nope"}) { token } }',
    )
    assert result["errors"][0]["extensions"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_unauthenticated_query_has_error_code(async_client: AsyncClient):
    result = await _gql(async_client, "{ getUserPatents { id } }")
    assert result["data"] is None
    assert result["errors"][0]["extensions"]["code"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_widget_scenario(async_client: AsyncClient):
    token = (await _register(async_client))["token"]

    created = await _gql(async_client, CREATE_PATENT, {"input": {
        "title": "Widget",
        "description": "A better widget",
        "inventors": ["Alice"],
        "jurisdictions": ["US"],
    }}, token=token)
    patent = created["data"]["createPatent"]
    assert patent["status"] == "draft"
    assert patent["jurisdictions"] == ["US"]
    assert patent["owner"]["email"] == "gql@example.com"

    moved = await _gql(async_client, UPDATE_STATUS, {"id": patent["id"], "status": "filed"}, token=token)
    assert moved["data"]["updatePatentStatus"]["filingDate"] is not None

    fetched = await _gql(async_client, GET_PATENT, {"id": patent["id"]}, token=token)
    assert fetched["data"]["getPatent"]["status"] == "filed"


@pytest.mark.asyncio
async def test_invalid_transition_and_status(async_client: AsyncClient):
    token = (await _register(async_client))["token"]
    patent = (await _gql(async_client, CREATE_PATENT, {"input": {
        "title": "Widget", "description": "A better widget", "inventors": [], "jurisdictions": [],
    }}, token=token))["data"]["createPatent"]

    granted = await _gql(async_client, UPDATE_STATUS, {"id": patent["id"], "status": "granted"}, token=token)
    assert granted["errors"][0]["extensions"]["code"] == "INVALID_STATUS_TRANSITION"

    unknown = await _gql(async_client, UPDATE_STATUS, {"id": patent["id"], "status": "lost"}, token=token)
    assert unknown["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"


@pytest.mark.asyncio
async def test_cross_user_patent_is_not_found(async_client: AsyncClient):
    owner = (await _register(async_client, "owner@example.com"))["token"]
    other = (await _register(async_client, "other@example.com"))["token"]
    patent = (await _gql(async_client, CREATE_PATENT, {"input": {
        "title": "Widget", "description": "A better widget", "inventors": [], "jurisdictions": [],
    }}, token=owner))["data"]["createPatent"]

    result = await _gql(async_client, GET_PATENT, {"id": patent["id"]}, token=other)
    assert result["errors"][0]["extensions"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_search_update_and_delete(async_client: AsyncClient):
    token = (await _register(async_client))["token"]
    for title in ("Alpha pump", "Beta pump", "Gamma lamp"):
        await _gql(async_client, CREATE_PATENT, {"input": {
            "title": title, "description": "desc", "inventors": [], "jurisdictions": ["EP"],
        }}, token=token)

    search = await _gql(async_client, """
        query Search($input: SearchInput!) {
          searchPatents(input: $input) { patents { id title } totalCount page totalPages }
        }
    """, {"input": {"query": "pump", "sortBy": "title", "sortDirection": "asc", "limit": 1}}, token=token)
    result = search["data"]["searchPatents"]
    assert result["totalCount"] == 2
    assert result["totalPages"] == 2
    assert [p["title"] for p in result["patents"]] == ["Alpha pump"]

    patent_id = result["patents"][0]["id"]
    updated = await _gql(async_client, """
        mutation Update($id: ID!, $input: PatentUpdateInput!) {
          updatePatent(id: $id, input: $input) { title description }
        }
    """, {"id": patent_id, "input": {"title": "Alpha pump v2"}}, token=token)
    assert updated["data"]["updatePatent"] == {"title": "Alpha pump v2", "description": "desc"}

    deleted = await _gql(async_client, "mutation D($id: ID!) { deletePatent(id: $id) }", {"id": patent_id}, token=token)
    assert deleted["data"]["deletePatent"] is True


@pytest.mark.asyncio
async def test_search_report_and_analysis(async_client: AsyncClient):
    token = (await _register(async_client))["token"]
    patent = (await _gql(async_client, CREATE_PATENT, {"input": {
        "title": "Battery circuit", "description": "A transistor circuit for battery charging",
        "inventors": [], "jurisdictions": [],
    }}, token=token))["data"]["createPatent"]

    report = await _gql(async_client, """
        mutation R($id: ID!) {
          generateSearchReport(patentId: $id) {
            similarityScore recommendations aiAnalysis { innovationScore marketSizeEstimate }
          }
        }
    """, {"id": patent["id"]}, token=token)
    data = report["data"]["generateSearchReport"]
    assert data["similarityScore"] == 0
    assert data["aiAnalysis"]["marketSizeEstimate"] > 0

    analysis = await _gql(async_client, """
        query A($id: ID!) {
          getAIAnalysis(patentId: $id) { technicalSummary technicalClassification { label } }
        }
    """, {"id": patent["id"]}, token=token)
    assert analysis["data"]["getAIAnalysis"]["technicalClassification"][0]["label"] == "Electricity"

    similar = await _gql(
        async_client, "query S($id: ID!) { getSimilarPatents(patentId: $id) { id } }", {"id": patent["id"]}, token=token
    )
    assert similar["data"]["getSimilarPatents"] == []


@pytest.mark.asyncio
async def test_upload_and_delete_document(async_client: AsyncClient, storage):
    token = (await _register(async_client))["token"]
    patent = (await _gql(async_client, CREATE_PATENT, {"input": {
        "title": "Widget", "description": "A better widget", "inventors": [], "jurisdictions": [],
    }}, token=token))["data"]["createPatent"]

    operations = {
        "query": """
            mutation Upload($input: DocumentUploadInput!) {
              uploadDocument(input: $input) { id name url type }
            }
        """,
        "variables": {"input": {"patentId": patent["id"], "name": "Figure 1", "type": "drawing", "file": None}},
    }
    response = await async_client.post(
        "/graphql",
        data={"operations": json.dumps(operations), "map": json.dumps({"0": ["variables.input.file"]})},
        files={"0": ("figure.png", b"\x89PNG", "image/png")},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200, response.text
    doc = response.json()["data"]["uploadDocument"]
    assert doc["name"] == "Figure 1"
    assert storage.path_for_url(doc["url"]).exists()

    deleted = await _gql(
        async_client, "mutation D($id: ID!) { deleteDocument(documentId: $id) }", {"id": doc["id"]}, token=token
    )
    assert deleted["data"]["deleteDocument"] is True
    assert not storage.path_for_url(doc["url"]).exists()

    fetched = await _gql(async_client, GET_PATENT, {"id": patent["id"]}, token=token)
    assert fetched["data"]["getPatent"]["documents"] == []


@pytest.mark.asyncio
async def test_auth_works_without_model_credentials(async_client: AsyncClient, unconfigured_llm):
    await _register(async_client)
    result = await _gql(
        async_client,
        'mutation { login(input: {email: "gql@example.com", password: "password123"}) { token } }',
    )
    assert "errors" not in result, result
    assert result["data"]["login"]["token"]

    patent = await _gql(
        async_client,
        CREATE_PATENT,
        {"input": {"title": "Widget", "description": "A better widget", "inventors": [], "jurisdictions": []}},
        token=result["data"]["login"]["token"],
    )
    report = await _gql(
        async_client,
        "mutation Report($id: ID!) { generateSearchReport(patentId: $id) { similarityScore } }",
        {"id": patent["data"]["createPatent"]["id"]},
        token=result["data"]["login"]["token"],
    )
    assert report["errors"][0]["extensions"]["code"] == "ANALYSIS_FAILED"


@pytest.mark.asyncio
async def test_unexpected_errors_are_masked(async_client: AsyncClient, monkeypatch):
    token = (await _register(async_client))["token"]

    async def broken(self, user):
        raise RuntimeError("connection string with secrets")

    monkeypatch.setattr(PatentService, "list_patents", broken)
    result = await _gql(async_client, "{ getUserPatents { id } }", token=token)
    assert result["errors"][0]["message"] == "Internal server error"
    assert "secrets" not in json.dumps(result)


def test_error_mask_is_registered_as_a_class():
    assert all(isinstance(extension, type) for extension in schema.extensions)
