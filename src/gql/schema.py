import dataclasses
from typing import List, Optional
from uuid import UUID

import strawberry
from pydantic import BaseModel, ValidationError
from strawberry.extensions import MaskErrors
from strawberry.types import Info

from src.auth import schemas as auth_schemas
from src.auth.service import AuthService
from src.documents.models import Document as DocumentModel
from src.documents.schemas import DocumentResponse
from src.documents.service import DocumentService
from src.exceptions import AppError, BadInput, NotFound
from src.gql.context import GraphQLContext
from src.gql.types import (
    AIAnalysisDetail,
    AuthPayload,
    Document,
    DocumentUploadInput,
    LoginInput,
    Patent,
    PatentInput,
    PatentUpdateInput,
    RegisterInput,
    SearchInput,
    SearchReport,
    SearchResult,
    SimilarPatent,
    User,
)
from src.patents.models import PatentStatus
from src.patents.schemas import PatentCreate, PatentSearch, PatentUpdate
from src.patents.service import PatentService
from src.reports.service import ReportService

GraphQLInfo = Info[GraphQLContext, None]


def _input_data(value) -> dict:
    """Fields of a strawberry input that the client actually sent."""
    data = {}
    for field in dataclasses.fields(value):
        item = getattr(value, field.name)
        if item is strawberry.UNSET:
            continue
        data[field.name] = item
    return data


def _validate(model: type[BaseModel], data: dict):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise BadInput(errors) from e


def _uuid(value: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError as e:
        raise NotFound("Resource not found") from e


def _status(value: str) -> PatentStatus:
    try:
        return PatentStatus((value or "").lower())
    except ValueError as e:
        raise BadInput(f"Unknown patent status {value!r}") from e


def _auth_payload(payload: auth_schemas.AuthPayload) -> AuthPayload:
    return AuthPayload(
        token=payload.token,
        token_type=payload.token_type,
        user=User.from_schema(payload.user),
    )


@strawberry.type
class Query:
    @strawberry.field
    async def me(self, info: GraphQLInfo) -> Optional[User]:
        user = await info.context.require_user()
        return User.from_schema(auth_schemas.UserResponse.model_validate(user))

    @strawberry.field
    async def get_user_patents(self, info: GraphQLInfo) -> List[Patent]:
        user = await info.context.require_user()
        patents = await PatentService(info.context.db).list_patents(user)
        return [Patent.from_data(p) for p in patents]

    @strawberry.field
    async def get_patent(self, info: GraphQLInfo, id: strawberry.ID) -> Patent:
        user = await info.context.require_user()
        patent = await PatentService(info.context.db).get_patent(_uuid(id), user)
        return Patent.from_data(patent)

    @strawberry.field
    async def search_patents(self, info: GraphQLInfo, input: SearchInput) -> SearchResult:
        user = await info.context.require_user()
        data = {k: v for k, v in _input_data(input).items() if v is not None}
        if "status" in data:
            data["status"] = [s.lower() for s in data["status"]]
        date_range = data.pop("date_range", None)
        if date_range is not None:
            data["date_from"] = date_range.from_
            data["date_to"] = date_range.to
        filters = _validate(PatentSearch, data)
        result = await PatentService(info.context.db).search_patents(filters, user)
        return SearchResult(
            patents=[Patent.from_data(p) for p in result["items"]],
            total_count=result["total_count"],
            page=result["page"],
            total_pages=result["total_pages"],
        )

    @strawberry.field
    async def get_similar_patents(self, info: GraphQLInfo, patent_id: strawberry.ID) -> List[SimilarPatent]:
        user = await info.context.require_user()
        patent = await PatentService(info.context.db).get_owned_patent(_uuid(patent_id), user)
        similar = await ReportService(info.context.db, info.context.provider).similar_patents(patent, user)
        return [
            SimilarPatent(
                id=strawberry.ID(str(s.id)),
                title=s.title,
                status=s.status,
                technical_field=s.technical_field,
                similarity_score=s.similarity_score,
            )
            for s in similar
        ]

    @strawberry.field(name="getAIAnalysis")
    async def get_ai_analysis(self, info: GraphQLInfo, patent_id: strawberry.ID) -> AIAnalysisDetail:
        user = await info.context.require_user()
        patent = await PatentService(info.context.db).get_owned_patent(_uuid(patent_id), user)
        detail = await ReportService(info.context.db, info.context.provider).get_ai_analysis(patent)
        return AIAnalysisDetail.from_schema(detail)


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def register(self, info: GraphQLInfo, input: RegisterInput) -> AuthPayload:
        data = {k: v for k, v in _input_data(input).items() if v is not None}
        register_data = _validate(auth_schemas.UserRegister, data)
        return _auth_payload(await AuthService(info.context.db).register(register_data))

    @strawberry.mutation
    async def login(self, info: GraphQLInfo, input: LoginInput) -> AuthPayload:
        login_data = _validate(auth_schemas.UserLogin, _input_data(input))
        return _auth_payload(await AuthService(info.context.db).login(login_data))

    @strawberry.mutation
    async def create_patent(self, info: GraphQLInfo, input: PatentInput) -> Patent:
        user = await info.context.require_user()
        data = {k: v for k, v in _input_data(input).items() if v is not None}
        patent_in = _validate(PatentCreate, data)
        return Patent.from_data(await PatentService(info.context.db).create_patent(patent_in, user))

    @strawberry.mutation
    async def update_patent(self, info: GraphQLInfo, id: strawberry.ID, input: PatentUpdateInput) -> Patent:
        user = await info.context.require_user()
        patent_in = _validate(PatentUpdate, _input_data(input))
        patent = await PatentService(info.context.db).update_patent(_uuid(id), patent_in, user)
        return Patent.from_data(patent)

    @strawberry.mutation
    async def delete_patent(self, info: GraphQLInfo, id: strawberry.ID) -> bool:
        user = await info.context.require_user()
        await PatentService(info.context.db, info.context.storage).delete_patent(_uuid(id), user)
        return True

    @strawberry.mutation
    async def update_patent_status(self, info: GraphQLInfo, id: strawberry.ID, status: str) -> Patent:
        user = await info.context.require_user()
        patent = await PatentService(info.context.db).update_status(_uuid(id), _status(status), user)
        return Patent.from_data(patent)

    @strawberry.mutation
    async def upload_document(self, info: GraphQLInfo, input: DocumentUploadInput) -> Document:
        user = await info.context.require_user()
        patent = await PatentService(info.context.db).get_owned_patent(_uuid(input.patent_id), user)
        service = DocumentService(info.context.db, info.context.storage)
        doc = await service.upload_document(patent.id, input.file, name=input.name, doc_type=input.type)
        return Document.from_schema(DocumentResponse.model_validate(doc))

    @strawberry.mutation
    async def delete_document(self, info: GraphQLInfo, document_id: strawberry.ID) -> bool:
        user = await info.context.require_user()
        doc = await info.context.db.get(DocumentModel, _uuid(document_id))
        if doc is None:
            raise NotFound("Document not found")
        # Ownership is checked through the parent patent
        patent = await PatentService(info.context.db).get_owned_patent(doc.patent_id, user)
        await DocumentService(info.context.db, info.context.storage).delete_document(patent.id, doc.id)
        return True

    @strawberry.mutation
    async def generate_search_report(self, info: GraphQLInfo, patent_id: strawberry.ID) -> SearchReport:
        user = await info.context.require_user()
        patent = await PatentService(info.context.db).get_owned_patent(_uuid(patent_id), user)
        report = await ReportService(info.context.db, info.context.provider).generate_report(patent)
        return SearchReport.from_schema(report)


def _should_mask(error) -> bool:
    original = getattr(error, "original_error", None)
    return original is not None and not isinstance(original, AppError)


class MaskInternalErrors(MaskErrors):
    """Hides unexpected failures; domain errors keep their message and code."""

    def __init__(self, execution_context=None):
        super().__init__(should_mask_error=_should_mask, error_message="Internal server error")


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[MaskInternalErrors],
)
