from strawberry.fastapi import GraphQLRouter

from src.gql.context import get_context
from src.gql.schema import schema

graphql_router = GraphQLRouter(
    schema,
    context_getter=get_context,
    multipart_uploads_enabled=True,
)
