"""
GraphQL schema for the Monitoring Service.
Defines the complete GraphQL schema using Strawberry.
"""

import strawberry
from strawberry.fastapi import GraphQLRouter

from ...core.ports.monitoring_service import MonitoringService
from ...core.ports.monitoring_client import MonitoringClient
from .resolvers import create_graphql_query


def create_graphql_schema(monitoring_service: MonitoringService, monitoring_client: MonitoringClient):
    """
    Create the complete GraphQL schema with dependency injection.

    Args:
        monitoring_service: Implementation of the MonitoringService port
        monitoring_client: Query engine client, used for health checks

    Returns:
        Strawberry GraphQL schema
    """
    query = create_graphql_query(monitoring_service, monitoring_client)
    return strawberry.Schema(query=query)


def create_graphql_router(
    monitoring_service: MonitoringService,
    monitoring_client: MonitoringClient,
    playground_enabled: bool = False
) -> GraphQLRouter:
    """
    Create GraphQL router with FastAPI integration and playground support.

    Args:
        monitoring_service: Implementation of the MonitoringService port
        monitoring_client: Query engine client, used for health checks
        playground_enabled: Whether to enable the GraphiQL playground

    Returns:
        GraphQL router for FastAPI integration
    """
    schema = create_graphql_schema(monitoring_service, monitoring_client)

    return GraphQLRouter(
        schema,
        graphiql=playground_enabled
    )
