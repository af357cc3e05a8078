"""
Main application entry point for the Monitoring Service.
Sets up FastAPI app with dependency injection and error handling.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from .core.services.monitoring_service_impl import MonitoringServiceImpl
from .core.services.entity_counter import EntityCounter
from .core.services.namespace_rewriter import build_namespace_rewriters
from .core.ports.monitoring_client import MonitoringClient
from .core.ports.monitoring_service import MonitoringService
from .core.ports.state_store import StateStore
from .adapters.repositories.prometheus_client import PrometheusClient
from .adapters.repositories.kubernetes_store import KubernetesStateStore, load_api_client
from .adapters.handlers.monitoring_handlers import MonitoringHandlers
from .adapters.graphql.schema import create_graphql_router

# Import configuration
from .core.config.config import config, logger

# Import error handlers
from .core.util.errorhandling import register_error_handlers


# Dependency injection setup
def get_prometheus_client() -> PrometheusClient:
    """Get Prometheus client instance."""
    return PrometheusClient(url=config.PROMETHEUS_URL, timeout=config.PROMETHEUS_TIMEOUT)


def get_state_store() -> KubernetesStateStore:
    """Get Kubernetes state store instance."""
    api_client = load_api_client(in_cluster=config.KUBE_IN_CLUSTER, kubeconfig=config.KUBECONFIG)
    return KubernetesStateStore(api_client)


def get_monitoring_service(
    monitoring_client: MonitoringClient,
    state_store: StateStore
) -> MonitoringServiceImpl:
    """Get monitoring service instance with injected dependencies."""
    return MonitoringServiceImpl(
        monitoring_client=monitoring_client,
        entity_counter=EntityCounter(state_store, logger=logger),
        rewriters=build_namespace_rewriters(),
        backend=config.MONITORING_BACKEND,
        logger=logger
    )


def include_routers(app: FastAPI, monitoring_service: MonitoringService, monitoring_client: MonitoringClient):
    """Attach the REST and GraphQL routers to the application."""
    handlers = MonitoringHandlers(monitoring_service, prefix=config.API_PREFIX)
    app.include_router(handlers.router)
    logger.info("REST API router configured successfully")

    graphql_router = create_graphql_router(
        monitoring_service=monitoring_service,
        monitoring_client=monitoring_client,
        playground_enabled=config.GRAPHQL_PLAYGROUND_ENABLED
    )
    app.include_router(graphql_router, prefix=config.GRAPHQL_ENDPOINT, tags=["GraphQL"])
    logger.info("GraphQL router configured successfully")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Monitoring Service...")

    if getattr(app.state, "monitoring_service", None) is None:
        logger.info(f"Connecting to Prometheus at: {config.PROMETHEUS_URL}")
        monitoring_client = get_prometheus_client()
        state_store = get_state_store()

        app.state.monitoring_client = monitoring_client
        app.state.state_store = state_store
        app.state.monitoring_service = get_monitoring_service(monitoring_client, state_store)
        include_routers(app, app.state.monitoring_service, monitoring_client)

    yield

    # Shutdown
    logger.info("Shutting down Monitoring Service...")
    client = getattr(app.state, "monitoring_client", None)
    if isinstance(client, PrometheusClient):
        await client.close()


def create_app(
    monitoring_service: Optional[MonitoringService] = None,
    monitoring_client: Optional[MonitoringClient] = None,
    state_store: Optional[StateStore] = None
) -> FastAPI:
    """
    Create the FastAPI application.

    Services passed in are wired immediately; otherwise they are built from
    configuration when the application starts.
    """
    app = FastAPI(
        title=config.APP_TITLE,
        description=config.APP_DESCRIPTION,
        version=config.APP_VERSION,
        docs_url=config.DOCS_URL,
        redoc_url=config.REDOC_URL,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.monitoring_service = monitoring_service
    app.state.monitoring_client = monitoring_client
    app.state.state_store = state_store
    if monitoring_service is not None:
        include_routers(app, monitoring_service, monitoring_client)

    register_error_handlers(app)

    @app.get("/")
    async def root():
        """Root endpoint with service information."""
        return {
            "service": config.APP_TITLE,
            "version": config.APP_VERSION,
            "description": config.APP_DESCRIPTION,
            "endpoints": {
                "docs": config.DOCS_URL,
                "redoc": config.REDOC_URL,
                "health": "/health",
                "monitoring": config.API_PREFIX,
                "graphql": config.GRAPHQL_ENDPOINT
            }
        }

    @app.get("/health")
    async def health_check():
        """Service health check."""
        try:
            client = app.state.monitoring_client
            store = app.state.state_store
            prometheus_healthy = await client.health_check() if client else False
            kubernetes_healthy = await store.health_check() if store else False
            healthy = prometheus_healthy and kubernetes_healthy

            return {
                "status": "healthy" if healthy else "degraded",
                "service": "monitoring",
                "prometheus": "healthy" if prometheus_healthy else "unhealthy",
                "kubernetes": "healthy" if kubernetes_healthy else "unhealthy",
                "prometheus_url": getattr(client, "url", "unknown"),
                "timestamp": datetime.now().isoformat()
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "service": "monitoring",
                    "error": str(e),
                    "timestamp": datetime.now().isoformat()
                }
            )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Run the application
    uvicorn.run(
        "monitoring_facade.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.RELOAD,
        log_level=config.LOG_LEVEL
    )
