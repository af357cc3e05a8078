"""
Configuration settings for the Monitoring Service.
Loads configuration from environment variables with sensible defaults.
"""

import os
from typing import List, Optional

from ...adapters.logger.standard_logger import StandardLogger
from ..ports.logger import Logger


# Configure logging using our custom logger
logger: Logger = StandardLogger("monitoring")


# Configuration from environment variables
class Config:
    """Application configuration loaded from environment variables."""

    # Prometheus configuration
    PROMETHEUS_URL: str = os.getenv("PROMETHEUS_URL", "http://localhost:9090")
    PROMETHEUS_TIMEOUT: float = float(os.getenv("PROMETHEUS_TIMEOUT", "30"))

    # Kind of the active monitoring backend, selects the namespace rewriter
    MONITORING_BACKEND: str = os.getenv("MONITORING_BACKEND", "prometheus")

    # Kubernetes configuration
    KUBE_IN_CLUSTER: bool = os.getenv("KUBE_IN_CLUSTER", "false").lower() == "true"
    KUBECONFIG: Optional[str] = os.getenv("KUBECONFIG")

    # CORS configuration
    CORS_ORIGINS: List[str] = os.getenv("CORS_ORIGINS", "*").split(",")

    # Application configuration
    APP_TITLE: str = "Monitoring Service"
    APP_DESCRIPTION: str = "Metric query façade with cluster and workspace statistics"
    APP_VERSION: str = "1.0.0"
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"
    API_PREFIX: str = "/api/v1/monitoring"

    # GraphQL configuration
    GRAPHQL_PLAYGROUND_ENABLED: bool = os.getenv("GRAPHQL_PLAYGROUND_ENABLED", "true").lower() == "true"
    GRAPHQL_ENDPOINT: str = "/api/v1/graphql"

    # Server configuration
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    RELOAD: bool = os.getenv("RELOAD", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")


# Global configuration instance
config = Config()
