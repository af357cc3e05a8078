"""
Models package for infrastructure layer.
Contains Pydantic models for request/response serialization.
"""

from .models import (
    MetricValueModel,
    MetricDataModel,
    MetricModel,
    MetricsResponse,
    MetadataResponse,
    LabelValuesResponse,
    MetricLabelSetResponse,
    ErrorResponse,
    HealthResponse,
    format_sample_value
)

__all__ = [
    "MetricValueModel",
    "MetricDataModel",
    "MetricModel",
    "MetricsResponse",
    "MetadataResponse",
    "LabelValuesResponse",
    "MetricLabelSetResponse",
    "ErrorResponse",
    "HealthResponse",
    "format_sample_value"
]
