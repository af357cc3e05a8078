"""
Pydantic models for FastAPI request/response serialization.
These models handle the conversion between HTTP and domain objects.
"""

import math
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime

from ...core.domain.metric import (
    Metric,
    MetricData,
    MetricValue,
    Metrics,
    Metadata,
    LabelValues,
    MetricLabelSet,
    Point
)


def format_sample_value(value: float) -> str:
    """Render a sample value the way Prometheus does, keeping NaN and Inf JSON-safe."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _point(point: Point) -> Tuple[float, str]:
    return (point.timestamp, format_sample_value(point.value))


class MetricValueModel(BaseModel):
    """Model for one labelled series."""
    metric: Dict[str, str] = Field(default_factory=dict, description="Series labels")
    value: Optional[Tuple[float, str]] = Field(None, description="Instant sample as [timestamp, value]")
    values: Optional[List[Tuple[float, str]]] = Field(None, description="Range samples as [timestamp, value] pairs")

    @classmethod
    def from_domain(cls, metric_value: MetricValue) -> "MetricValueModel":
        """Convert from domain object to model."""
        return cls(
            metric=metric_value.metadata,
            value=_point(metric_value.sample) if metric_value.sample else None,
            values=[_point(p) for p in metric_value.series] if metric_value.series else None
        )


class MetricDataModel(BaseModel):
    """Model for a successful query payload."""
    result_type: str = Field(..., alias="resultType", description="'vector' or 'matrix'")
    result: List[MetricValueModel] = Field(default_factory=list, description="Result series")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_domain(cls, data: MetricData) -> "MetricDataModel":
        """Convert from domain object to model."""
        return cls(
            result_type=data.metric_type,
            result=[MetricValueModel.from_domain(v) for v in data.metric_values]
        )


class MetricModel(BaseModel):
    """Model for a single metric result; either data or error is set."""
    metric_name: Optional[str] = Field(None, description="Name of the metric, empty for raw expressions")
    data: Optional[MetricDataModel] = Field(None, description="Query result")
    error: Optional[str] = Field(None, description="Error message when the query failed")

    @classmethod
    def from_domain(cls, metric: Metric) -> "MetricModel":
        """Convert from domain object to model."""
        return cls(
            metric_name=metric.metric_name or None,
            data=MetricDataModel.from_domain(metric.metric_data) if metric.metric_data else None,
            error=metric.error or None
        )


class MetricsResponse(BaseModel):
    """Response model for batched metric results, in request order."""
    results: List[MetricModel] = Field(default_factory=list, description="One result per requested metric")

    @classmethod
    def from_domain(cls, metrics: Metrics) -> "MetricsResponse":
        """Convert from domain object to response model."""
        return cls(results=[MetricModel.from_domain(m) for m in metrics.results])


class MetadataResponse(BaseModel):
    """Response model for metric metadata."""
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Metric metadata entries")

    @classmethod
    def from_domain(cls, metadata: Metadata) -> "MetadataResponse":
        return cls(data=metadata.data)


class LabelValuesResponse(BaseModel):
    """Response model for label values."""
    data: List[str] = Field(default_factory=list, description="Label values")

    @classmethod
    def from_domain(cls, label_values: LabelValues) -> "LabelValuesResponse":
        return cls(data=label_values.data)


class MetricLabelSetResponse(BaseModel):
    """Response model for the label sets of a metric."""
    data: List[Dict[str, str]] = Field(default_factory=list, description="Label sets of matching series")

    @classmethod
    def from_domain(cls, label_set: MetricLabelSet) -> "MetricLabelSetResponse":
        return cls(data=label_set.data)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error type or category")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.now, description="Error timestamp")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    timestamp: datetime = Field(..., description="Health check timestamp")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional health information")
