from abc import ABC, abstractmethod
from typing import List
from datetime import datetime, timedelta

from ..domain.metric import Metric, QueryOptions


class MonitoringClient(ABC):
    """
    Port (interface) for the time-series query engine.
    Query methods report backend failures inside the returned Metric instead of raising.
    """

    @abstractmethod
    async def get_metric(self, expr: str, time: datetime) -> Metric:
        """
        Evaluate an expression at a single instant.

        Args:
            expr: Query expression
            time: Evaluation instant

        Returns:
            Metric carrying a vector result or an error message
        """
        pass

    @abstractmethod
    async def get_metric_over_time(
        self,
        expr: str,
        start: datetime,
        end: datetime,
        step: timedelta
    ) -> Metric:
        """
        Evaluate an expression over [start, end] at a fixed step.

        Returns:
            Metric carrying a matrix result or an error message
        """
        pass

    @abstractmethod
    async def get_named_metrics(
        self,
        metrics: List[str],
        time: datetime,
        options: QueryOptions
    ) -> List[Metric]:
        """
        Evaluate named metrics at a single instant.

        Returns:
            One Metric per requested name, in request order
        """
        pass

    @abstractmethod
    async def get_named_metrics_over_time(
        self,
        metrics: List[str],
        start: datetime,
        end: datetime,
        step: timedelta,
        options: QueryOptions
    ) -> List[Metric]:
        """
        Evaluate named metrics over a time range.

        Returns:
            One Metric per requested name, in request order
        """
        pass

    @abstractmethod
    async def get_metadata(self, namespace: str) -> List[dict]:
        """Fetch metric metadata, optionally limited to a namespace."""
        pass

    @abstractmethod
    async def get_label_values(
        self,
        label: str,
        matches: List[str],
        start: datetime,
        end: datetime
    ) -> List[str]:
        """Fetch the values a label takes across series matching the selectors."""
        pass

    @abstractmethod
    async def get_metric_label_set(
        self,
        expr: str,
        start: datetime,
        end: datetime
    ) -> List[dict]:
        """Fetch the label sets of series matching an expression."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the query engine is available and healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass
