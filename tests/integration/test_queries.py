"""
Integration tests for raw expression queries.
"""

import pytest


@pytest.mark.integration
@pytest.mark.asyncio
class TestInstantQuery:
    """Test the instant query endpoint."""

    async def test_instant_query(self, http_client, api_base, prometheus_requests):
        response = await http_client.get(f"{api_base}/query", params={"expr": "up", "time": "1709294400"})

        assert response.status_code == 200
        data = response.json()
        assert data["metric_name"] is None
        assert data["error"] is None
        assert data["data"]["resultType"] == "vector"
        assert data["data"]["result"][0] == {"metric": {"job": "api"}, "value": [1709294400.0, "1"], "values": None}
        assert prometheus_requests[-1].url.params["time"] == "1709294400.000"

    async def test_nan_sample_is_serialized_as_string(self, http_client, api_base):
        response = await http_client.get(f"{api_base}/query", params={"expr": "up"})

        assert response.json()["data"]["result"][1]["value"][1] == "NaN"

    async def test_namespace_is_not_applied(self, http_client, api_base, prometheus_requests):
        await http_client.get(f"{api_base}/query", params={"expr": "up", "namespace": "team-a"})

        assert prometheus_requests[-1].url.params["query"] == "up"

    async def test_iso_time(self, http_client, api_base, prometheus_requests):
        response = await http_client.get(
            f"{api_base}/query", params={"expr": "up", "time": "2024-03-01T12:00:00Z"}
        )

        assert response.status_code == 200
        assert prometheus_requests[-1].url.params["time"] == "1709294400.000"

    async def test_backend_error_is_reported_in_body(self, http_client, api_base):
        response = await http_client.get(f"{api_base}/query", params={"expr": "syntax_error("})

        assert response.status_code == 200
        data = response.json()
        assert data["data"] is None
        assert "bad_data" in data["error"]

    async def test_missing_expression(self, http_client, api_base):
        response = await http_client.get(f"{api_base}/query")

        assert response.status_code == 422

    async def test_invalid_time(self, http_client, api_base):
        response = await http_client.get(f"{api_base}/query", params={"expr": "up", "time": "yesterday"})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "Invalid datetime format"


@pytest.mark.integration
@pytest.mark.asyncio
class TestRangeQuery:
    """Test the range query endpoint."""

    async def test_range_query(self, http_client, api_base, sample_time_range, prometheus_requests):
        start, end = sample_time_range
        response = await http_client.get(
            f"{api_base}/query_range",
            params={"expr": "up", "start": start, "end": end, "step": "5m"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["data"]["resultType"] == "matrix"
        assert data["data"]["result"][0]["values"] == [[1709290800.0, "0.5"], [1709291400.0, "0.75"]]
        assert prometheus_requests[-1].url.params["step"] == "300s"

    async def test_default_step(self, http_client, api_base, sample_time_range, prometheus_requests):
        start, end = sample_time_range
        await http_client.get(f"{api_base}/query_range", params={"expr": "up", "start": start, "end": end})

        assert prometheus_requests[-1].url.params["step"] == "600s"

    async def test_numeric_step(self, http_client, api_base, sample_time_range, prometheus_requests):
        start, end = sample_time_range
        await http_client.get(
            f"{api_base}/query_range", params={"expr": "up", "start": start, "end": end, "step": "30"}
        )

        assert prometheus_requests[-1].url.params["step"] == "30s"

    async def test_inverted_range_returns_400(self, http_client, api_base, sample_time_range, prometheus_requests):
        start, end = sample_time_range
        response = await http_client.get(
            f"{api_base}/query_range", params={"expr": "up", "start": end, "end": start}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Invalid query"
        assert prometheus_requests == []

    @pytest.mark.parametrize("step", ["0", "-5", "fast", "5x"])
    async def test_invalid_step(self, http_client, api_base, sample_time_range, step):
        start, end = sample_time_range
        response = await http_client.get(
            f"{api_base}/query_range", params={"expr": "up", "start": start, "end": end, "step": step}
        )

        assert response.status_code in (400, 422)

    async def test_missing_range(self, http_client, api_base):
        response = await http_client.get(f"{api_base}/query_range", params={"expr": "up"})

        assert response.status_code == 422
