#!/usr/bin/env python3
"""
Example script for exercising the Monitoring Service API endpoints.
Requires a running service connected to Prometheus and a Kubernetes cluster.
"""

import asyncio
import httpx
from datetime import datetime, timedelta, timezone


BASE_URL = "http://localhost:8000"
API_BASE = f"{BASE_URL}/api/v1/monitoring"


async def show_health(client: httpx.AsyncClient):
    """Print service health."""
    print("Checking health...")

    response = await client.get(f"{BASE_URL}/health")
    print(f"Health check status: {response.status_code}")
    data = response.json()
    print(f"Status: {data.get('status')}")
    print(f"Prometheus: {data.get('prometheus')}, Kubernetes: {data.get('kubernetes')}")


async def show_cluster_usage(client: httpx.AsyncClient):
    """Print cluster CPU and memory over the last hour."""
    print("\nQuerying cluster usage...")

    end = datetime.now(timezone.utc)
    params = {
        "metrics": ["cluster_cpu_usage", "cluster_memory_usage_wo_cache"],
        "start": str(int((end - timedelta(hours=1)).timestamp())),
        "end": str(int(end.timestamp())),
        "step": "5m"
    }
    response = await client.get(f"{API_BASE}/metrics", params=params)
    print(f"Named metrics status: {response.status_code}")
    for result in response.json().get("results", []):
        if result.get("error"):
            print(f"  {result['metric_name']}: error: {result['error']}")
            continue
        series = result["data"]["result"]
        points = sum(len(s.get("values") or []) for s in series)
        print(f"  {result['metric_name']}: {len(series)} series, {points} points")


async def show_stats(client: httpx.AsyncClient, workspace: str):
    """Print platform and workspace entity counts."""
    print("\nCounting entities...")

    for path in ("/stats/cluster", f"/stats/workspaces/{workspace}"):
        response = await client.get(f"{API_BASE}{path}")
        for result in response.json().get("results", []):
            if result.get("error"):
                print(f"  {result['metric_name']}: error: {result['error']}")
            else:
                print(f"  {result['metric_name']}: {result['data']['result'][0]['value'][1]}")


async def main():
    """Run the example queries."""
    print("Monitoring Service API Example\n")

    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            await show_health(client)
            await show_cluster_usage(client)
            await show_stats(client, "system-workspace")

        print("\nExample completed successfully!")
        print(f"API Documentation: {BASE_URL}/docs")

    except httpx.HTTPError as e:
        print(f"Error during requests: {e}")
        print("Make sure the monitoring service is running.")


if __name__ == "__main__":
    asyncio.run(main())
