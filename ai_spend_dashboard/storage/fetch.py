"""
Dataset fetching.

Retrieves both CSV sources concurrently and only hands them on once both
are available. A source is either a local file path or an http(s) URL.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from ai_spend_dashboard.config.loader import DashboardConfig, FetchConfig
from ai_spend_dashboard.core.pricing import build_cost_index
from .datasets import build_datasets
from .models import Datasets

logger = logging.getLogger(__name__)


class DatasetFetchError(Exception):
    """Raised when a dataset could not be fetched after all retries."""
    def __init__(self, source: str, cause: Exception):
        super().__init__(f"Could not fetch dataset {source}: {cause}")
        self.source = source
        self.cause = cause


@dataclass(frozen=True)
class RawDatasets:
    """Undecoded text of both datasets."""
    usages_text: str
    costs_text: str


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def _read_source(source: str, client: httpx.AsyncClient) -> str:
    if is_url(source):
        response = await client.get(source)
        response.raise_for_status()
        return response.text
    return await asyncio.to_thread(Path(source).read_text, encoding="utf-8")


async def fetch_text(source: str, client: httpx.AsyncClient, config: FetchConfig) -> str:
    """Fetch one source with bounded retries and exponential backoff.

    Args:
        source: File path or http(s) URL
        client: Shared HTTP client
        config: Retry settings

    Returns:
        The text content of the source

    Raises:
        DatasetFetchError: If every attempt failed, or at once if the
            content is not valid UTF-8
    """
    last_error: Optional[Exception] = None
    for attempt in range(config.retries + 1):
        try:
            return await _read_source(source, client)
        except UnicodeDecodeError as e:
            raise DatasetFetchError(source, e) from e
        except (httpx.HTTPError, OSError) as e:
            last_error = e
            logger.warning(
                "Fetching %s failed (attempt %d of %d): %s",
                source, attempt + 1, config.retries + 1, e
            )
            if attempt < config.retries:
                await asyncio.sleep(config.backoff_seconds * (2 ** attempt))

    raise DatasetFetchError(source, last_error)


async def fetch_datasets_async(
    config: DashboardConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> RawDatasets:
    """Fetch both datasets concurrently and wait for both to finish."""
    async with httpx.AsyncClient(
        timeout=config.fetch.timeout_seconds,
        transport=transport
    ) as client:
        usages_text, costs_text = await asyncio.gather(
            fetch_text(config.datasets.usages, client, config.fetch),
            fetch_text(config.datasets.costs, client, config.fetch),
        )
    return RawDatasets(usages_text=usages_text, costs_text=costs_text)


def fetch_datasets(
    config: DashboardConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> RawDatasets:
    """Synchronous wrapper around :func:`fetch_datasets_async`."""
    return asyncio.run(fetch_datasets_async(config, transport))


def load_datasets(
    config: DashboardConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Datasets:
    """Fetch, decode and validate both datasets.

    Raises:
        DatasetFetchError: If either source could not be fetched
        InvalidCostRateError: If a cost rate is invalid and the configured
            policy rejects it
    """
    raw = fetch_datasets(config, transport)
    datasets = build_datasets(raw.usages_text, raw.costs_text)
    # Applies the configured invalid rate policy before anything is rendered
    build_cost_index(datasets.costs, config.invalid_rates)
    return datasets
