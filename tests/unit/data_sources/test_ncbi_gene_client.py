"""Unit tests for NCBIGeneClient."""

from unittest.mock import AsyncMock, patch

import pytest

from genome_scout.data_sources.base_client import (
    NetworkError,
    NotFoundError,
    UpstreamStatusError,
)
from genome_scout.data_sources.ncbi_gene import NCBIGeneClient


@pytest.mark.asyncio
class TestResolveGene:
    """Tests for resolve_gene."""

    async def test_resolves_reverse_strand_gene(self, brca1_summary):
        client = NCBIGeneClient()

        with patch.object(
            client, "_rest_get", new_callable=AsyncMock, return_value=brca1_summary
        ):
            resolution = await client.resolve_gene("672")

        assert resolution.found
        assert resolution.error is None
        assert resolution.gene_bounds.min == 43044294
        assert resolution.gene_bounds.max == 43125482
        # span 81,188 > 10,000: window is the first 10 kb
        assert resolution.initial_range.start == 43044294
        assert resolution.initial_range.end == 43054294
        assert resolution.gene_details.organism.scientificname == "Homo sapiens"

    async def test_small_gene_window_covers_whole_gene(self):
        client = NCBIGeneClient()
        payload = {
            "result": {"99": {"genomicinfo": [{"chrstart": 5000, "chrstop": 9000}]}}
        }

        with patch.object(client, "_rest_get", new_callable=AsyncMock, return_value=payload):
            resolution = await client.resolve_gene("99")

        assert resolution.initial_range.start == 5000
        assert resolution.initial_range.end == 9000

    async def test_empty_genomicinfo_is_not_found_without_error(self):
        client = NCBIGeneClient()
        payload = {"result": {"42": {"genomicinfo": [], "summary": "withdrawn"}}}

        with patch.object(client, "_rest_get", new_callable=AsyncMock, return_value=payload):
            resolution = await client.resolve_gene("42")

        assert not resolution.found
        assert resolution.gene_details is None
        assert resolution.gene_bounds is None
        assert resolution.initial_range is None
        assert resolution.error is None

    async def test_unknown_id_is_not_found(self):
        client = NCBIGeneClient()
        payload = {"result": {"uids": []}}

        with patch.object(client, "_rest_get", new_callable=AsyncMock, return_value=payload):
            resolution = await client.resolve_gene("0")

        assert not resolution.found
        assert resolution.error is None

    async def test_network_failure_sets_error(self):
        client = NCBIGeneClient()
        error = NetworkError("ncbi_gene", "Connection error: refused")

        with patch.object(client, "_rest_get", new_callable=AsyncMock, side_effect=error):
            resolution = await client.resolve_gene("672")

        assert not resolution.found
        assert resolution.gene_bounds is None
        assert "Connection error" in resolution.error

    async def test_status_failure_sets_error(self):
        client = NCBIGeneClient()
        error = UpstreamStatusError("ncbi_gene", 500, "Internal Server Error")

        with patch.object(client, "_rest_get", new_callable=AsyncMock, side_effect=error):
            resolution = await client.resolve_gene("672")

        assert not resolution.found
        assert "HTTP 500" in resolution.error

    async def test_undecodable_record_sets_error(self):
        client = NCBIGeneClient()
        payload = {"result": {"672": {"genomicinfo": [{"chrstart": "soon"}]}}}

        with patch.object(client, "_rest_get", new_callable=AsyncMock, return_value=payload):
            resolution = await client.resolve_gene("672")

        assert not resolution.found
        assert resolution.error is not None


@pytest.mark.asyncio
async def test_get_gene_details_raises_not_found():
    client = NCBIGeneClient()

    with patch.object(
        client, "_rest_get", new_callable=AsyncMock, return_value={"result": {}}
    ):
        with pytest.raises(NotFoundError):
            await client.get_gene_details("123")


@pytest.mark.asyncio
async def test_api_key_is_sent_when_configured(brca1_summary):
    client = NCBIGeneClient(api_key="secret")

    with patch.object(
        client, "_rest_get", new_callable=AsyncMock, return_value=brca1_summary
    ) as mock_get:
        await client.resolve_gene("672")

    url, params = mock_get.call_args.args
    assert url.endswith("/esummary.fcgi")
    assert params == {"db": "gene", "retmode": "json", "id": "672", "api_key": "secret"}
