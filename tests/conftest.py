"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock

import pytest

from genome_scout.data_sources.base_client import ClientConfig, RetryConfig


@pytest.fixture
def no_retry_config() -> ClientConfig:
    """Client config that fails fast: no retries, no backoff."""
    return ClientConfig(retry=RetryConfig(max_retries=0, max_post_retries=0))


@pytest.fixture
def make_response():
    """Factory for a mocked aiohttp response."""

    def _make(status: int = 200, json_data=None, text: str = "", headers=None):
        resp = AsyncMock()
        resp.status = status
        resp.json = AsyncMock(return_value=json_data)
        resp.text = AsyncMock(return_value=text)
        resp.headers = headers or {}
        return resp

    return _make


@pytest.fixture
def brca1_summary() -> dict:
    """esummary db=gene payload for BRCA1 (minus strand, so start > stop)."""
    return {
        "result": {
            "uids": ["672"],
            "672": {
                "name": "BRCA1",
                "summary": "This gene encodes a nuclear phosphoprotein.",
                "organism": {"scientificname": "Homo sapiens", "commonname": "human"},
                "genomicinfo": [
                    {
                        "chrloc": "17",
                        "chraccver": "NC_000017.11",
                        "chrstart": 43125482,
                        "chrstop": 43044294,
                        "exoncount": 24,
                    }
                ],
            },
        }
    }


@pytest.fixture
def clinvar_summary() -> dict:
    """esummary db=clinvar payload with two records."""
    return {
        "result": {
            "uids": ["55529", "17661"],
            "55529": {
                "title": "NM_007294.4(BRCA1):c.5096G>A (p.Arg1699Gln)",
                "obj_type": "single nucleotide variant",
                "germline_classification": {"description": "Pathogenic"},
                "gene_sort": "BRCA1",
                "location_sort": "00000043057062",
            },
            "17661": {
                "title": "NM_007294.4(BRCA1):c.68_69del (p.Glu23fs)",
                "obj_type": "Deletion",
                "gene_sort": "BRCA1",
                "location_sort": "00000043124027",
            },
        }
    }
