"""Shared fixtures for integration tests (these hit the live services)."""

import pytest

from genome_scout.data_sources.clinvar import ClinvarClient
from genome_scout.data_sources.gene_search import GeneSearchClient
from genome_scout.data_sources.ncbi_gene import NCBIGeneClient
from genome_scout.data_sources.ucsc import UCSCClient


@pytest.fixture
async def ucsc_client():
    """Create and tear down a UCSCClient."""
    c = UCSCClient()
    yield c
    await c.close()


@pytest.fixture
async def gene_search_client():
    """Create and tear down a GeneSearchClient."""
    c = GeneSearchClient()
    yield c
    await c.close()


@pytest.fixture
async def ncbi_gene_client():
    """Create and tear down an NCBIGeneClient."""
    c = NCBIGeneClient()
    yield c
    await c.close()


@pytest.fixture
async def clinvar_client():
    """Create and tear down a ClinvarClient."""
    c = ClinvarClient()
    yield c
    await c.close()
