"""Unit tests for GenomeDataService."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from genome_scout.config import GenomeServicesConfig
from genome_scout.data_sources.base_client import (
    DataSourceError,
    NetworkError,
    UpstreamStatusError,
)
from genome_scout.models.model_analysis import (
    VariantAnalysisRequest,
    VariantAnalysisResult,
)
from genome_scout.models.model_clinvar import ClinvarVariant
from genome_scout.models.model_gene import GeneBounds, GeneResolution, ViewingRange
from genome_scout.models.model_ucsc import GenomicRange, SequenceRegion
from genome_scout.services.genome_data import GenomeDataService

BACKEND_URL = "https://backend.example.com/analyze"


def _service(**overrides) -> GenomeDataService:
    return GenomeDataService(GenomeServicesConfig(analysis_url=BACKEND_URL, **overrides))


def _request(position: int, alternative: str = "A") -> VariantAnalysisRequest:
    return VariantAnalysisRequest(
        chromosome="chr17", position=position, alternative=alternative, genome="hg38"
    )


def _verdict(request: VariantAnalysisRequest) -> VariantAnalysisResult:
    return VariantAnalysisResult(
        position=request.position,
        reference="G",
        alternative=request.alternative,
        delta_score=-0.001,
        prediction="Likely pathogenic",
        classification_confidence=0.8,
    )


def _clinvar(clinvar_id: str, title: str, variation_type: str, location: str) -> ClinvarVariant:
    return ClinvarVariant(
        clinvar_id=clinvar_id,
        title=title,
        variation_type=variation_type,
        classification="Pathogenic",
        chromosome="17",
        location=location,
    )


# --- configuration ---


def test_no_backend_url_means_no_analysis_client():
    service = GenomeDataService()

    assert service.analysis is None
    with pytest.raises(DataSourceError, match="no prediction backend"):
        service.require_analysis()


def test_clients_share_explicit_config():
    service = _service(ncbi_api_key="k", ucsc_base_url="http://ucsc.test/")

    assert service.ucsc.base_url == "http://ucsc.test"
    assert service.clinvar._api_key == "k"
    assert service.ncbi_gene._api_key == "k"
    assert service.analysis.base_url == BACKEND_URL


# --- analyze_variants ---


@pytest.mark.asyncio
async def test_analyze_variants_isolates_failures_and_keeps_order():
    service = _service()
    requests = [_request(100), _request(200), _request(300)]

    async def fake_submit(request):
        if request.position == 200:
            raise UpstreamStatusError("variant_analysis", 500, "GPU out of memory")
        return _verdict(request)

    with patch.object(service.analysis, "submit", side_effect=fake_submit):
        outcomes = await service.analyze_variants(requests)

    assert [o.request.position for o in outcomes] == [100, 200, 300]
    assert outcomes[0].ok and outcomes[2].ok
    assert not outcomes[1].ok
    assert "GPU out of memory" in outcomes[1].error
    assert outcomes[1].result is None


@pytest.mark.asyncio
async def test_analyze_variants_bounds_concurrency():
    service = _service()
    in_flight = 0
    peak = 0

    async def fake_submit(request):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return _verdict(request)

    with patch.object(service.analysis, "submit", side_effect=fake_submit):
        outcomes = await service.analyze_variants(
            [_request(i) for i in range(1, 11)], max_concurrent=3
        )

    assert len(outcomes) == 10
    assert all(o.ok for o in outcomes)
    assert peak == 3


@pytest.mark.asyncio
async def test_analyze_variants_empty():
    service = _service()

    assert await service.analyze_variants([]) == []


# --- analyze_clinvar_variants ---


@pytest.mark.asyncio
async def test_analyze_clinvar_variants_attaches_per_variant():
    service = _service()
    variants = [
        _clinvar("1", "NM_007294.4(BRCA1):c.5096G>A (p.Arg1699Gln)",
                 "Single Nucleotide Variant", "43,057,062"),
        _clinvar("2", "NM_007294.4(BRCA1):c.68_69del", "Deletion", "43,124,027"),
        _clinvar("3", "NM_007294.4(BRCA1):c.5100C>T", "Single Nucleotide Variant", "Unknown"),
        _clinvar("4", "NM_007294.4(BRCA1):c.181T>G", "Single Nucleotide Variant", "43,115,746"),
    ]

    async def fake_submit(request):
        if request.position == 43115746:
            raise NetworkError("variant_analysis", "Timeout after 30.0s")
        return _verdict(request)

    with patch.object(service.analysis, "submit", side_effect=fake_submit) as mock_submit:
        updated = await service.analyze_clinvar_variants(variants, "hg38")

    assert [v.clinvar_id for v in updated] == ["1", "2", "3", "4"]

    submitted = mock_submit.call_args_list[0].args[0]
    assert submitted.chromosome == "chr17"
    assert submitted.position == 43057062
    assert submitted.reference == "G"
    assert submitted.alternative == "A"

    assert updated[0].analysis.prediction == "Likely pathogenic"
    assert updated[0].analysis_error is None
    assert updated[1] == variants[1]  # not an SNV: untouched
    assert updated[2].analysis is None
    assert "no parseable change or position" in updated[2].analysis_error
    assert updated[3].analysis is None
    assert "Timeout" in updated[3].analysis_error
    assert mock_submit.call_count == 2
    # inputs are not mutated
    assert variants[0].analysis is None


# --- load_gene_view ---


def _found_resolution() -> GeneResolution:
    bounds = GeneBounds(min=43044294, max=43125482)
    return GeneResolution(gene_bounds=bounds, initial_range=ViewingRange.for_bounds(bounds))


@pytest.mark.asyncio
async def test_load_gene_view_fetches_both_lookups():
    service = _service()
    region = SequenceRegion(
        chromosome="chr17",
        actual_range=GenomicRange(start=43044294, end=43054294),
        sequence="ACGT",
    )
    variant = _clinvar("1", "t", "Deletion", "1")

    with (
        patch.object(
            service.ncbi_gene, "resolve_gene", new_callable=AsyncMock,
            return_value=_found_resolution(),
        ),
        patch.object(
            service.ucsc, "fetch_sequence", new_callable=AsyncMock, return_value=region
        ) as mock_seq,
        patch.object(
            service.clinvar, "resolve_variants", new_callable=AsyncMock, return_value=[variant]
        ) as mock_clinvar,
    ):
        view = await service.load_gene_view("672", "17", "hg38")

    mock_seq.assert_awaited_once_with("chr17", 43044294, 43054294, "hg38")
    mock_clinvar.assert_awaited_once()
    assert view.sequence.sequence == "ACGT"
    assert view.variants == [variant]
    assert view.variants_error is None


@pytest.mark.asyncio
async def test_load_gene_view_clinvar_failure_keeps_sequence():
    service = _service()
    region = SequenceRegion(
        chromosome="chr17",
        actual_range=GenomicRange(start=43044294, end=43054294),
        sequence="ACGT",
    )

    with (
        patch.object(
            service.ncbi_gene, "resolve_gene", new_callable=AsyncMock,
            return_value=_found_resolution(),
        ),
        patch.object(
            service.ucsc, "fetch_sequence", new_callable=AsyncMock, return_value=region
        ),
        patch.object(
            service.clinvar, "resolve_variants", new_callable=AsyncMock,
            side_effect=NetworkError("clinvar", "Connection error: reset"),
        ),
    ):
        view = await service.load_gene_view("672", "chr17", "hg38")

    assert view.sequence.sequence == "ACGT"
    assert view.variants == []
    assert "Connection error" in view.variants_error


@pytest.mark.asyncio
async def test_load_gene_view_not_found_skips_lookups():
    service = _service()

    with (
        patch.object(
            service.ncbi_gene, "resolve_gene", new_callable=AsyncMock,
            return_value=GeneResolution(error="[ncbi_gene] HTTP 502: Bad Gateway"),
        ),
        patch.object(service.ucsc, "fetch_sequence", new_callable=AsyncMock) as mock_seq,
        patch.object(service.clinvar, "resolve_variants", new_callable=AsyncMock) as mock_cv,
    ):
        view = await service.load_gene_view("672", "chr17", "hg38")

    mock_seq.assert_not_called()
    mock_cv.assert_not_called()
    assert view.sequence is None
    assert view.resolution.error == "[ncbi_gene] HTTP 502: Bad Gateway"


@pytest.mark.asyncio
async def test_analyze_variants_survives_429_with_http_date(make_response):
    service = _service()
    throttled: set[str] = set()

    async def fake_post(url, json=None, params=None, headers=None):
        position = json["variant_position"]
        if position == "200" and position not in throttled:
            throttled.add(position)
            return make_response(
                status=429,
                text="busy",
                headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"},
            )
        return make_response(
            json_data={
                "position": int(position),
                "reference": "G",
                "alternative": json["alternative"],
                "delta_score": -0.001,
                "prediction": "Likely benign",
                "classification_confidence": 0.7,
            }
        )

    mock_session = AsyncMock()
    mock_session.post = AsyncMock(side_effect=fake_post)

    with patch.object(
        service.analysis, "_get_session", new_callable=AsyncMock, return_value=mock_session
    ):
        with patch(
            "genome_scout.data_sources.base_client.asyncio.sleep",
            new_callable=AsyncMock,
        ):
            outcomes = await service.analyze_variants(
                [_request(100), _request(200), _request(300)]
            )

    assert [o.request.position for o in outcomes] == [100, 200, 300]
    assert all(o.ok for o in outcomes)
    assert mock_session.post.await_count == 4


# --- lifecycle ---


def test_eutils_clients_share_one_rate_limiter():
    service = _service()

    assert service.clinvar.rate_limiter is service.ncbi_gene.rate_limiter
    assert service.ucsc.rate_limiter is not service.ncbi_gene.rate_limiter


@pytest.mark.asyncio
async def test_close_closes_every_client_even_if_one_fails():
    service = _service()

    with (
        patch.object(
            service.ucsc, "close", new_callable=AsyncMock,
            side_effect=RuntimeError("already torn down"),
        ),
        patch.object(service.gene_search, "close", new_callable=AsyncMock) as gs_close,
        patch.object(service.ncbi_gene, "close", new_callable=AsyncMock) as gene_close,
        patch.object(service.clinvar, "close", new_callable=AsyncMock) as cv_close,
        patch.object(service.analysis, "close", new_callable=AsyncMock) as an_close,
    ):
        await service.close()

    gs_close.assert_awaited_once()
    gene_close.assert_awaited_once()
    cv_close.assert_awaited_once()
    an_close.assert_awaited_once()
