"""
Aggregation service composing the upstream clients.

Every client is built from one explicit ``GenomeServicesConfig``. The service
adds the two fan-out patterns callers need: loading a gene's sequence window
and ClinVar variants side by side, and analyzing many variants with bounded
concurrency where each variant succeeds or fails on its own.
"""

import asyncio
import logging
from collections.abc import Sequence

from genome_scout.config import GenomeServicesConfig
from genome_scout.data_sources.base_client import DataSourceError
from genome_scout.data_sources.clinvar import ClinvarClient
from genome_scout.data_sources.gene_search import GeneSearchClient
from genome_scout.data_sources.ncbi_gene import NCBIGeneClient
from genome_scout.data_sources.ucsc import UCSCClient
from genome_scout.data_sources.variant_analysis import VariantAnalysisClient
from genome_scout.helpers.coordinates import (
    normalize_chromosome,
    parse_nucleotide_change,
)
from genome_scout.models.model_analysis import (
    VariantAnalysisOutcome,
    VariantAnalysisRequest,
)
from genome_scout.models.model_clinvar import ClinvarVariant
from genome_scout.models.model_gene_view import GeneView
from genome_scout.models.model_ucsc import GenomicRange, SequenceRegion

logger = logging.getLogger(__name__)

SNV_TYPE = "Single Nucleotide Variant"


class GenomeDataService:
    """Entry point bundling the UCSC, gene, ClinVar and analysis clients."""

    def __init__(self, config: GenomeServicesConfig | None = None) -> None:
        self.config = config or GenomeServicesConfig()
        client_config = self.config.client
        self.ucsc = UCSCClient(self.config.ucsc_base_url, client_config)
        self.gene_search = GeneSearchClient(self.config.gene_search_url, client_config)
        self.ncbi_gene = NCBIGeneClient(
            self.config.ncbi_base_url, self.config.ncbi_api_key, client_config
        )
        self.clinvar = ClinvarClient(
            self.config.ncbi_base_url, self.config.ncbi_api_key, client_config
        )
        # Both talk to the same E-utilities host and share its quota.
        self.clinvar.rate_limiter = self.ncbi_gene.rate_limiter
        self.analysis: VariantAnalysisClient | None = None
        if self.config.analysis_url:
            self.analysis = VariantAnalysisClient(self.config.analysis_url, client_config)

    async def close(self) -> None:
        clients = [self.ucsc, self.gene_search, self.ncbi_gene, self.clinvar]
        if self.analysis is not None:
            clients.append(self.analysis)
        results = await asyncio.gather(
            *(client.close() for client in clients), return_exceptions=True
        )
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                logger.warning("Failed to close %s client: %s", client._source_name, result)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    def require_analysis(self) -> VariantAnalysisClient:
        if self.analysis is None:
            raise DataSourceError(
                "variant_analysis", "no prediction backend URL configured"
            )
        return self.analysis

    # -- Gene view -------------------------------------------------------------

    async def load_gene_view(
        self, gene_id: str, chromosome: str, assembly_id: str
    ) -> GeneView:
        """Resolve a gene, then fetch its sequence window and ClinVar variants.

        The two lookups after resolution depend only on the bounds, so they
        run concurrently; either one failing is recorded on the view without
        affecting the other.
        """
        resolution = await self.ncbi_gene.resolve_gene(gene_id)
        if not resolution.found:
            return GeneView(gene_id=gene_id, resolution=resolution)

        bounds, window = resolution.gene_bounds, resolution.initial_range
        chrom = normalize_chromosome(chromosome)
        sequence, variants = await asyncio.gather(
            self.ucsc.fetch_sequence(chrom, window.start, window.end, assembly_id),
            self.clinvar.resolve_variants(chrom, bounds, assembly_id),
            return_exceptions=True,
        )

        view = GeneView(gene_id=gene_id, resolution=resolution)
        if isinstance(sequence, DataSourceError):
            view.sequence = SequenceRegion(
                chromosome=chrom,
                actual_range=GenomicRange(start=window.start, end=window.end),
                error=str(sequence),
            )
        elif isinstance(sequence, BaseException):
            raise sequence
        else:
            view.sequence = sequence

        if isinstance(variants, DataSourceError):
            logger.warning("ClinVar lookup failed for gene %s: %s", gene_id, variants)
            view.variants_error = str(variants)
        elif isinstance(variants, BaseException):
            raise variants
        else:
            view.variants = variants
        return view

    # -- Variant analysis fan-out ---------------------------------------------

    async def analyze_variants(
        self,
        requests: Sequence[VariantAnalysisRequest],
        max_concurrent: int | None = None,
    ) -> list[VariantAnalysisOutcome]:
        """Analyze many variants, at most ``max_concurrent`` in flight.

        Returns one outcome per request in input order. A failed request
        carries its own error and never cancels its siblings.
        """
        analysis = self.require_analysis()
        semaphore = asyncio.Semaphore(
            max_concurrent or self.config.max_concurrent_analyses
        )

        async def run_one(request: VariantAnalysisRequest) -> VariantAnalysisOutcome:
            async with semaphore:
                try:
                    result = await analysis.submit(request)
                except DataSourceError as e:
                    logger.warning(
                        "Analysis failed for %s:%d%s: %s",
                        request.chromosome,
                        request.position,
                        request.alternative,
                        e,
                    )
                    return VariantAnalysisOutcome(request=request, error=str(e))
            return VariantAnalysisOutcome(request=request, result=result)

        return list(await asyncio.gather(*(run_one(r) for r in requests)))

    async def analyze_clinvar_variants(
        self,
        variants: Sequence[ClinvarVariant],
        assembly_id: str,
        max_concurrent: int | None = None,
    ) -> list[ClinvarVariant]:
        """Attach a prediction (or the error) to each single-nucleotide variant.

        Returns updated copies in input order. Variants that are not SNVs are
        returned unchanged.
        """
        analysis = self.require_analysis()
        updated = list(variants)
        pending: dict[int, VariantAnalysisRequest] = {}

        for index, variant in enumerate(variants):
            if variant.variation_type != SNV_TYPE:
                continue
            try:
                pending[index] = self._request_for_clinvar(analysis, variant, assembly_id)
            except DataSourceError as e:
                updated[index] = variant.model_copy(update={"analysis_error": str(e)})

        outcomes = await self.analyze_variants(list(pending.values()), max_concurrent)
        for index, outcome in zip(pending, outcomes):
            updated[index] = updated[index].model_copy(
                update={"analysis": outcome.result, "analysis_error": outcome.error}
            )
        return updated

    @staticmethod
    def _request_for_clinvar(
        analysis: VariantAnalysisClient, variant: ClinvarVariant, assembly_id: str
    ) -> VariantAnalysisRequest:
        change = parse_nucleotide_change(variant.title)
        position = variant.location.replace(",", "")
        if change is None or not position.isdigit():
            raise DataSourceError(
                "variant_analysis",
                f"ClinVar {variant.clinvar_id} has no parseable change or position",
            )
        reference, alternative = change
        return analysis.build_request(
            position=int(position),
            alternative=alternative,
            assembly_id=assembly_id,
            chromosome=normalize_chromosome(variant.chromosome),
            reference=reference,
        )
