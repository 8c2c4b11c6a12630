"""NCBI gene summary client."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from genome_scout.data_sources.base_client import (
    DataSourceError,
    NotFoundError,
    UpstreamFormatError,
)
from genome_scout.data_sources.eutils import EutilsClient
from genome_scout.models.model_gene import (
    GeneBounds,
    GeneDetails,
    GeneResolution,
    ViewingRange,
)

logger = logging.getLogger("genome_scout.data_sources.ncbi_gene")


class NCBIGeneClient(EutilsClient):
    """Resolves NCBI gene ids to genomic bounds."""

    @property
    def _source_name(self) -> str:
        return "ncbi_gene"

    async def get_gene_details(self, gene_id: str) -> GeneDetails:
        """Fetch the esummary record for a gene.

        Raises NotFoundError when the record is missing or has no genomic
        placement, and UpstreamFormatError when it can't be decoded.
        """
        data = await self._esummary("gene", [gene_id], method="get_gene_details")
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            raise UpstreamFormatError(self._source_name, "missing result")

        raw = result.get(gene_id)
        if not isinstance(raw, dict):
            raise NotFoundError(self._source_name, f"gene {gene_id} not found")

        try:
            details = GeneDetails.model_validate(raw)
        except PydanticValidationError as e:
            raise UpstreamFormatError(
                self._source_name, f"bad summary for gene {gene_id}: {e}"
            ) from e

        if not details.genomicinfo:
            raise NotFoundError(self._source_name, f"gene {gene_id} has no genomic info")
        return details

    async def resolve_gene(self, gene_id: str) -> GeneResolution:
        """Resolve a gene to its bounds and a default viewing window.

        Never raises. A missing gene gives an all-None result; an upstream
        failure gives the same shape with ``error`` set.
        """
        try:
            details = await self.get_gene_details(gene_id)
        except NotFoundError as e:
            logger.info("%s", e)
            return GeneResolution()
        except DataSourceError as e:
            logger.warning("Gene %s could not be resolved: %s", gene_id, e)
            return GeneResolution(error=str(e))

        info = details.genomicinfo[0]
        bounds = GeneBounds.from_endpoints(info.chrstart, info.chrstop)
        return GeneResolution(
            gene_details=details,
            gene_bounds=bounds,
            initial_range=ViewingRange.for_bounds(bounds),
        )
