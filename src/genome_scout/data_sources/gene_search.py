"""NLM Clinical Tables gene search client."""

from __future__ import annotations

import logging
from typing import Any

from genome_scout.constants import (
    GENE_SEARCH_DISPLAY_FIELDS,
    GENE_SEARCH_EXTRA_FIELDS,
    GENE_SEARCH_PAGE_SIZE,
    GENE_SEARCH_URL,
)
from genome_scout.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    RequestContext,
    UpstreamFormatError,
)
from genome_scout.helpers.coordinates import normalize_chromosome
from genome_scout.models.model_gene import GeneSearchResult, GeneSummary

logger = logging.getLogger("genome_scout.data_sources.gene_search")

# Column positions inside a display row follow the requested display fields.
_CHROM_COL = GENE_SEARCH_DISPLAY_FIELDS.index("chromosome")
_SYMBOL_COL = GENE_SEARCH_DISPLAY_FIELDS.index("Symbol")
_DESCRIPTION_COL = GENE_SEARCH_DISPLAY_FIELDS.index("description")


class GeneSearchClient(BaseClient):
    """Client for the Clinical Tables ncbi_genes search endpoint."""

    def __init__(
        self, search_url: str = GENE_SEARCH_URL, config: ClientConfig | None = None
    ) -> None:
        super().__init__(config)
        self.search_url = search_url

    @property
    def _source_name(self) -> str:
        return "gene_search"

    async def search(self, query: str, assembly_id: str) -> GeneSearchResult:
        """Resolve free text to at most GENE_SEARCH_PAGE_SIZE candidate genes.

        The response is a 4-tuple ``[count, fieldMap, extraFields, displayRows]``
        where ``extraFields["GeneID"]`` lines up with ``displayRows`` by index.
        """
        params = {
            "terms": query,
            "df": ",".join(GENE_SEARCH_DISPLAY_FIELDS),
            "ef": ",".join(GENE_SEARCH_EXTRA_FIELDS),
        }
        data = await self._rest_get(
            self.search_url,
            params,
            context=RequestContext(
                source=self._source_name, method="search", params={"terms": query}
            ),
        )
        return GeneSearchResult(
            query=query, genome=assembly_id, results=self._parse_results(data)
        )

    def _parse_results(self, data: Any) -> list[GeneSummary]:
        if not isinstance(data, list) or len(data) < 4:
            raise UpstreamFormatError(
                self._source_name, "expected [count, fieldMap, extraFields, rows]"
            )
        count, _, extra_fields, rows = data[0], data[1], data[2], data[3]
        if not isinstance(count, int):
            raise UpstreamFormatError(self._source_name, f"bad result count {count!r}")
        if count == 0:
            return []

        gene_ids: list[Any] = []
        if isinstance(extra_fields, dict):
            gene_ids = extra_fields.get("GeneID") or []
        if not isinstance(rows, list):
            rows = []

        results: list[GeneSummary] = []
        for index in range(min(GENE_SEARCH_PAGE_SIZE, count, len(rows))):
            summary = self._parse_row(rows[index], gene_ids, index)
            if summary is None:
                logger.debug("Skipping malformed gene row %d: %r", index, rows[index])
                continue
            results.append(summary)
        return results

    @staticmethod
    def _parse_row(row: Any, gene_ids: list[Any], index: int) -> GeneSummary | None:
        """Parse one display row, or return None if it can't be read."""
        if not isinstance(row, list) or len(row) <= max(
            _CHROM_COL, _SYMBOL_COL, _DESCRIPTION_COL
        ):
            return None
        chrom, symbol, description = row[_CHROM_COL], row[_SYMBOL_COL], row[_DESCRIPTION_COL]
        if not all(isinstance(v, str | None) for v in (chrom, symbol, description)):
            return None

        chrom = chrom or ""
        if chrom:
            chrom = normalize_chromosome(chrom)
        gene_id = gene_ids[index] if index < len(gene_ids) else None

        return GeneSummary(
            symbol=symbol or "",
            name=description or "",
            chrom=chrom,
            description=description or "",
            gene_id=str(gene_id) if gene_id is not None else "",
        )
