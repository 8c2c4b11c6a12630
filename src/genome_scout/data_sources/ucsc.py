"""
UCSC Genome Browser API client.

Three methods:
  1. list_assemblies  — Reference assemblies grouped by organism
  2. list_chromosomes — Primary chromosomes of an assembly, karyotype order
  3. fetch_sequence   — Raw bases for a 1-based inclusive range
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from genome_scout.constants import (
    DEFAULT_ORGANISM,
    UCSC_BASE_URL,
    UCSC_CHROMOSOMES_PATH,
    UCSC_GENOMES_PATH,
    UCSC_SEQUENCE_PATH,
)
from genome_scout.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    DataSourceError,
    RequestContext,
    UpstreamFormatError,
    UpstreamStatusError,
    ValidationError,
)
from genome_scout.helpers.coordinates import (
    chromosome_sort_key,
    is_primary_chromosome,
    normalize_chromosome,
    to_half_open_range,
)
from genome_scout.models.model_ucsc import (
    Chromosome,
    GenomeAssembly,
    GenomicRange,
    SequenceRegion,
    UcscGenomeInfo,
    UcscSequencePayload,
)

logger = logging.getLogger("genome_scout.data_sources.ucsc")


class UCSCClient(BaseClient):
    """Client for the UCSC Genome Browser REST API."""

    def __init__(
        self, base_url: str = UCSC_BASE_URL, config: ClientConfig | None = None
    ) -> None:
        super().__init__(config)
        self.base_url = base_url.rstrip("/")

    @property
    def _source_name(self) -> str:
        return "ucsc"

    # -- Public methods -------------------------------------------------------

    async def list_assemblies(self) -> dict[str, list[GenomeAssembly]]:
        """Return assemblies keyed by organism, in upstream order within each group."""
        data = await self._rest_get(
            f"{self.base_url}{UCSC_GENOMES_PATH}",
            {},
            context=RequestContext(source=self._source_name, method="list_assemblies"),
        )
        genomes = data.get("ucscGenomes") if isinstance(data, dict) else None
        if not isinstance(genomes, dict):
            raise UpstreamFormatError(self._source_name, "missing ucscGenomes")

        grouped: dict[str, list[GenomeAssembly]] = {}
        for genome_id, raw in genomes.items():
            if not isinstance(raw, dict):
                continue
            assembly = self._parse_assembly(genome_id, raw)
            grouped.setdefault(assembly.organism, []).append(assembly)
        return grouped

    async def list_chromosomes(self, assembly_id: str) -> list[Chromosome]:
        """Return the primary chromosomes of an assembly, numeric names first."""
        data = await self._rest_get(
            f"{self.base_url}{UCSC_CHROMOSOMES_PATH}",
            {"genome": assembly_id},
            context=RequestContext(
                source=self._source_name,
                method="list_chromosomes",
                params={"genome": assembly_id},
            ),
        )
        sizes = data.get("chromosomes") if isinstance(data, dict) else None
        if not isinstance(sizes, dict):
            raise UpstreamFormatError(self._source_name, "missing chromosomes")

        return self._parse_chromosomes(sizes)

    async def fetch_sequence(
        self, chromosome: str, start: int, end: int, assembly_id: str
    ) -> SequenceRegion:
        """Fetch bases for the 1-based inclusive range [start, end].

        Upstream failures come back as an empty sequence with ``error`` set.
        ``actual_range`` always echoes the request; trust ``len(sequence)``
        for what was actually served.
        """
        if start < 1 or end < start:
            raise ValidationError(
                self._source_name, f"invalid range {start}-{end}: need 1 <= start <= end"
            )

        chrom = normalize_chromosome(chromosome)
        api_start, api_end = to_half_open_range(start, end)
        actual_range = GenomicRange(start=start, end=end)
        params = {
            "genome": assembly_id,
            "chrom": chrom,
            "start": api_start,
            "end": api_end,
        }

        try:
            data = await self._rest_get(
                f"{self.base_url}{UCSC_SEQUENCE_PATH}",
                params,
                context=RequestContext(
                    source=self._source_name, method="fetch_sequence", params=params
                ),
            )
        except DataSourceError as e:
            message = self._upstream_message(e)
            logger.warning("Sequence fetch failed for %s:%d-%d: %s", chrom, start, end, message)
            return SequenceRegion(chromosome=chrom, actual_range=actual_range, error=message)

        try:
            payload = UcscSequencePayload.model_validate(
                data if isinstance(data, dict) else {}
            )
        except PydanticValidationError as e:
            logger.warning("Malformed sequence payload for %s:%d-%d: %s", chrom, start, end, e)
            return SequenceRegion(
                chromosome=chrom,
                actual_range=actual_range,
                error=f"malformed sequence payload: {e.error_count()} invalid field(s)",
            )
        if payload.error or not payload.dna:
            logger.warning(
                "No sequence for %s:%d-%d: %s", chrom, start, end, payload.error
            )
            return SequenceRegion(
                chromosome=chrom,
                actual_range=actual_range,
                error=payload.error or "upstream returned no sequence",
            )

        # Lower case marks repeat-masked bases upstream; not carried forward.
        return SequenceRegion(
            chromosome=chrom, actual_range=actual_range, sequence=payload.dna.upper()
        )

    # -- Private helpers ------------------------------------------------------

    @staticmethod
    def _parse_assembly(genome_id: str, raw: dict[str, Any]) -> GenomeAssembly:
        """Parse a single /list/ucscGenomes entry into GenomeAssembly."""
        info = UcscGenomeInfo.model_validate(raw)
        return GenomeAssembly(
            id=genome_id,
            name=info.description or genome_id,
            source_name=info.sourceName or genome_id,
            active=bool(info.active),
            organism=info.organism or DEFAULT_ORGANISM,
        )

    @staticmethod
    def _parse_chromosomes(sizes: dict[str, Any]) -> list[Chromosome]:
        """Drop non-primary scaffolds and sort into karyotype order."""
        chromosomes = [
            Chromosome(name=normalize_chromosome(name), size=size or 0)
            for name, size in sizes.items()
            if is_primary_chromosome(name)
        ]
        chromosomes.sort(key=lambda c: chromosome_sort_key(c.name))
        return chromosomes

    @staticmethod
    def _upstream_message(error: DataSourceError) -> str:
        """Prefer the ``error`` field UCSC puts in its JSON error bodies."""
        if isinstance(error, UpstreamStatusError):
            try:
                body = json.loads(error.body)
            except ValueError:
                return str(error)
            if isinstance(body, dict) and body.get("error"):
                return str(body["error"])
        return str(error)
