"""
ClinVar client.

Two-stage lookup over E-utilities:
  1. esearch  — ids of variants whose position falls inside the bounds
  2. esummary — one batch call for the records of those ids
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from genome_scout.constants import CLINVAR_PAGE_SIZE, UNKNOWN_LABEL
from genome_scout.data_sources.eutils import EutilsClient
from genome_scout.helpers.coordinates import (
    format_location,
    position_field_for_assembly,
    strip_chromosome_prefix,
    title_case_words,
)
from genome_scout.models.model_clinvar import ClinvarSummaryRecord, ClinvarVariant
from genome_scout.models.model_gene import GeneBounds

logger = logging.getLogger("genome_scout.data_sources.clinvar")


class ClinvarClient(EutilsClient):
    """Client for known clinical variants in NCBI ClinVar."""

    @property
    def _source_name(self) -> str:
        return "clinvar"

    async def resolve_variants(
        self, chromosome: str, bounds: GeneBounds, assembly_id: str
    ) -> list[ClinvarVariant]:
        """Return ClinVar variants located within ``bounds`` on ``chromosome``."""
        chrom = strip_chromosome_prefix(chromosome)
        term = self.build_search_term(chrom, bounds, assembly_id)

        data = await self._esearch(
            "clinvar", term, retmax=CLINVAR_PAGE_SIZE, method="resolve_variants"
        )
        ids = self._parse_id_list(data)
        if not ids:
            logger.info("No ClinVar variants for %s", term)
            return []

        summary = await self._esummary("clinvar", ids, method="resolve_variants")
        return self._parse_summaries(summary, chrom)

    @staticmethod
    def build_search_term(chrom: str, bounds: GeneBounds, assembly_id: str) -> str:
        """Boolean esearch term: chromosome filter AND position range filter."""
        low, high = min(bounds.min, bounds.max), max(bounds.min, bounds.max)
        field = position_field_for_assembly(assembly_id)
        return f"{chrom}[chromosome] AND {low}:{high}[{field}]"

    @staticmethod
    def _parse_id_list(data: Any) -> list[str]:
        result = data.get("esearchresult") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            return []
        # dict.fromkeys keeps first-seen order and drops repeats
        return list(dict.fromkeys(str(i) for i in result.get("idlist") or []))

    def _parse_summaries(self, data: Any, chrom: str) -> list[ClinvarVariant]:
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            return []

        variants: list[ClinvarVariant] = []
        for uid in dict.fromkeys(str(u) for u in result.get("uids") or []):
            raw = result.get(uid)
            if not isinstance(raw, dict):
                logger.debug("ClinVar uid %s missing from summary; skipping", uid)
                continue
            try:
                record = ClinvarSummaryRecord.model_validate(raw)
            except PydanticValidationError as e:
                logger.debug("ClinVar uid %s unreadable; skipping: %s", uid, e)
                continue
            variants.append(self._to_variant(uid, record, chrom))
        return variants

    @staticmethod
    def _to_variant(uid: str, record: ClinvarSummaryRecord, chrom: str) -> ClinvarVariant:
        classification = None
        if record.germline_classification is not None:
            classification = record.germline_classification.description
        return ClinvarVariant(
            clinvar_id=uid,
            title=record.title or "",
            variation_type=title_case_words(record.obj_type or UNKNOWN_LABEL),
            classification=classification or UNKNOWN_LABEL,
            gene_sort=record.gene_sort or "",
            chromosome=chrom,
            location=format_location(record.location_sort),
        )
