"""Aggregate view of a gene assembled from independent lookups."""

from pydantic import BaseModel

from genome_scout.models.model_clinvar import ClinvarVariant
from genome_scout.models.model_gene import GeneResolution
from genome_scout.models.model_ucsc import SequenceRegion


class GeneView(BaseModel):
    """Gene bounds plus the sequence window and ClinVar variants over them.

    ``sequence`` and ``variants`` are fetched concurrently; a failure in one
    is recorded on its own field and leaves the other intact.
    """

    gene_id: str
    resolution: GeneResolution
    sequence: SequenceRegion | None = None
    variants: list[ClinvarVariant] = []
    variants_error: str | None = None
