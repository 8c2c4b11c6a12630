"""Data models for genome-scout."""

from genome_scout.models.model_analysis import (
    VariantAnalysisOutcome,
    VariantAnalysisRequest,
    VariantAnalysisResult,
)
from genome_scout.models.model_clinvar import ClinvarVariant
from genome_scout.models.model_gene import (
    GeneBounds,
    GeneResolution,
    GeneSearchResult,
    GeneSummary,
    ViewingRange,
)
from genome_scout.models.model_gene_view import GeneView
from genome_scout.models.model_ucsc import (
    Chromosome,
    GenomeAssembly,
    GenomicRange,
    SequenceRegion,
)

__all__ = [
    "Chromosome",
    "ClinvarVariant",
    "GeneBounds",
    "GeneResolution",
    "GeneSearchResult",
    "GeneSummary",
    "GeneView",
    "GenomeAssembly",
    "GenomicRange",
    "SequenceRegion",
    "VariantAnalysisOutcome",
    "VariantAnalysisRequest",
    "VariantAnalysisResult",
    "ViewingRange",
]
