"""Pydantic models for ClinVar data."""

from pydantic import BaseModel

from genome_scout.models.model_analysis import VariantAnalysisResult


class GermlineClassification(BaseModel):
    description: str | None = None


class ClinvarSummaryRecord(BaseModel):
    """Raw esummary db=clinvar record; everything is optional upstream."""

    title: str | None = None
    obj_type: str | None = None
    germline_classification: GermlineClassification | None = None
    gene_sort: str | None = None
    location_sort: str | None = None


class ClinvarVariant(BaseModel):
    """A known clinical variant overlapping a genomic interval."""

    clinvar_id: str
    title: str
    variation_type: str  # Title Case, e.g. "Single Nucleotide Variant"
    classification: str  # "Unknown" when ClinVar has none
    gene_sort: str = ""
    chromosome: str  # bare name, no chr prefix
    location: str  # "43,044,295" or "Unknown"

    # Filled in by GenomeDataService.analyze_clinvar_variants
    analysis: VariantAnalysisResult | None = None
    analysis_error: str | None = None
