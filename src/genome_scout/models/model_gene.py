"""
Pydantic models for gene search and gene summary data.

Raw decode targets mirror the NCBI gene esummary record; the domain models
are what the gene clients hand back.
"""

from pydantic import BaseModel, model_validator

from genome_scout.constants import VIEWING_WINDOW
from genome_scout.models.model_ucsc import GenomicRange

# ------------------------------------------------------------------
# Raw decode targets (esummary db=gene)
# ------------------------------------------------------------------


class GenomicInfo(BaseModel):
    """One placement of a gene on an assembly. Start/stop may be reversed."""

    chrstart: int
    chrstop: int
    strand: str | None = None


class GeneOrganism(BaseModel):
    scientificname: str = ""
    commonname: str = ""


class GeneDetails(BaseModel):
    """Per-gene summary record."""

    genomicinfo: list[GenomicInfo] = []
    summary: str | None = None
    organism: GeneOrganism | None = None


# ------------------------------------------------------------------
# Domain models
# ------------------------------------------------------------------


class GeneSummary(BaseModel):
    """A single gene search hit."""

    symbol: str
    name: str
    chrom: str  # chr-prefixed
    description: str
    gene_id: str = ""  # empty when the id list is shorter than the rows


class GeneSearchResult(BaseModel):
    """A page of gene search hits for one query."""

    query: str
    genome: str
    results: list[GeneSummary] = []


class GeneBounds(BaseModel):
    """Genomic extent of a gene; min <= max always."""

    min: int
    max: int

    @model_validator(mode="after")
    def check_order(self) -> "GeneBounds":
        if self.min > self.max:
            raise ValueError(f"min {self.min} is greater than max {self.max}")
        return self

    @classmethod
    def from_endpoints(cls, a: int, b: int) -> "GeneBounds":
        """Build bounds from two raw endpoints given in either order."""
        return cls(min=min(a, b), max=max(a, b))

    @property
    def span(self) -> int:
        return self.max - self.min


class ViewingRange(GenomicRange):
    """Default window onto a gene, at most VIEWING_WINDOW bases wide."""

    @classmethod
    def for_bounds(cls, bounds: GeneBounds) -> "ViewingRange":
        if bounds.span > VIEWING_WINDOW:
            return cls(start=bounds.min, end=bounds.min + VIEWING_WINDOW)
        return cls(start=bounds.min, end=bounds.max)


class GeneResolution(BaseModel):
    """Outcome of resolving a gene id.

    A gene that does not exist leaves every field None. When the upstream
    could not be reached or decoded, the fields are also None but ``error``
    says why.
    """

    gene_details: GeneDetails | None = None
    gene_bounds: GeneBounds | None = None
    initial_range: ViewingRange | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.gene_bounds is not None
