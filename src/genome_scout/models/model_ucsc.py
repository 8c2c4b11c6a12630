"""
Pydantic models for UCSC Genome Browser data.

These are the data contracts between the UCSC client and its callers.
Callers receive these models; they never see raw API responses.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

# ------------------------------------------------------------------
# Raw decode targets
# ------------------------------------------------------------------


class UcscGenomeInfo(BaseModel):
    """One entry of /list/ucscGenomes. Every field may be missing."""

    organism: str | None = None
    description: str | None = None
    sourceName: str | None = None
    active: Any = None  # 0/1 upstream; coerced to bool downstream


class UcscSequencePayload(BaseModel):
    """Body of /getData/sequence."""

    dna: str | None = None
    error: str | None = None


# ------------------------------------------------------------------
# Domain models
# ------------------------------------------------------------------


class GenomeAssembly(BaseModel):
    """A reference genome assembly, e.g. hg38."""

    id: str  # canonical key for all downstream calls
    name: str
    source_name: str
    active: bool
    organism: str


class Chromosome(BaseModel):
    """A primary chromosome and its length in bases."""

    name: str  # always chr-prefixed
    size: int = Field(ge=0)


class GenomicRange(BaseModel):
    """A 1-based inclusive [start, end] range."""

    start: int
    end: int

    @model_validator(mode="after")
    def check_order(self) -> "GenomicRange":
        if self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")
        return self


class SequenceRegion(BaseModel):
    """Bases for a chromosome range.

    ``actual_range`` echoes the caller's request. On failure ``sequence`` is
    empty and ``error`` carries the upstream message.
    """

    chromosome: str
    actual_range: GenomicRange
    sequence: str = ""
    error: str | None = None
