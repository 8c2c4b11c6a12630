"""
Pydantic models for the variant-effect prediction backend.

The backend is trusted to emit ``VariantAnalysisResult`` in canonical shape;
the request model is where caller input is checked.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from genome_scout.constants import NUCLEOTIDES


class VariantAnalysisRequest(BaseModel):
    """A single-nucleotide variant to submit for prediction."""

    chromosome: str
    position: int = Field(ge=1)  # 1-based
    alternative: str
    genome: str  # assembly id, e.g. "hg38"
    reference: str | None = None  # checked against alternative when known

    @field_validator("alternative", "reference")
    @classmethod
    def single_base(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip().upper()
        if value not in NUCLEOTIDES:
            raise ValueError(f"'{value}' is not a single A/C/G/T base")
        return value

    @model_validator(mode="after")
    def differs_from_reference(self) -> "VariantAnalysisRequest":
        if self.reference is not None and self.reference == self.alternative:
            raise ValueError(
                f"alternative {self.alternative} equals the reference base"
            )
        return self

    def to_payload(self) -> dict[str, Any]:
        """JSON body the backend expects."""
        return {
            "variant_position": str(self.position),
            "alternative": self.alternative,
            "genome": self.genome,
            "chromosome": self.chromosome,
        }


class VariantAnalysisResult(BaseModel):
    """Prediction verdict for one variant."""

    position: int
    reference: str
    alternative: str
    delta_score: float  # sign gives the direction of effect
    prediction: str  # e.g. "Likely pathogenic"
    classification_confidence: float


class VariantAnalysisOutcome(BaseModel):
    """Result or error for one request in a batch; never both."""

    request: VariantAnalysisRequest
    result: VariantAnalysisResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None
