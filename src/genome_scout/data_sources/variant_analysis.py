"""Client for the remote single-variant effect prediction backend."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from genome_scout.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    RequestContext,
    UpstreamFormatError,
    UpstreamStatusError,
    ValidationError,
)
from genome_scout.models.model_analysis import (
    VariantAnalysisRequest,
    VariantAnalysisResult,
)

logger = logging.getLogger("genome_scout.data_sources.variant_analysis")


class VariantAnalysisClient(BaseClient):
    """Posts one SNV to the prediction backend and parses its verdict.

    Unlike the catalog clients there is no degraded result: every failure
    is raised to the caller.
    """

    def __init__(self, base_url: str, config: ClientConfig | None = None) -> None:
        if not base_url:
            raise ValueError("a prediction backend URL is required")
        super().__init__(config)
        self.base_url = base_url

    @property
    def _source_name(self) -> str:
        return "variant_analysis"

    def build_request(
        self,
        position: int,
        alternative: str,
        assembly_id: str,
        chromosome: str,
        reference: str | None = None,
    ) -> VariantAnalysisRequest:
        """Validate caller input, raising ValidationError if malformed."""
        try:
            return VariantAnalysisRequest(
                chromosome=chromosome,
                position=position,
                alternative=alternative,
                genome=assembly_id,
                reference=reference,
            )
        except PydanticValidationError as e:
            raise ValidationError(self._source_name, f"invalid variant: {e}") from e

    async def analyze(
        self,
        position: int,
        alternative: str,
        assembly_id: str,
        chromosome: str,
        reference: str | None = None,
    ) -> VariantAnalysisResult:
        """Submit a variant and return the backend's prediction."""
        request = self.build_request(
            position, alternative, assembly_id, chromosome, reference
        )
        return await self.submit(request)

    async def submit(self, request: VariantAnalysisRequest) -> VariantAnalysisResult:
        """POST an already-validated request."""
        try:
            data = await self._post_json(
                self.base_url,
                request.to_payload(),
                context=RequestContext(
                    source=self._source_name,
                    method="analyze",
                    params={"chromosome": request.chromosome, "position": request.position},
                ),
            )
        except UpstreamStatusError as e:
            logger.error(
                "Analysis of %s:%d failed with HTTP %s",
                request.chromosome,
                request.position,
                e.status_code,
            )
            raise

        try:
            return VariantAnalysisResult.model_validate(data)
        except PydanticValidationError as e:
            raise UpstreamFormatError(
                self._source_name, f"unexpected analysis response: {e}"
            ) from e
