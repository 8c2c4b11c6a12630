"""Shared plumbing for NCBI E-utilities clients (gene, ClinVar)."""

from __future__ import annotations

from typing import Any

from genome_scout.constants import ESEARCH_PATH, ESUMMARY_PATH, NCBI_BASE_URL
from genome_scout.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    RequestContext,
)


class EutilsClient(BaseClient):
    """Base for clients that call esearch/esummary with retmode=json."""

    def __init__(
        self,
        base_url: str = NCBI_BASE_URL,
        api_key: str = "",
        config: ClientConfig | None = None,
    ) -> None:
        super().__init__(config)
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key

    def _build_params(self, db: str, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {"db": db, "retmode": "json", **extra}
        if self._api_key:
            params["api_key"] = self._api_key
        return params

    async def _esearch(self, db: str, term: str, retmax: int, method: str) -> Any:
        params = self._build_params(db, term=term, retmax=retmax)
        return await self._rest_get(
            f"{self.base_url}{ESEARCH_PATH}",
            params,
            context=RequestContext(
                source=self._source_name, method=method, params={"term": term}
            ),
        )

    async def _esummary(self, db: str, ids: list[str], method: str) -> Any:
        params = self._build_params(db, id=",".join(ids))
        return await self._rest_get(
            f"{self.base_url}{ESUMMARY_PATH}",
            params,
            context=RequestContext(
                source=self._source_name, method=method, params={"ids": len(ids)}
            ),
        )
