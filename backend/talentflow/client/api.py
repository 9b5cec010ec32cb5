"""
Async client for the TalentFlow request surface.

Thin wrapper over ``httpx.AsyncClient``; responses are decoded JSON in wire
(camelCase) shape.
"""

from typing import Any, Optional

import httpx

from talentflow.core.errors import NotFound

BASE_URL = "http://talentflow.local/api"


def _raise_for_status(response: httpx.Response, kind: str, record_id: str = "") -> None:
    if response.status_code == 404:
        raise NotFound(kind, record_id)
    response.raise_for_status()


class TalentFlowClient:
    """One method per logical request; errors from the transport propagate."""

    def __init__(self, transport: httpx.AsyncBaseTransport, base_url: str = BASE_URL):
        self._http = httpx.AsyncClient(transport=transport, base_url=base_url)

    async def __aenter__(self) -> "TalentFlowClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ============== Jobs ==============

    async def list_jobs(
        self,
        search: str = "",
        status: str = "",
        page: int = 1,
        page_size: int = 10,
        sort: str = "order",
    ) -> dict[str, Any]:
        response = await self._http.get(
            "/jobs",
            params={
                "search": search,
                "status": status,
                "page": page,
                "pageSize": page_size,
                "sort": sort,
            },
        )
        _raise_for_status(response, "jobs")
        return response.json()

    async def create_job(self, job: dict[str, Any]) -> dict[str, Any]:
        response = await self._http.post("/jobs", json=job)
        _raise_for_status(response, "jobs")
        return response.json()

    async def update_job(self, job_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        response = await self._http.patch(f"/jobs/{job_id}", json=updates)
        _raise_for_status(response, "jobs", job_id)
        return response.json()

    # ============== Candidates ==============

    async def list_candidates(
        self,
        search: str = "",
        stage: str = "",
        page: int = 1,
        page_size: int = 50,
    ) -> dict[str, Any]:
        response = await self._http.get(
            "/candidates",
            params={"search": search, "stage": stage, "page": page, "pageSize": page_size},
        )
        _raise_for_status(response, "candidates")
        return response.json()

    async def update_candidate(self, candidate_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        response = await self._http.patch(f"/candidates/{candidate_id}", json=updates)
        _raise_for_status(response, "candidates", candidate_id)
        return response.json()

    async def get_timeline(self, candidate_id: str) -> list[dict[str, Any]]:
        response = await self._http.get(f"/candidates/{candidate_id}/timeline")
        _raise_for_status(response, "timeline", candidate_id)
        return response.json()

    # ============== Assessments ==============

    async def get_assessment(self, job_id: str) -> Optional[dict[str, Any]]:
        response = await self._http.get(f"/assessments/{job_id}")
        _raise_for_status(response, "assessments", job_id)
        return response.json()

    async def upsert_assessment(self, job_id: str, assessment: dict[str, Any]) -> dict[str, Any]:
        response = await self._http.put(f"/assessments/{job_id}", json=assessment)
        _raise_for_status(response, "assessments", job_id)
        return response.json()
