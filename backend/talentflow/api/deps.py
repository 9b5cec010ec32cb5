"""Request-scoped dependencies."""

from fastapi import Request

from talentflow.services import TalentService


async def get_service(request: Request) -> TalentService:
    """Handlers share the store held on app.state; there is no module-level store."""
    return TalentService(request.app.state.store)
