from fastapi import APIRouter, Depends

from config import settings
from schemas import ActivityEntry, AdminStats, ClientSummary
from security.auth import require_admin
from storage.jobs import job_store

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=AdminStats)
async def stats():
    return job_store.stats()


@router.get("/activity", response_model=list[ActivityEntry])
async def activity():
    """Latest jobs across all clients."""
    return job_store.activity(settings.activity_limit)


@router.get("/clients", response_model=list[ClientSummary])
async def clients():
    """Known clients with their job counts, most recently active first."""
    return job_store.clients(settings.activity_limit)
