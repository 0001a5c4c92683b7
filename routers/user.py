from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from schemas import HistoryEntry, UserExport, UserSettingsUpdate
from security.auth import require_client
from storage.jobs import job_store, settings_store

router = APIRouter(prefix="/user")


@router.get("/settings")
async def get_settings(client_id: str = Depends(require_client)):
    return {"settings": settings_store.get(client_id)}


@router.put("/settings")
async def update_settings(
    update: UserSettingsUpdate,
    client_id: str = Depends(require_client),
):
    """Merge the given fields into this client's settings."""
    merged = settings_store.update(client_id, update)
    return {"message": "Settings updated successfully", "settings": merged}


@router.get("/export")
async def export_data(client_id: str = Depends(require_client)):
    """Settings and full job history as a downloadable JSON document."""
    now = datetime.now(timezone.utc)
    export = UserExport(
        client_id=client_id,
        settings=settings_store.get(client_id),
        history=[
            HistoryEntry(
                type=job.type,
                input_name=job.input_name,
                original_size=job.original_size,
                compressed_size=job.compressed_size,
                created_at=job.created_at,
                status=job.status,
            )
            for job in job_store.for_client(client_id)
        ],
        export_date=now,
    )
    return JSONResponse(
        content=export.model_dump(mode="json"),
        headers={
            "Content-Disposition": (
                f'attachment; filename="shrinkray-data-{int(now.timestamp() * 1000)}.json"'
            )
        },
    )


@router.delete("/account")
async def delete_account(client_id: str = Depends(require_client)):
    """Forget this client: job history and settings."""
    job_store.clear(client_id)
    settings_store.delete(client_id)
    return {"message": "Account data deleted successfully"}
