from fastapi import APIRouter, Depends
from fastapi.responses import Response

from config import settings
from exceptions import NotFoundError
from schemas import Job
from security.auth import require_client
from storage.jobs import job_store
from storage.local import file_store
from utils.format_detect import MIME_TYPES, normalize_format

router = APIRouter()


@router.get("/jobs/{job_id}", response_model=Job)
async def get_job(job_id: str, client_id: str = Depends(require_client)):
    job = job_store.get(job_id, client_id)
    if job is None:
        raise NotFoundError("Job not found", job_id=job_id)
    return job


@router.get("/my-jobs", response_model=list[Job])
async def my_jobs(client_id: str = Depends(require_client)):
    """This client's jobs, newest first."""
    return job_store.for_client(client_id, limit=settings.job_history_limit)


@router.delete("/clear-history")
async def clear_history(client_id: str = Depends(require_client)):
    removed = job_store.clear(client_id)
    return {"message": "History cleared successfully", "removed": removed}


@router.get("/uploads/{filename}")
async def download(filename: str):
    """Serve a stored output file."""
    data = await file_store.read(filename)
    ext = filename.rsplit(".", 1)[-1].lower()
    media_type = MIME_TYPES.get("pdf" if ext == "pdf" else normalize_format(ext))
    return Response(
        content=data,
        media_type=media_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
