from fastapi import APIRouter, Depends, File, Form, UploadFile

from estimation.estimator import (
    actual_reduction_percent,
    estimate_accuracy,
    estimate_compressed_size,
)
from exceptions import BadRequestError
from policy.resolver import Operation, resolve_encoder_parameters
from policy.tiers import destructive_profile
from schemas import Job, JobResponse, TranscodeResult
from security.auth import require_client
from security.file_validation import validate_image, validate_pdf
from storage.jobs import job_store, settings_store
from storage.local import file_store
from transcoders.image import image_transcoder
from transcoders.pdf import pdf_transcoder
from utils.concurrency import transcode_gate
from utils.logging import get_logger

router = APIRouter()
logger = get_logger("routers.process")


@router.post("/upload-image", response_model=JobResponse, response_model_exclude_none=True)
async def convert_image(
    file: UploadFile | None = File(None),
    format: str = Form("jpeg"),
    level: str = Form("maximum"),
    width: int | None = Form(None, gt=0),
    height: int | None = Form(None, gt=0),
    client_id: str = Depends(require_client),
):
    """Change format. Quality 95 and no resize unless a lower tier is chosen."""
    data, name = await _read_upload(file)
    descriptor = validate_image(data)

    params = resolve_encoder_parameters(
        Operation.CONVERT,
        level,
        descriptor.format,
        format,
        original_width=descriptor.width,
        width=width,
        height=height,
    )
    job = job_store.create(client_id, "image-convert", name, len(data))
    result = await _transcode(job, lambda: image_transcoder.transcode(data, params))
    stored = await _store(job, "converted", name, result)

    return _job_response(job, stored, result, level=params.tier, operation="convert")


@router.post("/compress-image", response_model=JobResponse, response_model_exclude_none=True)
async def compress_image(
    file: UploadFile | None = File(None),
    level: str | None = Form(None),
    client_id: str = Depends(require_client),
):
    """Shrink an image, keeping its format (PNG may become WebP).

    The response carries the pre-transcode estimate next to the measured
    result so the client can show how close the prediction was.
    """
    data, name = await _read_upload(file)
    descriptor = validate_image(data)

    level = level or settings_store.get(client_id).default_quality
    estimate = estimate_compressed_size(descriptor, level)
    params = resolve_encoder_parameters(
        Operation.COMPRESS,
        level,
        descriptor.format,
        original_width=descriptor.width,
    )

    job = job_store.create(client_id, "image-compress", name, len(data))
    result = await _transcode(job, lambda: image_transcoder.transcode(data, params))
    stored = await _store(job, "compressed", name, result)

    return _job_response(
        job,
        stored,
        result,
        level=params.tier,
        operation="compress",
        estimated_size=estimate.estimated_size,
        estimated_reduction=estimate.estimated_reduction_percent,
        actual_reduction=actual_reduction_percent(len(data), result.output_size),
        accuracy_percent=estimate_accuracy(estimate.estimated_size, result.output_size),
    )


@router.post("/restore-image", response_model=JobResponse, response_model_exclude_none=True)
async def restore_image(
    file: UploadFile | None = File(None),
    level: str = Form("restore"),
    client_id: str = Depends(require_client),
):
    """Sharpen and lift an image, upscaling at the "enhance" tier."""
    data, name = await _read_upload(file)
    descriptor = validate_image(data)

    params = resolve_encoder_parameters(
        Operation.RESTORE,
        level,
        descriptor.format,
        original_width=descriptor.width,
    )
    job = job_store.create(client_id, "image-restore", name, len(data))
    result = await _transcode(job, lambda: image_transcoder.transcode(data, params))
    stored = await _store(job, "restored", name, result)

    return _job_response(job, stored, result, level=params.tier, operation="restore")


@router.post("/upload-pdf", response_model=JobResponse, response_model_exclude_none=True)
async def compress_pdf(
    file: UploadFile | None = File(None),
    level: str = Form("medium"),
    client_id: str = Depends(require_client),
):
    data, name = await _read_upload(file)
    validate_pdf(data)

    tier = destructive_profile(level).name
    job = job_store.create(client_id, "pdf", name, len(data))
    result = await _transcode(job, lambda: pdf_transcoder.transcode(data, tier))
    stored = await _store(job, "compressed", name, result)

    return _job_response(job, stored, result, level=tier, operation="compress-pdf")


async def _read_upload(file: UploadFile | None) -> tuple[bytes, str]:
    if file is None:
        raise BadRequestError("No file uploaded")
    data = await file.read()
    if not data:
        raise BadRequestError("Uploaded file is empty")
    return data, file.filename or "file"


async def _transcode(job: Job, run) -> TranscodeResult:
    """Run a transcode inside the concurrency gate, failing the job on error.

    A full queue counts as a failure too, so no job is left pending.
    """
    try:
        async with transcode_gate:
            return await run()
    except Exception:
        job_store.fail(job)
        raise


async def _store(job: Job, prefix: str, input_name: str, result: TranscodeResult) -> str:
    name = file_store.output_name(prefix, input_name, result.format)
    try:
        public_path = await file_store.save(name, result.output_bytes)
    except Exception:
        job_store.fail(job)
        raise
    job_store.complete(job, name, public_path, result.output_size)
    logger.info(
        f"Job {job.job_id} completed",
        extra={
            "job_id": job.job_id,
            "client_id": job.client_id,
            "context": {
                "type": job.type,
                "original_size": result.original_size,
                "output_size": result.output_size,
                "format": result.format,
            },
        },
    )
    return public_path


def _job_response(
    job: Job,
    public_path: str,
    result: TranscodeResult,
    level: str,
    operation: str,
    **extra,
) -> JobResponse:
    return JobResponse(
        job_id=job.job_id,
        filename=job.output_name,
        download_url=public_path,
        original_size=result.original_size,
        compressed_size=result.output_size,
        format=result.format,
        level=level,
        operation=operation,
        quality=result.quality,
        width=result.width,
        height=result.height,
        **extra,
    )
