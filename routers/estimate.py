import json

from fastapi import APIRouter, File, Form, Request, UploadFile
from pydantic import ValidationError

from estimation.estimator import ImageDescriptor, estimate_compressed_size
from exceptions import BadRequestError
from policy.tiers import destructive_profile
from schemas import EstimateRequest, EstimateResponse
from security.file_validation import validate_image
from utils.format_detect import normalize_format

router = APIRouter()


@router.post("/estimate", response_model=EstimateResponse)
async def estimate(
    request: Request,
    file: UploadFile | None = File(None),
    level: str | None = Form(None),
    format: str | None = Form(None),
):
    """Predict compressed size without transcoding.

    Accepts a multipart file upload (descriptor read from the file) or a
    JSON descriptor: {"format", "width", "height", "byte_size", "level",
    "target_format"}. Unknown levels are estimated as "medium".
    """
    content_type = request.headers.get("content-type", "")

    if file is not None:
        data = await file.read()
        descriptor = validate_image(data)
        target_format = format
    elif "application/json" in content_type:
        try:
            body = EstimateRequest(**(await request.json()))
        except (ValueError, json.JSONDecodeError, TypeError) as e:
            raise BadRequestError(f"Invalid JSON body: {_first_error(e)}")

        descriptor = ImageDescriptor(
            format=normalize_format(body.format),
            width=body.width,
            height=body.height,
            byte_size=body.byte_size,
        )
        level = body.level
        target_format = body.target_format
    else:
        raise BadRequestError("Expected multipart/form-data or application/json")

    target = normalize_format(target_format) if target_format else descriptor.format
    result = estimate_compressed_size(descriptor, level, target)

    return EstimateResponse(
        original_format=descriptor.format.value,
        target_format=target.value,
        dimensions={"width": descriptor.width, "height": descriptor.height},
        level=destructive_profile(level).name,
        original_size=result.original_size,
        estimated_size=result.estimated_size,
        estimated_reduction_percent=result.estimated_reduction_percent,
    )


def _first_error(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        err = exc.errors()[0]
        loc = ".".join(str(p) for p in err["loc"])
        return f"{loc}: {err['msg']}"
    return str(exc)
