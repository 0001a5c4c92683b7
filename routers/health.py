from fastapi import APIRouter
from PIL import features

from schemas import HealthResponse

router = APIRouter()

VERSION = "0.1.0"

# Pillow codec features each output format depends on
REQUIRED_CODECS = {
    "jpeg": "jpg",
    "png": "zlib",
    "webp": "webp",
    "tiff": "libtiff",
    "avif": "avif",  # native since Pillow 11.2
}


def check_codecs() -> dict[str, bool]:
    """Check which encoders this Pillow build and environment provide."""
    results = {name: bool(features.check(feature)) for name, feature in REQUIRED_CODECS.items()}
    try:
        import pypdf  # noqa: F401

        results["pypdf"] = True
    except ImportError:
        results["pypdf"] = False
    return results


@router.get("/health", response_model=HealthResponse)
async def health():
    codecs = check_codecs()
    return HealthResponse(
        status="ok" if all(codecs.values()) else "degraded",
        codecs=codecs,
        version=VERSION,
    )
