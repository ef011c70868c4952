"""Color byte code microservice -- FastAPI application.

Endpoints:
    POST /encode        -- Encode a record to a PNG color byte code
    POST /encode/svg    -- Encode a record to an SVG color byte code
    POST /attach        -- Print a color byte code beneath an uploaded image
    POST /decode        -- Decode an image back to a record
    GET  /health        -- Health check
"""

from __future__ import annotations

import io

import structlog
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from PIL import Image
from pydantic import BaseModel, Field, ValidationError

from .decoder import decode_image
from .encoder import attach_to_image, encode_png
from .payload import ColorByteCodeData, EncodeOptions, RectArea
from .renderer import render_svg

structlog.configure(
    processors=[
        structlog.dev.ConsoleRenderer(),
    ],
)

logger = structlog.get_logger(__name__)

SERVICE_VERSION = "0.1.0"
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ACCEPTED_IMAGE_TYPES = ("image/png", "image/webp", "image/bmp")

app = FastAPI(
    title="colorbytecode",
    description="Color byte code encoder/decoder for image transform metadata",
    version=SERVICE_VERSION,
)


# --------------------------------------------------------------------------
# Request / Response models
# --------------------------------------------------------------------------


class EncodeOptionsModel(BaseModel):
    """Transform options carried by the code."""

    grid_size: int = Field(..., ge=1, description="Edge length of the transform grid cells")
    is_swap: bool = Field(default=False, description="Cells were shuffled")
    is_rotate: bool = Field(default=False, description="Cells were rotated")
    is_nega: bool = Field(default=False, description="Colors were inverted")
    hash_key: str | None = Field(
        default=None,
        description="Shuffle key; only its presence is encoded",
    )


class RectAreaModel(BaseModel):
    """A rectangular image area in pixels."""

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    w: int = Field(..., ge=0)
    h: int = Field(..., ge=0)


class RecordModel(BaseModel):
    """A color byte code record."""

    encode_options: EncodeOptionsModel
    areas: list[RectAreaModel] = Field(..., min_length=1)
    size: tuple[int, int, int] = Field(
        ...,
        description="(width, height, depth) of the source image",
        examples=[[1024, 768, 0]],
    )

    def to_record(self) -> ColorByteCodeData:
        return ColorByteCodeData(
            encode_options=EncodeOptions(**self.encode_options.model_dump()),
            areas=[RectArea(**a.model_dump()) for a in self.areas],
            size=self.size,
        )

    @classmethod
    def from_record(cls, data: ColorByteCodeData) -> RecordModel:
        options = data.encode_options
        return cls(
            encode_options=EncodeOptionsModel(
                grid_size=options.grid_size,
                is_swap=options.is_swap,
                is_rotate=options.is_rotate,
                is_nega=options.is_nega,
                hash_key=options.hash_key,
            ),
            areas=[RectAreaModel(x=a.x, y=a.y, w=a.w, h=a.h) for a in data.areas],
            size=data.size,
        )


class EncodeRequest(RecordModel):
    """Request body for /encode and /encode/svg."""

    width: int = Field(
        ...,
        ge=16,
        le=8192,
        description="Width of the target image (and of the code) in pixels",
    )
    height: int = Field(
        ...,
        ge=16,
        le=8192,
        description="Height of the target image in pixels (sizes the blocks)",
    )


class DecodeResponse(BaseModel):
    """Response body for /decode."""

    data: RecordModel | None = Field(
        description="Decoded record, or null if decode failed",
    )
    error: str | None = Field(
        default=None,
        description="Error message if decode failed",
    )


class HealthResponse(BaseModel):
    """Response body for /health."""

    status: str
    service: str
    version: str


async def _read_upload(file: UploadFile) -> bytes:
    if file.content_type and file.content_type not in ACCEPTED_IMAGE_TYPES:
        raise HTTPException(
            status_code=422,
            detail=(f"Unsupported image type: {file.content_type}. " "Use PNG, WebP or BMP."),
        )

    image_bytes = await file.read()
    if len(image_bytes) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Image too large (max 10MB)")
    return image_bytes


# --------------------------------------------------------------------------
# Endpoints
# --------------------------------------------------------------------------


@app.post(
    "/encode",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "PNG color byte code"},
        422: {"description": "Invalid input"},
    },
)
async def encode_png_endpoint(request: EncodeRequest) -> Response:
    """Encode a record into a color byte code PNG."""
    try:
        png_bytes = encode_png(request.to_record(), request.width, request.height)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("encode_png_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Encoding failed")

    return Response(content=png_bytes, media_type="image/png")


@app.post(
    "/encode/svg",
    response_class=Response,
    responses={
        200: {
            "content": {"image/svg+xml": {}},
            "description": "SVG color byte code",
        },
        422: {"description": "Invalid input"},
    },
)
async def encode_svg_endpoint(request: EncodeRequest) -> Response:
    """Encode a record into a color byte code SVG."""
    try:
        svg_content = render_svg(request.to_record(), request.width, request.height)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("encode_svg_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Encoding failed")

    return Response(content=svg_content, media_type="image/svg+xml")


@app.post(
    "/attach",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "Image with the code beneath"},
        422: {"description": "Invalid input"},
    },
)
async def attach_endpoint(
    file: UploadFile = File(...),
    record: str = Form(..., description="RecordModel as JSON"),
) -> Response:
    """Print a color byte code beneath an uploaded image."""
    image_bytes = await _read_upload(file)

    try:
        data = RecordModel.model_validate_json(record).to_record()
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except Exception as e:
        raise HTTPException(status_code=422, detail=f"Cannot open image: {e}")

    try:
        combined = attach_to_image(img, data)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("attach_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Encoding failed")

    buf = io.BytesIO()
    combined.save(buf, format="PNG")
    return Response(content=buf.getvalue(), media_type="image/png")


@app.post("/decode", response_model=DecodeResponse)
async def decode_endpoint(file: UploadFile = File(...)) -> DecodeResponse:
    """Decode a color byte code image back to its record."""
    image_bytes = await _read_upload(file)
    result = decode_image(image_bytes)

    if result.data is None:
        return DecodeResponse(data=None, error=result.error)
    try:
        record = RecordModel.from_record(result.data)
    except ValidationError as e:
        # Decoded records may fall outside the bounds accepted for encoding
        logger.warning("decode_record_out_of_bounds", error=str(e))
        return DecodeResponse(data=None, error=f"Decoded record out of range: {e}")
    return DecodeResponse(data=record)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint for Docker and load balancer probes."""
    return HealthResponse(
        status="healthy",
        service="colorbytecode",
        version=SERVICE_VERSION,
    )
