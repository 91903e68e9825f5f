"""Resume upload route."""

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from focusflow.api.errors import to_http_exception
from focusflow.core.config import get_settings
from focusflow.core.errors import FocusFlowError
from focusflow.schemas.content import ParsedResumeResponse
from focusflow.services.resume_service import parse_resume

router = APIRouter(prefix="/resume-parser", tags=["resume"])


@router.post("/parse", response_model=ParsedResumeResponse, response_model_by_alias=True)
async def parse_resume_upload(file: UploadFile = File(...)) -> ParsedResumeResponse:
    """Extract text from an uploaded PDF or DOCX resume."""
    data = await file.read()
    if len(data) > get_settings().RESUME_MAX_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Resume file is too large",
        )
    try:
        parsed = parse_resume(data, file.content_type or "")
    except FocusFlowError as e:
        raise to_http_exception(e) from e
    return ParsedResumeResponse(raw_text=parsed.raw_text)
