"""Resume text extraction for roadmap personalisation."""

import io
from dataclasses import dataclass

from docx import Document as DocxDocument
from PyPDF2 import PdfReader

from focusflow.core.errors import ValidationError
from focusflow.core.logging import get_logger

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ALLOWED_CONTENT_TYPES = (PDF_CONTENT_TYPE, DOCX_CONTENT_TYPE)


@dataclass(frozen=True)
class ParsedResume:
    raw_text: str


def extract_text_from_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def extract_text_from_docx(data: bytes) -> str:
    doc = DocxDocument(io.BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs)


def parse_resume(data: bytes, content_type: str) -> ParsedResume:
    """Extract raw text from a PDF or DOCX resume.

    Raises:
        ValidationError: If the file type is unsupported or the file is unreadable
    """
    if content_type == PDF_CONTENT_TYPE:
        extract = extract_text_from_pdf
    elif content_type == DOCX_CONTENT_TYPE:
        extract = extract_text_from_docx
    else:
        raise ValidationError("Invalid file type. Please upload a PDF or DOCX file.")

    try:
        text = extract(data)
    except Exception as e:
        logger.warning("Resume extraction failed", content_type=content_type, error=str(e))
        raise ValidationError(f"Failed to extract text from resume: {e}") from e

    logger.info("Resume parsed", content_type=content_type, chars=len(text))
    return ParsedResume(raw_text=text.strip())
