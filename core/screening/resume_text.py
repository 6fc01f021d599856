"""
Resume text extraction for screening.

PDF documents are read with pypdf; anything else is decoded as UTF-8 text.
Extraction quality is not a concern here, only producing text the oracle can
score.
"""
import io
import logging

from pypdf import PdfReader

from core.screening.errors import ScoringError
from core.screening.models import Resume

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPES = {'application/pdf', 'application/x-pdf'}


def extract_resume_text(resume: Resume) -> str:
    """
    Extract plain text from an uploaded resume.

    Raises:
        ScoringError: If the document is unreadable or contains no text.
    """
    is_pdf = resume.content_type in PDF_CONTENT_TYPES or resume.filename.lower().endswith('.pdf')

    if is_pdf:
        try:
            reader = PdfReader(io.BytesIO(resume.content))
            if len(reader.pages) == 0:
                raise ScoringError(f"PDF {resume.filename} has no pages")
            text = "\n".join((page.extract_text() or "") for page in reader.pages)
        except ScoringError:
            raise
        except Exception as e:
            raise ScoringError(f"Could not read PDF {resume.filename}: {e}") from e
    else:
        text = resume.content.decode('utf-8', errors='replace')

    text = text.strip()
    if not text:
        raise ScoringError(f"No text extracted from {resume.filename}")

    logger.debug(f"Extracted {len(text)} characters from {resume.filename}")
    return text
