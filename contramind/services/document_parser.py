import io
import logging
from pathlib import PurePosixPath

import docx
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from contramind.core.exceptions import DocumentExtractionError

logger = logging.getLogger(__name__)

# Configuration constants
MIN_TEXT_LENGTH = 10    # Minimum extracted text length

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
TEXT_MIME = "text/plain"


class FileTypeError(DocumentExtractionError):
    """Unsupported file type."""
    pass


class EncryptedFileError(DocumentExtractionError):
    """File is encrypted and cannot be parsed."""
    pass


class EmptyContentError(DocumentExtractionError):
    """File parsed but no text content extracted."""
    pass


def _kind(mime_type: str, filename: str) -> str:
    suffix = PurePosixPath(filename).suffix.lower()
    if mime_type == PDF_MIME or suffix == ".pdf":
        return "pdf"
    if mime_type == DOCX_MIME or suffix == ".docx":
        return "docx"
    if mime_type == DOC_MIME or suffix == ".doc":
        return "doc"
    if mime_type.startswith("text/") or suffix in {".txt", ".md"}:
        return "txt"
    return "unknown"


def extract_text(content: bytes, mime_type: str, filename: str = "") -> str:
    """
    Extract text from an uploaded contract held in memory.

    Args:
        content: Raw file bytes as downloaded from storage.
        mime_type: Declared mime type of the upload.
        filename: Original filename, used when the mime type is generic.

    Returns:
        Extracted text.

    Raises:
        FileTypeError: Unsupported file type (including legacy ``.doc``)
        EncryptedFileError: PDF is encrypted
        EmptyContentError: No meaningful text could be extracted
        DocumentExtractionError: Any other parsing failure
    """
    kind = _kind(mime_type, filename)
    logger.info("Extracting text from %s (%d bytes, %s)", filename or "<upload>", len(content), kind)

    if kind == "pdf":
        text = _parse_pdf(content)
    elif kind == "docx":
        text = _parse_docx(content)
    elif kind == "txt":
        text = _parse_txt(content)
    elif kind == "doc":
        raise FileTypeError("Legacy Word (.doc) files are not supported; please upload a .docx or PDF")
    else:
        raise FileTypeError(f"Unsupported file type: {mime_type}")

    text = text.strip()
    if len(text) < MIN_TEXT_LENGTH:
        raise EmptyContentError(
            "Could not extract meaningful text from document. "
            f"Extracted only {len(text)} characters (minimum: {MIN_TEXT_LENGTH}). "
            "The file may be empty, corrupted, or consist only of images/scans."
        )
    return text


def _parse_pdf(content: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(content))
    except PdfReadError as exc:
        raise DocumentExtractionError(f"Failed to parse PDF: {exc}") from exc
    if reader.is_encrypted:
        raise EncryptedFileError(
            "PDF is encrypted. Please provide an unencrypted version of the document."
        )
    pages = []
    for page in reader.pages:
        extracted = page.extract_text()
        if extracted:
            pages.append(extracted)
    return "\n".join(pages)


def _parse_docx(content: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(content))
    except Exception as exc:  # python-docx raises a mix of zipfile/lxml/KeyError
        raise DocumentExtractionError(f"Failed to parse DOCX: {exc}") from exc
    lines = [para.text for para in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text.strip() for cell in row.cells))
    return "\n".join(lines)


def _parse_txt(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        # Try with a different encoding if UTF-8 fails
        return content.decode("latin-1")
