"""
File Upload Utility - store and locate resume files.

Supported formats:
- PDF (.pdf)
- Word (.doc, .docx)
- Plain Text (.txt)

Files are stored verbatim as resume_<user_id>_<uuid><ext> under
<upload_dir>/resumes and referenced as /uploads/resumes/<name>.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple

from fastapi import UploadFile

from internlink.core.errors import PayloadTooLarge, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.pdf', '.doc', '.docx', '.txt'}
RESUME_URL_PREFIX = "/uploads/resumes/"
CHUNK_SIZE = 1024 * 1024


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def generate_storage_name(user_id: int, filename: str) -> str:
    """Collision-resistant name; keeps only the original extension."""
    return f"resume_{user_id}_{uuid.uuid4().hex}{get_file_extension(filename)}"


def save_resume(file: UploadFile, user_id: int, resume_dir: Path, max_size_mb: int) -> Tuple[str, str]:
    """
    Validate and store an uploaded resume.

    Returns:
        Tuple of (resume_url, original_filename)

    Raises:
        ValidationError for a missing/unsupported/empty file,
        PayloadTooLarge when the file exceeds max_size_mb.
    """
    if file is None or not file.filename:
        raise ValidationError("No file uploaded.", code="InvalidFile")

    original_name = Path(file.filename.replace("\\", "/")).name
    ext = get_file_extension(original_name)
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            f"Unsupported file type '{ext}'. Allowed: PDF, DOC, DOCX, TXT",
            code="InvalidFile"
        )

    resume_dir.mkdir(parents=True, exist_ok=True)
    storage_name = generate_storage_name(user_id, original_name)
    target = resume_dir / storage_name
    max_bytes = max_size_mb * 1024 * 1024

    written = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = file.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise PayloadTooLarge(f"File too large. Maximum size: {max_size_mb}MB")
                out.write(chunk)
    except Exception:
        target.unlink(missing_ok=True)
        raise

    if written == 0:
        target.unlink(missing_ok=True)
        raise ValidationError("Uploaded file is empty.", code="InvalidFile")

    logger.info("Stored resume for user %s as %s (%d bytes)", user_id, storage_name, written)
    return RESUME_URL_PREFIX + storage_name, original_name


def resolve_resume_path(resume_url: Optional[str], resume_dir: Path) -> Optional[Path]:
    """Map a stored /uploads/resumes/<name> reference to its file, if present."""
    if not resume_url or not resume_url.startswith(RESUME_URL_PREFIX):
        return None
    # Only the final path component is trusted
    name = Path(resume_url[len(RESUME_URL_PREFIX):]).name
    if not name:
        return None
    path = resume_dir / name
    return path if path.is_file() else None


def delete_resume(resume_url: Optional[str], resume_dir: Path) -> None:
    """Remove a previously stored resume file; missing files are ignored."""
    path = resolve_resume_path(resume_url, resume_dir)
    if path is not None:
        path.unlink(missing_ok=True)
        logger.info("Deleted replaced resume %s", path.name)
