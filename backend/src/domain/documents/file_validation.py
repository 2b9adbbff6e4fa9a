"""File validation for document ingestion.

Pure functions, no I/O. The accepted MIME types depend on the requested
protection level: watermarking needs PDF-level manipulation, so WATERMARK
and FULL only accept PDF.
"""

import os
import re
from typing import Dict, List, Optional, Tuple

from .errors import (
    EmptyFileError,
    FileTooLargeError,
    InvalidFileNameError,
    UnsupportedFileTypeError,
    UnsupportedTypeForProtectionError,
)
from .models import DocumentType, IncomingFile, ProtectionLevel


PDF_MIME_TYPE = 'application/pdf'

# MIME type -> extension, for protection level NONE
NONE_PROTECTION_MIME_TYPES: Dict[str, str] = {
    'application/pdf': '.pdf',
    'application/msword': '.doc',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document': '.docx',
    'application/vnd.ms-excel': '.xls',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet': '.xlsx',
    'application/vnd.ms-powerpoint': '.ppt',
    'application/vnd.openxmlformats-officedocument.presentationml.presentation': '.pptx',
    'text/plain': '.txt',
    'text/csv': '.csv',
    'application/rtf': '.rtf',
    'application/zip': '.zip',
}

PROTECTED_MIME_TYPES: Dict[str, str] = {
    PDF_MIME_TYPE: '.pdf',
}

# File size limit (default 100 MiB, configurable via env)
MAX_FILE_SIZE = int(os.getenv('MAX_UPLOAD_SIZE_BYTES', 100 * 1024 * 1024))

MAX_FILENAME_LENGTH = 255


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """Lower-case a MIME type and strip parameters.

    Example:
        >>> normalize_mime_type('Text/Plain; charset=UTF-8')
        'text/plain'
    """
    if not mime_type:
        return ''
    return mime_type.split(';', 1)[0].strip().lower()


def get_accepted_mime_types(protection_level: ProtectionLevel) -> List[str]:
    """Return the MIME types accepted for a protection level."""
    if protection_level == ProtectionLevel.NONE:
        return list(NONE_PROTECTION_MIME_TYPES)
    return list(PROTECTED_MIME_TYPES)


def get_accepted_extensions(protection_level: ProtectionLevel) -> List[str]:
    """Return the file extensions accepted for a protection level."""
    if protection_level == ProtectionLevel.NONE:
        return list(NONE_PROTECTION_MIME_TYPES.values())
    return list(PROTECTED_MIME_TYPES.values())


def get_accepted_formats_description(protection_level: Optional[ProtectionLevel] = None) -> str:
    """Human-readable list of accepted formats for a protection level."""
    if protection_level is None or protection_level == ProtectionLevel.NONE:
        return "PDF, Word, Excel, PowerPoint, Text, CSV, RTF, ZIP"
    return "PDF"


def is_supported_mime_type(
    mime_type: str,
    protection_level: ProtectionLevel = ProtectionLevel.NONE,
) -> bool:
    """Check if a MIME type may be ingested at the given protection level.

    Example:
        >>> is_supported_mime_type('application/msword')
        True
        >>> is_supported_mime_type('application/msword', ProtectionLevel.FULL)
        False
    """
    return normalize_mime_type(mime_type) in get_accepted_mime_types(protection_level)


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size (defaults to MAX_FILE_SIZE)

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024)
        (True, None)
        >>> validate_file_size(0)
        (False, 'File is empty (0 bytes)')
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"

    return True, None


def validate_filename(filename: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded filename

    Validation rules:
    - Not empty
    - Max 255 characters
    - No directory separators, and not a bare '.' or '..' (dots inside a
      name such as 'notes..v2.pdf' are fine)
    - No null bytes or control characters

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > MAX_FILENAME_LENGTH:
        return False, f"Filename exceeds {MAX_FILENAME_LENGTH} characters (got {len(filename)})"

    if '/' in filename or '\\' in filename:
        return False, "Filename contains directory separators"

    if filename.strip() in ('.', '..'):
        return False, "Filename cannot be a relative path component"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize a filename stem for use in a storage key

    Keeps letters, digits, dash and underscore; everything else becomes '-'.

    Example:
        >>> sanitize_filename('Prova (final).pdf')
        'Prova-final-.pdf'
        >>> sanitize_filename('../../notes.txt')
        'notes.txt'
    """
    filename = os.path.basename(filename.replace('\\', '/'))
    stem, ext = os.path.splitext(filename)

    stem = re.sub(r'[^A-Za-z0-9_-]', '-', stem)
    stem = re.sub(r'-{2,}', '-', stem) or 'document'
    ext = re.sub(r'[^A-Za-z0-9.]', '', ext).lower()

    max_stem_len = MAX_FILENAME_LENGTH - len(ext)
    return stem[:max_stem_len] + ext


def classify_document_type(mime_type: str) -> DocumentType:
    """Derive the coarse document type from a MIME type.

    Example:
        >>> classify_document_type('application/pdf')
        <DocumentType.PDF: 'PDF'>
        >>> classify_document_type('application/zip')
        <DocumentType.OTHER: 'OTHER'>
    """
    mime_type = normalize_mime_type(mime_type)
    if mime_type == PDF_MIME_TYPE:
        return DocumentType.PDF
    if mime_type.startswith('image/'):
        return DocumentType.IMAGE
    if 'word' in mime_type:
        return DocumentType.WORD
    if 'excel' in mime_type or 'spreadsheet' in mime_type or mime_type == 'text/csv':
        return DocumentType.EXCEL
    return DocumentType.OTHER


def validate_upload(
    file: IncomingFile,
    protection_level: ProtectionLevel,
    max_size: Optional[int] = None,
) -> DocumentType:
    """Accept or reject a file for the requested protection level.

    Size is checked before type so that FileTooLargeError is reported even
    for a file that would also fail the type check.

    Args:
        file: Uploaded file
        protection_level: Requested protection level
        max_size: Size ceiling in bytes (defaults to MAX_FILE_SIZE)

    Returns:
        DocumentType derived from the MIME type

    Raises:
        InvalidFileNameError: Empty, too long or unsafe filename
        EmptyFileError: Zero-byte file
        FileTooLargeError: File exceeds the size ceiling
        UnsupportedFileTypeError: MIME type not allow-listed (NONE)
        UnsupportedTypeForProtectionError: non-PDF with WATERMARK or FULL
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    is_valid, error_msg = validate_filename(file.file_name)
    if not is_valid:
        raise InvalidFileNameError(error_msg or "Invalid filename")

    if file.size_bytes == 0:
        raise EmptyFileError("File is empty (0 bytes)")

    if file.size_bytes > max_size:
        raise FileTooLargeError(file.size_bytes, max_size)

    mime_type = normalize_mime_type(file.mime_type)
    if not is_supported_mime_type(mime_type, protection_level):
        if protection_level == ProtectionLevel.NONE:
            raise UnsupportedFileTypeError(
                file.mime_type or 'unknown',
                get_accepted_formats_description(protection_level),
            )
        raise UnsupportedTypeForProtectionError(file.mime_type or 'unknown', protection_level.value)

    return classify_document_type(mime_type)
