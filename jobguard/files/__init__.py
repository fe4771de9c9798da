"""Upload safety: signature tables, validation, presets, and safe naming."""

from jobguard.files.naming import generate_secure_file_name, sanitize_file_name
from jobguard.files.presets import VALIDATION_PRESETS, UploadKind, get_preset
from jobguard.files.uploads import InMemoryUpload, LocalUpload, UploadedFile
from jobguard.files.validator import (
    FileSignatureValidator,
    FileValidationOptions,
    FileValidationResult,
    validate_file,
)

__all__ = [
    "FileSignatureValidator",
    "FileValidationOptions",
    "FileValidationResult",
    "InMemoryUpload",
    "LocalUpload",
    "UploadKind",
    "UploadedFile",
    "VALIDATION_PRESETS",
    "generate_secure_file_name",
    "get_preset",
    "sanitize_file_name",
    "validate_file",
]
