"""Upload validation: size, type, extension, magic numbers and a malware heuristic.

validate_file() runs a fixed sequence of checks and stops at the first
hard failure. Softer observations (an extension that does not fit the
declared type, a suspiciously tiny file) are collected as warnings on an
otherwise valid result.

The malware heuristic is a byte-prefix check for executables and scripts,
not an antivirus scan. It runs after the signature check and overrides a
successful match, so a polyglot that starts with a valid container header
can never be whitelisted by that header alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobguard.errors import FileReadError
from jobguard.files.signatures import (
    SIGNATURE_READ_BYTES,
    extensions_for,
    find_suspicious_signature,
    matches_declared_type,
)
from jobguard.files.uploads import UploadedFile

_MB = 1024 * 1024
_TINY_FILE_BYTES = 100
_UNSAFE_NAME_FRAGMENTS = ("..", "/", "\\")


class FileValidationOptions(BaseModel):
    """Constraints for one class of upload (résumé, logo, ...).

    Empty allowed_types / allowed_extensions mean "anything".
    """

    model_config = ConfigDict(frozen=True)

    max_size: int = Field(default=5 * _MB, gt=0, description="Maximum size in bytes.")
    allowed_types: tuple[str, ...] = ()
    allowed_extensions: tuple[str, ...] = ()
    check_magic_numbers: bool = True
    scan_for_malware: bool = True

    @field_validator("allowed_extensions")
    @classmethod
    def _normalise_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(ext.lower().lstrip(".") for ext in v)


@dataclass(frozen=True, slots=True)
class FileValidationResult:
    is_valid: bool
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, warnings: list[str] | None = None) -> FileValidationResult:
        return cls(is_valid=True, warnings=list(warnings or []))

    @classmethod
    def fail(cls, error: str) -> FileValidationResult:
        return cls(is_valid=False, error=error)


def file_extension(name: str) -> str:
    """Lowercased text after the last dot, or "" if there is none."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


async def validate_file(file: UploadedFile, options: FileValidationOptions) -> FileValidationResult:
    """Check an upload against `options`.

    Returns a result for every judgment, valid or not. Raises
    FileReadError only when the leading bytes cannot be read, which means
    the file could not be judged at all.
    """
    result = await _run_checks(file, options)
    if result.is_valid:
        logger.debug("Upload '{}' accepted ({} warning(s))", file.name, len(result.warnings))
    else:
        logger.info("Upload '{}' rejected: {}", file.name, result.error)
    return result


async def _run_checks(file: UploadedFile, options: FileValidationOptions) -> FileValidationResult:
    warnings: list[str] = []

    if file.size > options.max_size:
        return FileValidationResult.fail(
            f"File size ({file.size / _MB:.2f}MB) exceeds maximum allowed size "
            f"({options.max_size / _MB:.2f}MB)"
        )

    if options.allowed_types and file.mime_type not in options.allowed_types:
        return FileValidationResult.fail(
            f'File type "{file.mime_type}" is not allowed. '
            f"Allowed types: {', '.join(options.allowed_types)}"
        )

    extension = file_extension(file.name)
    if options.allowed_extensions and extension not in options.allowed_extensions:
        return FileValidationResult.fail(
            f'File extension ".{extension}" is not allowed. '
            f"Allowed extensions: {', '.join(options.allowed_extensions)}"
        )

    expected = extensions_for(file.mime_type)
    if expected is not None and extension not in expected:
        warnings.append("File extension does not match the detected file type")

    if options.check_magic_numbers or options.scan_for_malware:
        head = await _read_head(file)

        if options.check_magic_numbers and not matches_declared_type(head, file.mime_type):
            return FileValidationResult.fail(
                "File signature does not match the declared file type. "
                "This may indicate a corrupted or malicious file."
            )

        if options.scan_for_malware:
            label = find_suspicious_signature(head)
            if label is not None:
                logger.warning("Upload '{}' starts with a {} signature", file.name, label)
                return FileValidationResult.fail(
                    "File contains suspicious patterns that may indicate malware. "
                    "Upload blocked for security reasons."
                )

    if any(fragment in file.name for fragment in _UNSAFE_NAME_FRAGMENTS):
        return FileValidationResult.fail("File name contains invalid characters")

    if file.size < _TINY_FILE_BYTES:
        warnings.append("File is unusually small")

    if not extension:
        warnings.append("File has no extension")

    return FileValidationResult.ok(warnings)


async def _read_head(file: UploadedFile) -> bytes:
    try:
        return await file.read_head(SIGNATURE_READ_BYTES)
    except Exception as exc:
        logger.warning("Could not read upload '{}': {}", file.name, exc)
        raise FileReadError(file.name) from exc


class FileSignatureValidator:
    """validate_file() bound to one set of options."""

    def __init__(self, options: FileValidationOptions) -> None:
        self.options = options

    async def validate(self, file: UploadedFile) -> FileValidationResult:
        return await validate_file(file, self.options)
