"""Validation presets for each kind of upload the job board accepts."""

from __future__ import annotations

from enum import StrEnum

from jobguard.files.signatures import MimeType
from jobguard.files.validator import FileValidationOptions

_MB = 1024 * 1024


class UploadKind(StrEnum):
    RESUME = "resume"
    PROFILE_IMAGE = "profile_image"
    COMPANY_LOGO = "company_logo"
    DOCUMENT = "document"


VALIDATION_PRESETS: dict[UploadKind, FileValidationOptions] = {
    UploadKind.RESUME: FileValidationOptions(
        max_size=5 * _MB,
        allowed_types=(MimeType.PDF,),
        allowed_extensions=("pdf",),
    ),
    UploadKind.PROFILE_IMAGE: FileValidationOptions(
        max_size=2 * _MB,
        allowed_types=(MimeType.JPEG, MimeType.PNG),
        allowed_extensions=("jpg", "jpeg", "png"),
    ),
    UploadKind.COMPANY_LOGO: FileValidationOptions(
        max_size=1 * _MB,
        allowed_types=(MimeType.JPEG, MimeType.PNG, MimeType.SVG),
        allowed_extensions=("jpg", "jpeg", "png", "svg"),
    ),
    UploadKind.DOCUMENT: FileValidationOptions(
        max_size=10 * _MB,
        allowed_types=(MimeType.PDF, MimeType.MSWORD, MimeType.DOCX, MimeType.TEXT),
        allowed_extensions=("pdf", "doc", "docx", "txt"),
    ),
}


def get_preset(kind: UploadKind | str, overrides: dict[UploadKind, int] | None = None) -> FileValidationOptions:
    """Return the preset for `kind` with any configured size override applied.

    When `overrides` is None the loaded configuration's
    uploads.max_size_overrides is used.
    """
    kind = UploadKind(kind)
    if overrides is None:
        from jobguard.config.loader import load_config

        overrides = load_config().uploads.max_size_overrides
    preset = VALIDATION_PRESETS[kind]
    max_size = overrides.get(kind)
    if max_size is None:
        return preset
    return FileValidationOptions.model_validate({**preset.model_dump(), "max_size": max_size})
