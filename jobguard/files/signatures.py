"""Magic-number tables for upload content checks.

Every MIME type jobguard knows about is a MimeType member, and each one
has exactly one SignatureEntry. Types with no reliable signature (plain
text, CSV, SVG, GIF here) still carry their extensions so the
extension/type cross-check can use them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

SIGNATURE_READ_BYTES = 32


class MimeType(StrEnum):
    PDF = "application/pdf"
    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    SVG = "image/svg+xml"
    MSWORD = "application/msword"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    TEXT = "text/plain"
    CSV = "text/csv"


@dataclass(frozen=True, slots=True)
class SignatureEntry:
    mime_type: MimeType
    candidate_signatures: frozenset[bytes]
    extensions: frozenset[str]


def _entry(mime: MimeType, signatures: tuple[bytes, ...], extensions: tuple[str, ...]) -> SignatureEntry:
    return SignatureEntry(mime, frozenset(signatures), frozenset(extensions))


SIGNATURE_TABLE: dict[MimeType, SignatureEntry] = {
    entry.mime_type: entry
    for entry in (
        _entry(MimeType.PDF, (b"%PDF",), ("pdf",)),
        _entry(
            MimeType.JPEG,
            (
                b"\xff\xd8\xff\xe0",  # JFIF
                b"\xff\xd8\xff\xe1",  # EXIF
                b"\xff\xd8\xff\xe8",  # SPIFF
            ),
            ("jpg", "jpeg"),
        ),
        _entry(MimeType.PNG, (b"\x89PNG\r\n\x1a\n",), ("png",)),
        _entry(MimeType.GIF, (), ("gif",)),
        _entry(MimeType.SVG, (), ("svg",)),
        _entry(MimeType.MSWORD, (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1",), ("doc",)),
        _entry(
            MimeType.DOCX,
            # ZIP container: local header, empty archive, spanned archive
            (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08"),
            ("docx",),
        ),
        _entry(MimeType.TEXT, (), ("txt",)),
        _entry(MimeType.CSV, (), ("csv",)),
    )
}

# Checked regardless of the declared type.
SUSPICIOUS_SIGNATURES: tuple[tuple[str, bytes], ...] = (
    ("DOS/Windows executable", b"MZ"),
    ("ELF executable", b"\x7fELF"),
    ("Mach-O executable", b"\xfe\xed\xfa\xce"),
    ("Mach-O executable", b"\xfe\xed\xfa\xcf"),
    ("script (shebang)", b"#!"),
)


def extensions_for(mime_type: str) -> frozenset[str] | None:
    """Extensions conventionally used for `mime_type`, or None if unknown."""
    entry = SIGNATURE_TABLE.get(mime_type)
    return entry.extensions if entry else None


def matches_declared_type(head: bytes, mime_type: str) -> bool:
    """True if `head` starts with one of the type's known signatures.

    Types without a signature (or unknown types) always match.
    """
    entry = SIGNATURE_TABLE.get(mime_type)
    if entry is None or not entry.candidate_signatures:
        return True
    return any(head.startswith(sig) for sig in entry.candidate_signatures)


def find_suspicious_signature(head: bytes) -> str | None:
    """Return the label of the first executable/script signature in `head`."""
    for label, prefix in SUSPICIOUS_SIGNATURES:
        if head.startswith(prefix):
            return label
    return None
