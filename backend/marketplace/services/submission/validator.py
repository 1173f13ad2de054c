"""Attachment checks run before any upload is attempted."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath

MB = 1024 * 1024


class AssetVerdict(str, Enum):
    ACCEPTED = "accepted"
    TOO_LARGE = "too_large"
    WRONG_TYPE = "wrong_type"


@dataclass(frozen=True)
class AssetRule:
    max_size_bytes: int
    accepted_type_prefix: str = "image/"
    # Lowercase extensions including the dot. Empty means any extension.
    allowed_extensions: tuple[str, ...] = ()

    @classmethod
    def megabytes(cls, max_mb: float, accepted_type_prefix: str = "image/", allowed_extensions=()) -> "AssetRule":
        return cls(int(max_mb * MB), accepted_type_prefix, tuple(allowed_extensions))

    @property
    def max_size_mb(self) -> float:
        return self.max_size_bytes / MB


@dataclass
class Attachment:
    """A user-selected file pending upload."""
    name: str
    size: int
    mime_type: str
    data: bytes = field(default=b"", repr=False)

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str | None = None) -> "Attachment":
        return cls(name=name, size=len(data), mime_type=mime_type or "", data=data)

    @property
    def extension(self) -> str:
        return PurePosixPath(self.name).suffix.lower()


def validate_attachment(attachment: Attachment, rule: AssetRule) -> AssetVerdict:
    """Size first, then type. Pure."""
    if attachment.size > rule.max_size_bytes:
        return AssetVerdict.TOO_LARGE
    if not (attachment.mime_type or "").startswith(rule.accepted_type_prefix):
        return AssetVerdict.WRONG_TYPE
    if rule.allowed_extensions and attachment.extension not in rule.allowed_extensions:
        return AssetVerdict.WRONG_TYPE
    return AssetVerdict.ACCEPTED


def rejection_message(verdict: AssetVerdict, rule: AssetRule) -> str:
    if verdict is AssetVerdict.TOO_LARGE:
        return f"File size must be less than {rule.max_size_mb:g}MB"
    if rule.allowed_extensions:
        formats = ", ".join(ext.lstrip(".").upper() for ext in rule.allowed_extensions)
        return f"Accepted formats: {formats}"
    if rule.accepted_type_prefix == "image/":
        return "Please select a valid image file"
    return f"File type must be {rule.accepted_type_prefix}*"
