"""
Uploaded File Records

Data classes for the server-side listing of stored files.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO-8601 timestamps, including the trailing 'Z' form"""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO-8601 string, got {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass
class UploadedFileRecord:
    """
    Metadata of a stored file, as returned by GET /files.

    Owned by the file service; the client only reads it.
    """

    identifier: str
    name: str
    url: str
    size: int
    mime_type: str
    uploaded_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to the wire format used by the file service"""
        return {
            "_id": self.identifier,
            "name": self.name,
            "url": self.url,
            "size": self.size,
            "type": self.mime_type,
            "uploadedAt": (
                self.uploaded_at.isoformat() if self.uploaded_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UploadedFileRecord":
        """
        Create record from a server JSON object.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong shape
        """
        return cls(
            identifier=str(data["_id"]),
            name=data["name"],
            url=data["url"],
            size=int(data["size"]),
            mime_type=data["type"],
            uploaded_at=_parse_timestamp(data.get("uploadedAt")),
        )


@dataclass
class FilePage:
    """One page of uploaded file records"""

    files: List[UploadedFileRecord] = field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.files
