"""
Node Items - Data structures flowing through workflows.

Items travel between nodes as execution-data dicts:

    {"json": {...}, "binary": {"data": {...}}, "pairedItem": {"item": 0}}

Binary entries keep their payload base64 encoded (``data``) together with
file metadata, the same shape GitHub uses for file contents.
"""

from __future__ import annotations

import base64
import mimetypes
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_MIME_TYPE = "application/octet-stream"


class BinaryData(BaseModel):
    """
    Binary attachment for a node item.

    Serialized with camelCase keys so entries look like the ones
    produced by the rest of the workflow.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    data: str = Field(..., description="Base64 encoded payload")
    mime_type: str = Field(DEFAULT_MIME_TYPE, alias="mimeType")
    file_name: Optional[str] = Field(None, alias="fileName")
    file_extension: Optional[str] = Field(None, alias="fileExtension")
    file_size: Optional[int] = Field(None, alias="fileSize")

    @classmethod
    def from_bytes(
        cls,
        raw: bytes,
        file_path: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> "BinaryData":
        """Build an attachment from raw bytes, guessing metadata from the path."""
        file_name = os.path.basename(file_path) if file_path else None
        extension = None
        if file_name and "." in file_name:
            extension = file_name.rsplit(".", 1)[1]
        if mime_type is None and file_name:
            mime_type = mimetypes.guess_type(file_name)[0]
        return cls(
            data=base64.b64encode(raw).decode("ascii"),
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            file_name=file_name,
            file_extension=extension,
            file_size=len(raw),
        )

    @classmethod
    def from_entry(cls, entry: Dict[str, Any]) -> "BinaryData":
        """Parse an entry dict from an item's ``binary`` mapping."""
        return cls.model_validate(entry)

    def to_bytes(self) -> bytes:
        """Decode the payload."""
        return base64.b64decode(self.data)

    def to_entry(self) -> Dict[str, Any]:
        """Entry dict suitable for an item's ``binary`` mapping."""
        return self.model_dump(by_alias=True, exclude_none=True)


def prepare_binary_data(raw: bytes, file_path: Optional[str] = None) -> Dict[str, Any]:
    """Turn raw bytes into a binary entry (``helpers.prepareBinaryData``)."""
    return BinaryData.from_bytes(raw, file_path).to_entry()


def with_binary(item: Dict[str, Any], name: str, entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``item`` carrying ``entry`` under ``name``.

    The binary mapping is copied shallowly: existing entries are shared by
    reference and the source item is left untouched.
    """
    binary = dict(item.get("binary") or {})
    binary[name] = entry
    return {"json": item.get("json", {}), "binary": binary}


__all__ = [
    "BinaryData",
    "DEFAULT_MIME_TYPE",
    "prepare_binary_data",
    "with_binary",
]
