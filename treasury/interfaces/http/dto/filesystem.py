from __future__ import annotations

from pydantic import BaseModel, Field

ENTRY_ID_PATTERN = r"^[a-f0-9]{32}$"


class GetFilesystemRequestDTO(BaseModel):
    folder_id: str | None = Field(default=None, pattern=ENTRY_ID_PATTERN)


class CreateFolderRequestDTO(BaseModel):
    parent_id: str | None = Field(default=None, pattern=ENTRY_ID_PATTERN)
    name: str = Field(min_length=1, max_length=255)


class StorageUsedDTO(BaseModel):
    used_bytes: int
    quota_bytes: int
