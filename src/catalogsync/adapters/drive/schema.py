"""Pydantic models for the Google Drive v3 file listing."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DriveBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DriveFile(DriveBaseModel):
    id: str
    name: str = ""
    mime_type: str | None = Field(default=None, alias="mimeType")


class FileList(DriveBaseModel):
    files: list[DriveFile] = Field(default_factory=list[DriveFile])
    next_page_token: str | None = Field(default=None, alias="nextPageToken")
