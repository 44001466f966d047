"""Pydantic models describing the Notion database payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class NotionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RichTextPayload(NotionBaseModel):
    plain_text: str = ""


class SelectOption(NotionBaseModel):
    name: str = ""


class PropertyValue(NotionBaseModel):
    """One cell of a database row; only the member matching ``type`` is populated."""

    type: str
    title: list[RichTextPayload] | None = None
    rich_text: list[RichTextPayload] | None = None
    select: SelectOption | None = None
    status: SelectOption | None = None
    multi_select: list[SelectOption] | None = None
    url: str | None = None
    number: float | None = None
    checkbox: bool | None = None


class PagePayload(NotionBaseModel):
    id: str
    archived: bool = False
    properties: dict[str, PropertyValue] = Field(default_factory=dict[str, PropertyValue])


class QueryResponse(NotionBaseModel):
    results: list[PagePayload]
    has_more: bool = False
    next_cursor: str | None = None


class PropertySchema(NotionBaseModel):
    id: str | None = None
    name: str | None = None
    type: str


class DatabasePayload(NotionBaseModel):
    id: str
    properties: dict[str, PropertySchema] = Field(default_factory=dict[str, PropertySchema])


class ErrorResponse(NotionBaseModel):
    status: int | None = None
    code: str | None = None
    message: str | None = None
