"""
Typed records for Postman API entities.

All defaulting for loosely-typed API payloads happens here, once per entity
kind. Unknown fields are ignored, camelCase API keys map onto snake_case
attributes, numeric identifiers are coerced to strings and an explicit
null for an id or name decodes to the field default.

The collection item tree is decoded into a recursive variant:

    CollectionItem = RequestItem | FolderItem

An item carrying a ``request`` is a request; an item carrying an ``item``
list is a folder; anything else is dropped during decoding.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

DEFAULT_METHOD = "GET"
NO_URL = "No URL"


class PostmanEntity(BaseModel):
    """Base for every decoded API record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("id", "owner", mode="before", check_fields=False)
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("id", "name", mode="before", check_fields=False)
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        # The API sends explicit nulls for unset names and ids
        field = cls.model_fields[info.field_name]
        if value is None and not field.is_required():
            return field.default
        return value


# =============================================================================
# Collection item tree
# =============================================================================

class UrlSpec(PostmanEntity):
    """Structured request URL as exported by Postman."""
    raw: Optional[str] = None
    protocol: Optional[str] = None
    host: Optional[Any] = None
    path: Optional[Any] = None


class RequestSpec(PostmanEntity):
    """The ``request`` object of a leaf item."""
    method: Optional[str] = None
    url: Optional[Union[str, UrlSpec]] = None

    @field_validator("url", mode="before")
    @classmethod
    def _normalize_url(cls, value: Any) -> Any:
        if isinstance(value, (str, UrlSpec)):
            return value
        if isinstance(value, dict):
            return UrlSpec.model_validate(value)
        return None

    @property
    def resolved_method(self) -> str:
        return self.method or DEFAULT_METHOD

    @property
    def resolved_url(self) -> str:
        """Plain string URL, else the structured ``raw`` field, else "No URL"."""
        if isinstance(self.url, str):
            return self.url
        if self.url is not None and self.url.raw:
            return self.url.raw
        return NO_URL


class RequestItem(PostmanEntity):
    """A leaf request in a collection."""
    id: Optional[str] = None
    name: str = ""
    request: RequestSpec = Field(default_factory=RequestSpec)

    @field_validator("request", mode="before")
    @classmethod
    def _normalize_request(cls, value: Any) -> Any:
        # A bare string request carries no method or url fields
        if isinstance(value, (dict, RequestSpec)):
            return value
        return RequestSpec()


class FolderItem(PostmanEntity):
    """A folder grouping nested items."""
    id: Optional[str] = None
    name: str = ""
    item: List["CollectionItem"] = Field(default_factory=list)

    @field_validator("item", mode="before")
    @classmethod
    def _decode_children(cls, value: Any) -> List["CollectionItem"]:
        return parse_items(value)


CollectionItem = Union[RequestItem, FolderItem]

FolderItem.model_rebuild()


def parse_item(raw: Any) -> Optional[CollectionItem]:
    """Decode one raw item into a request or folder, or None if it is neither."""
    if isinstance(raw, (RequestItem, FolderItem)):
        return raw
    if not isinstance(raw, dict):
        return None
    request = raw.get("request")
    if isinstance(request, dict) or request:
        return RequestItem.model_validate(raw)
    if raw.get("item") is not None:
        return FolderItem.model_validate(raw)
    return None


def parse_items(raw: Any) -> List[CollectionItem]:
    """Decode a raw item list; anything that is not a list decodes to []."""
    if not isinstance(raw, list):
        return []
    items: List[CollectionItem] = []
    for entry in raw:
        item = parse_item(entry)
        if item is not None:
            items.append(item)
    return items


# =============================================================================
# Top-level entities
# =============================================================================

class User(PostmanEntity):
    """The authenticated user (``GET /me``)."""
    id: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None


class Workspace(PostmanEntity):
    id: str = ""
    name: str = ""
    type: Optional[str] = None
    description: Optional[str] = None
    visibility: Optional[str] = None


class Collection(PostmanEntity):
    """Collection summary as listed by ``GET /collections``."""
    id: str = ""
    name: str = ""
    uid: Optional[str] = None
    owner: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CollectionInfo(PostmanEntity):
    id: str = ""
    name: str = ""
    description: Optional[str] = None
    schema_url: Optional[str] = Field(default=None, alias="schema")

    @model_validator(mode="before")
    @classmethod
    def _fill_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id") and data.get("_postman_id"):
            data = {**data, "id": data["_postman_id"]}
        return data

    @field_validator("description", mode="before")
    @classmethod
    def _flatten_description(cls, value: Any) -> Any:
        # Collection v2.1 allows {"content": "...", "type": "text/markdown"}
        if isinstance(value, dict):
            return value.get("content")
        return value


class CollectionDetail(PostmanEntity):
    """Full collection document from ``GET /collections/{id}``."""
    info: CollectionInfo = Field(default_factory=CollectionInfo)
    item: List[CollectionItem] = Field(default_factory=list)

    @field_validator("info", mode="before")
    @classmethod
    def _default_info(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("item", mode="before")
    @classmethod
    def _decode_items(cls, value: Any) -> List[CollectionItem]:
        return parse_items(value)


class Environment(PostmanEntity):
    id: str = ""
    name: str = ""
    uid: Optional[str] = None
    owner: Optional[str] = None
    is_public: Optional[bool] = None


class CombinedDataset(PostmanEntity):
    """Everything fetched in one load cycle.

    ``detailed_collections`` is a capped subset of ``collections``; consumers
    must tolerate it being shorter.
    """
    user: User = Field(default_factory=User)
    workspaces: List[Workspace] = Field(default_factory=list)
    collections: List[Collection] = Field(default_factory=list)
    detailed_collections: List[CollectionDetail] = Field(default_factory=list)
    environments: List[Environment] = Field(default_factory=list)
    timestamp: str = ""

    @field_validator("user", mode="before")
    @classmethod
    def _default_user(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator(
        "workspaces", "collections", "detailed_collections", "environments",
        mode="before",
    )
    @classmethod
    def _default_list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []
