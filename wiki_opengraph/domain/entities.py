from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
RoleType = Literal["admin", "editor", "viewer"]
PageVisibility = Literal["public", "private"]

# --- Users ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    username: str
    display_name: str = ""
    roles: list[RoleType] = Field(default_factory=list)
    status: Literal["active", "disabled"] = "active"

# --- Documents ---

class DocumentReference(BaseModel):
    """Wiki-qualified page reference, e.g. ``xwiki:Space.Doc``."""

    model_config = ConfigDict(frozen=True)

    wiki: str
    space: str
    name: str

    def __str__(self) -> str:
        return f"{self.wiki}:{self.space}.{self.name}"

    @classmethod
    def parse(cls, value: str, default_wiki: str = "xwiki") -> "DocumentReference":
        wiki, _, local = value.rpartition(":")
        space, sep, name = local.rpartition(".")
        if not sep or not space or not name:
            raise ValueError(f"Invalid document reference: {value!r}")
        return cls(wiki=wiki or default_wiki, space=space, name=name)

class Attachment(BaseModel):
    filename: str
    mime_type: str = "application/octet-stream"
    size_bytes: int = 0

class OpenGraphMetaObject(BaseModel):
    """Stored annotation: the two-field ``property``/``content`` record."""

    property: str | None = None
    content: str = ""

class Document(BaseModel):
    reference: DocumentReference
    title: str = ""
    content: str = ""
    locale: str = ""
    visibility: PageVisibility = "public"
    owner_user_id: UUID | None = None

    attachments: list[Attachment] = Field(default_factory=list)
    objects: list[OpenGraphMetaObject] = Field(default_factory=list)
    translations: dict[str, "Document"] = Field(default_factory=dict)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

# --- Wikis ---

class WikiDescriptor(BaseModel):
    id: str
    pretty_name: str = ""
    main_page_reference: DocumentReference
