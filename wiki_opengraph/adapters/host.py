"""
Wiki host adapters.

Implements the OpenGraph component ports on top of any page store: the
in-memory wiki used by tests or the SQLite store used by the web app.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol
from urllib.parse import quote

from wiki_opengraph.adapters.render.plain_text import PlainTextRenderer
from wiki_opengraph.components.opengraph.ports import DocumentNotFoundError, RenderError
from wiki_opengraph.domain.entities import (
    Attachment,
    Document,
    DocumentReference,
    User,
    WikiDescriptor,
)
from wiki_opengraph.domain.policy import PolicyEngine

IMAGE_MIME_PREFIX = "image/"


class WikiStore(Protocol):
    """Pages and wiki descriptors."""

    def get_document(self, reference: DocumentReference) -> Document | None: ...

    def get_by_id(self, wiki_id: str) -> WikiDescriptor: ...


def build_external_url(base_url: str, path: str) -> str:
    """Join base URL and path with exactly one slash."""
    base = base_url.rstrip("/")
    if not path.startswith("/"):
        path = "/" + path
    return f"{base}{path}"


class WikiDocumentAccess:
    """DocumentAccessPort over a WikiStore."""

    def __init__(
        self,
        wiki: WikiStore,
        base_url: str,
        renderer: PlainTextRenderer | None = None,
    ) -> None:
        self._wiki = wiki
        self._base_url = base_url
        self._renderer = renderer or PlainTextRenderer()

    @property
    def renderer(self) -> PlainTextRenderer:
        return self._renderer

    def get_current_document(self, context: Any) -> Document:
        reference = context.doc_reference
        doc = self._wiki.get_document(reference) if reference else None
        if doc is None:
            raise DocumentNotFoundError(f"Document [{reference}] does not exist")
        return doc

    def get_translated_document(self, doc: Document, context: Any) -> Document:
        locale = getattr(context, "locale", "")
        if not locale or locale == doc.locale:
            return doc
        translation = doc.translations.get(locale)
        if translation is None:
            # Missing translations fall back to the default language.
            return doc
        if translation.reference != doc.reference:
            raise RenderError(f"Translation [{locale}] of [{doc.reference}] is inconsistent")
        return translation

    def render_title(self, doc: Document, context: Any) -> str:
        return self._renderer.render(doc.title or doc.reference.name, context)

    def render_plain_content(self, doc: Document, context: Any) -> str:
        return self._renderer.render(doc.content, context)

    def get_view_url(self, doc: Document, context: Any) -> str:
        ref = doc.reference
        return build_external_url(
            self._base_url, f"/{quote(ref.wiki)}/view/{quote(ref.space)}/{quote(ref.name)}"
        )

    def get_attachment_url(self, doc: Document, filename: str, context: Any) -> str:
        ref = doc.reference
        return build_external_url(
            self._base_url,
            f"/{quote(ref.wiki)}/download/{quote(ref.space)}/{quote(ref.name)}/{quote(filename)}",
        )

    def list_attachments(self, doc: Document) -> Sequence[Attachment]:
        return list(doc.attachments)

    def is_image(self, attachment: Attachment, context: Any) -> bool:
        return attachment.mime_type.lower().startswith(IMAGE_MIME_PREFIX)


class PolicyAuthorization:
    """AuthorizationPort backed by the rules policy engine."""

    def __init__(self, policy: PolicyEngine, wiki: WikiStore) -> None:
        self._policy = policy
        self._wiki = wiki

    def has_view_access(self, user: User | None, reference: DocumentReference) -> bool:
        doc = self._wiki.get_document(reference)
        if doc is None:
            return False
        return self._policy.can_view(user, doc)
