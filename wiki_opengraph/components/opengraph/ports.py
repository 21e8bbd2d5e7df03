"""
OpenGraph component - Port interfaces.

The resolver only talks to its host through these protocols. Host adapters
live in ``wiki_opengraph.adapters``.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from typing import Any, Protocol

from .models import PropertyRecord

# --- Host Errors ---


class OpenGraphHostError(Exception):
    """Base class for failures reported by host collaborators."""


class DocumentNotFoundError(OpenGraphHostError):
    """Raised when the current document cannot be resolved."""


class RenderError(OpenGraphHostError):
    """Raised when a document (or its translation) cannot be loaded or rendered."""


class WikiLookupError(OpenGraphHostError):
    """Raised when the descriptor of a wiki cannot be loaded."""


# --- Handles ---


class PageHandle(Protocol):
    """A loaded document."""

    @property
    def reference(self) -> Hashable: ...


class AttachmentHandle(Protocol):
    """A file attached to a document."""

    @property
    def filename(self) -> str: ...


class WikiDescriptorHandle(Protocol):
    """Descriptor of the wiki the request is served from."""

    @property
    def main_page_reference(self) -> Hashable: ...


# --- Ports ---


class RequestContextPort(Protocol):
    """Per-request attribute store, also carrying the requesting identity."""

    wiki_id: str
    user: Any

    def get(self, key: str) -> Any:
        """Return the attribute stored under key, or None."""
        ...

    def put(self, key: str, value: Any) -> None:
        """Store an attribute. Putting None clears it."""
        ...


class DocumentAccessPort(Protocol):
    """Loading, rendering and addressing of documents."""

    def get_current_document(self, context: RequestContextPort) -> PageHandle:
        """
        Return the document being rendered.

        Raises:
            DocumentNotFoundError: If the context points to no document
        """
        ...

    def get_translated_document(
        self, doc: PageHandle, context: RequestContextPort
    ) -> PageHandle:
        """
        Return the translation of doc matching the context locale.

        Raises:
            RenderError: If the translation cannot be loaded
        """
        ...

    def render_title(self, doc: PageHandle, context: RequestContextPort) -> str:
        """Render the document title as plain text."""
        ...

    def render_plain_content(self, doc: PageHandle, context: RequestContextPort) -> str:
        """
        Render the document content as plain text.

        Raises:
            RenderError: If rendering fails
        """
        ...

    def get_view_url(self, doc: PageHandle, context: RequestContextPort) -> str:
        """External URL of the document view."""
        ...

    def get_attachment_url(
        self, doc: PageHandle, filename: str, context: RequestContextPort
    ) -> str:
        """External download URL of an attachment."""
        ...

    def list_attachments(self, doc: PageHandle) -> Sequence[AttachmentHandle]:
        """Attachments in listing order."""
        ...

    def is_image(self, attachment: AttachmentHandle, context: RequestContextPort) -> bool:
        """Whether the attachment is an image."""
        ...


class AnnotationStorePort(Protocol):
    """Read access to the OpenGraph annotations of a document."""

    def get_annotations(self, doc: PageHandle) -> Sequence[PropertyRecord]:
        """Annotations in discovery order, contents already displayable."""
        ...


class WikiDescriptorPort(Protocol):
    """Wiki descriptor lookup."""

    def get_by_id(self, wiki_id: str) -> WikiDescriptorHandle:
        """
        Raises:
            WikiLookupError: If the descriptor cannot be loaded
        """
        ...


class AuthorizationPort(Protocol):
    """View rights check."""

    def has_view_access(self, user: Any, reference: Hashable) -> bool:
        """Whether user (None for guests) may view the referenced document."""
        ...
