"""
In-memory page store and annotation store.

Used by tests and for embedding the resolver without a database.
"""

from __future__ import annotations

from collections.abc import Sequence

from wiki_opengraph.adapters.render.plain_text import PlainTextRenderer
from wiki_opengraph.components.opengraph.models import PropertyRecord
from wiki_opengraph.components.opengraph.ports import WikiLookupError
from wiki_opengraph.domain.entities import (
    Document,
    DocumentReference,
    OpenGraphMetaObject,
    WikiDescriptor,
)


class InMemoryWiki:
    """Documents and wiki descriptors, keyed by reference and wiki id."""

    def __init__(self) -> None:
        self._documents: dict[DocumentReference, Document] = {}
        self._wikis: dict[str, WikiDescriptor] = {}

    def save_document(self, doc: Document) -> Document:
        self._documents[doc.reference] = doc
        return doc

    def get_document(self, reference: DocumentReference) -> Document | None:
        return self._documents.get(reference)

    def save_wiki(self, descriptor: WikiDescriptor) -> WikiDescriptor:
        self._wikis[descriptor.id] = descriptor
        return descriptor

    def get_by_id(self, wiki_id: str) -> WikiDescriptor:
        descriptor = self._wikis.get(wiki_id)
        if descriptor is None:
            raise WikiLookupError(f"Unknown wiki [{wiki_id}]")
        return descriptor


class InMemoryAnnotationStore:
    """Annotations carried by the documents themselves."""

    def __init__(self, renderer: PlainTextRenderer | None = None) -> None:
        self._renderer = renderer

    def get_annotations(self, doc: Document) -> Sequence[PropertyRecord]:
        return [self._to_record(obj) for obj in doc.objects]

    def _to_record(self, obj: OpenGraphMetaObject) -> PropertyRecord:
        content = obj.content
        if self._renderer is not None:
            content = self._renderer.render(content)
        return PropertyRecord(property=obj.property, content=content)
