"""
Request context - per-request attribute store.

One instance is created for each page render and shared by everything that
takes part in it (templates, macros, the OpenGraph resolver). It is never
shared between requests.
"""

from __future__ import annotations

from typing import Any

from wiki_opengraph.domain.entities import DocumentReference, User


class RequestContext:
    """Ambient state of one page render."""

    def __init__(
        self,
        wiki_id: str,
        *,
        user: User | None = None,
        doc_reference: DocumentReference | None = None,
        locale: str = "",
    ) -> None:
        self.wiki_id = wiki_id
        self.user = user
        self.doc_reference = doc_reference
        self.locale = locale
        self._attributes: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        """Return the attribute stored under key, or None."""
        return self._attributes.get(key)

    def put(self, key: str, value: Any) -> None:
        """Store an attribute. Putting None removes it."""
        if value is None:
            self._attributes.pop(key, None)
        else:
            self._attributes[key] = value

    def __repr__(self) -> str:
        return (
            f"RequestContext(wiki_id={self.wiki_id!r}, doc={self.doc_reference}, "
            f"user={self.user.username if self.user else None!r})"
        )
