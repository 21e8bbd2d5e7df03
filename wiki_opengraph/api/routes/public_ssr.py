"""
Public SSR Routes - wiki pages with OpenGraph metadata.

Serves HTML pages whose <head> carries the OpenGraph tags computed by the
metadata resolver, for crawlers and social previews.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse

from wiki_opengraph.adapters.host import PolicyAuthorization, WikiDocumentAccess, WikiStore
from wiki_opengraph.api.deps import (
    get_authorization,
    get_current_user,
    get_document_access,
    get_resolver,
    get_wiki,
)
from wiki_opengraph.components.opengraph import (
    MetadataMap,
    MetadataResolver,
    RenderError,
    render_meta_tags,
)
from wiki_opengraph.core.context import RequestContext
from wiki_opengraph.domain.entities import Document, DocumentReference, User

router = APIRouter()


# --- HTML Rendering ---


def _escape_html(text: str) -> str:
    """Escape HTML special characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


def render_meta_tags_html(metas: MetadataMap) -> str:
    """One <meta property content> tag per (property, content) pair."""
    return "\n    ".join(
        f'<meta property="{_escape_html(tag.property)}" content="{_escape_html(tag.content)}" />'
        for tag in render_meta_tags(metas)
    )


def render_ssr_page(title: str, metas: MetadataMap, body_text: str = "") -> str:
    """
    Render complete SSR HTML page.

    Pages without metadata simply have no OpenGraph tags.
    """
    meta_html = render_meta_tags_html(metas)
    paragraphs = "\n    ".join(
        f"<p>{_escape_html(p)}</p>" for p in body_text.split("\n\n") if p.strip()
    )

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8" />
    <title>{_escape_html(title)}</title>
    {meta_html}
</head>
<body>
    <h1>{_escape_html(title)}</h1>
    {paragraphs}
</body>
</html>"""


# --- Helpers ---


def _load_document(
    wiki: WikiStore,
    authorization: PolicyAuthorization,
    user: User | None,
    reference: DocumentReference,
) -> Document:
    doc = wiki.get_document(reference)
    if doc is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Document {reference} not found"
        )
    if not authorization.has_view_access(user, reference):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return doc


# --- SSR Endpoints ---


@router.get(
    "/{wiki_id}/view/{space}/{name}",
    response_class=HTMLResponse,
    summary="Document SSR",
    description="Server-side rendered wiki page with OpenGraph meta tags.",
)
def ssr_document(
    wiki_id: str,
    space: str,
    name: str,
    language: str = "",
    wiki: WikiStore = Depends(get_wiki),
    documents: WikiDocumentAccess = Depends(get_document_access),
    authorization: PolicyAuthorization = Depends(get_authorization),
    resolver: MetadataResolver = Depends(get_resolver),
    user: User | None = Depends(get_current_user),
) -> HTMLResponse:
    reference = DocumentReference(wiki=wiki_id, space=space, name=name)
    doc = _load_document(wiki, authorization, user, reference)

    context = RequestContext(wiki_id, user=user, doc_reference=reference, locale=language)
    metas = resolver.metas(context)

    try:
        tdoc = documents.get_translated_document(doc, context)
        title = documents.render_title(tdoc, context)
        body = documents.render_plain_content(tdoc, context)
    except RenderError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to render document {reference}: {e}",
        ) from e

    return HTMLResponse(content=render_ssr_page(title, metas, body), status_code=200)


@router.get(
    "/meta/{wiki_id}/{space}/{name}",
    summary="Get OpenGraph metadata",
    description="OpenGraph metadata of a wiki page as JSON.",
)
def get_document_metadata(
    wiki_id: str,
    space: str,
    name: str,
    language: str = "",
    wiki: WikiStore = Depends(get_wiki),
    authorization: PolicyAuthorization = Depends(get_authorization),
    resolver: MetadataResolver = Depends(get_resolver),
    user: User | None = Depends(get_current_user),
) -> dict[str, Any]:
    reference = DocumentReference(wiki=wiki_id, space=space, name=name)
    _load_document(wiki, authorization, user, reference)

    context = RequestContext(wiki_id, user=user, doc_reference=reference, locale=language)
    output = resolver.resolve(context)

    return {
        "reference": str(reference),
        "status": output.status.value,
        "metas": output.metas,
        "warnings": [w.message for w in output.warnings],
    }
