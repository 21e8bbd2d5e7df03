"""
OpenGraph component - metadata of the document being rendered.

Shell Layer - wires host ports into the resolver.
"""

from __future__ import annotations

from wiki_opengraph.rules.models import OpenGraphRules

from ._impl import MetadataResolver
from .models import ResolveMetasInput, ResolveMetasOutput
from .ports import (
    AnnotationStorePort,
    AuthorizationPort,
    DocumentAccessPort,
    WikiDescriptorPort,
)


def run(
    inp: ResolveMetasInput,
    *,
    documents: DocumentAccessPort,
    annotations: AnnotationStorePort,
    wikis: WikiDescriptorPort,
    authorization: AuthorizationPort,
    rules: OpenGraphRules | None = None,
) -> ResolveMetasOutput:
    """
    Main entry point for the OpenGraph component.

    Args:
        inp: Input carrying the request context of the page render.
        documents: Document loading, rendering and URLs.
        annotations: OpenGraph annotation store.
        wikis: Wiki descriptor lookup.
        authorization: View rights check.
        rules: Optional OpenGraph rules.

    Returns:
        ResolveMetasOutput; metas is empty unless the resolution succeeded.
    """
    resolver = MetadataResolver(documents, annotations, wikis, authorization, rules)
    return resolver.resolve(inp.context)

