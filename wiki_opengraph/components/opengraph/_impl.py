"""
MetadataResolver - OpenGraph metadata of the document being rendered.

Key behaviors:
- Reads the OpenGraph annotations attached to the current document
- Normalizes property names to the ``og:`` namespace
- Completes og:url, og:type, og:title, og:description and og:image when
  no annotation provides them
- Never raises: every failure resolves to an empty map

Rendering the description renders the document content, and that content
may itself ask for the document metadata. A marker stored in the request
context turns such nested calls into no-ops.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from wiki_opengraph.rules.models import OpenGraphRules

from .models import (
    MetadataMap,
    MetaTag,
    OpenGraphValidationError,
    PropertyRecord,
    ResolutionContext,
    ResolveMetasOutput,
    ResolveStatus,
    StepOutcome,
    StepResult,
)
from .ports import (
    AnnotationStorePort,
    AuthorizationPort,
    DocumentAccessPort,
    RenderError,
    RequestContextPort,
    WikiDescriptorPort,
    WikiLookupError,
)

logger = logging.getLogger(__name__)

OG_URL_PROPERTY = "og:url"
OG_TYPE_PROPERTY = "og:type"
OG_TITLE_PROPERTY = "og:title"
OG_DESCRIPTION_PROPERTY = "og:description"
OG_IMAGE_PROPERTY = "og:image"


# --- Text Helpers ---


def normalize_property(property: str | None, prefix: str = "og:") -> str | None:
    """
    Add the prefix to a property name when missing.

    Returns None for an empty or absent name.
    """
    if not property:
        return None
    if property.startswith(prefix):
        return property
    return f"{prefix}{property}"


def abbreviate(text: str, max_length: int, marker: str = "...") -> str:
    """
    Abbreviate text to at most max_length characters, marker included.

    Text that already fits is returned unchanged.
    """
    if max_length < len(marker) + 1:
        raise ValueError(f"max_length must be at least {len(marker) + 1}")
    if len(text) <= max_length:
        return text
    return text[: max_length - len(marker)] + marker


@contextmanager
def hold_marker(context: RequestContextPort, key: str) -> Iterator[None]:
    """Keep key set in the request context for the duration of the block."""
    context.put(key, key)
    try:
        yield
    finally:
        context.put(key, None)


# --- Resolver ---


class MetadataResolver:
    """Computes the OpenGraph properties of the current document."""

    def __init__(
        self,
        documents: DocumentAccessPort,
        annotations: AnnotationStorePort,
        wikis: WikiDescriptorPort,
        authorization: AuthorizationPort,
        rules: OpenGraphRules | None = None,
    ) -> None:
        self._documents = documents
        self._annotations = annotations
        self._wikis = wikis
        self._authorization = authorization
        self._rules = rules or OpenGraphRules()

    @property
    def rules(self) -> OpenGraphRules:
        return self._rules

    def metas(self, context: RequestContextPort) -> MetadataMap:
        """Map of OpenGraph properties to their contents, empty on failure."""
        return self.resolve(context).metas

    def resolve(self, context: RequestContextPort) -> ResolveMetasOutput:
        key = self._rules.context_key
        if context.get(key) is not None:
            return ResolveMetasOutput(metas={}, status=ResolveStatus.REENTRANT)

        doc = None
        try:
            doc = self._documents.get_current_document(context)
            if not self._authorization.has_view_access(context.user, doc.reference):
                return ResolveMetasOutput(metas={}, status=ResolveStatus.DENIED)

            with hold_marker(context, key):
                return self._merge(context, doc)
        except Exception as e:  # noqa: BLE001
            logger.exception(
                "Failed to resolve the Open Graph metadata of [%s]",
                getattr(doc, "reference", None),
            )
            return self._failed(f"Unexpected failure: {e}")

    # --- Merge ---

    def _merge(self, context: RequestContextPort, doc: Any) -> ResolveMetasOutput:
        tdoc = self._load_translated_document(context, doc)
        if tdoc.outcome is StepOutcome.ABORT:
            return self._abort(doc, tdoc)

        wiki = self._load_wiki_descriptor(context)
        if wiki.outcome is StepOutcome.ABORT:
            return self._abort(doc, wiki)

        resolution = ResolutionContext(page=doc, translated=tdoc.value, wiki=wiki.value)

        metas: MetadataMap = {}
        warnings: list[OpenGraphValidationError] = []
        for position, record in enumerate(self._annotations.get_annotations(doc)):
            step = self._read_record(record)
            if step.outcome is StepOutcome.SKIP:
                logger.debug(
                    "Skipping annotation #%d of [%s]: %s", position, doc.reference, step.reason
                )
                warnings.append(
                    OpenGraphValidationError(
                        code="invalid_property",
                        message=f"Annotation #{position}: {step.reason}",
                        field="property",
                    )
                )
                continue
            prop, content = step.value  # type: ignore[misc]
            metas.setdefault(prop, []).append(content)

        completed = self._complete(context, resolution, metas)
        if completed.outcome is StepOutcome.ABORT:
            return self._abort(doc, completed)

        return ResolveMetasOutput(metas=metas, warnings=warnings)

    def _read_record(self, record: PropertyRecord) -> StepResult[tuple[str, str]]:
        prop = normalize_property(record.property)
        if prop is None:
            return StepResult.skip("empty property name")
        return StepResult.ok((prop, record.content or ""))

    def _complete(
        self,
        context: RequestContextPort,
        resolution: ResolutionContext,
        metas: MetadataMap,
    ) -> StepResult[MetadataMap]:
        """Fill the default properties the annotations left out."""
        doc, tdoc = resolution.page, resolution.translated

        if OG_URL_PROPERTY not in metas:
            metas[OG_URL_PROPERTY] = [self._documents.get_view_url(doc, context)]
        if OG_TYPE_PROPERTY not in metas:
            metas[OG_TYPE_PROPERTY] = [self._rules.default_type]
        if OG_TITLE_PROPERTY not in metas:
            metas[OG_TITLE_PROPERTY] = [self._documents.render_title(tdoc, context)]

        if OG_DESCRIPTION_PROPERTY not in metas:
            description = self._describe(context, doc, tdoc)
            if description.outcome is StepOutcome.ABORT:
                return StepResult.abort(description.reason, description.cause)
            metas[OG_DESCRIPTION_PROPERTY] = [description.value or ""]

        # The main page of a wiki gets no images.
        if OG_IMAGE_PROPERTY not in metas and resolution.wiki.main_page_reference != doc.reference:
            images = [
                self._documents.get_attachment_url(doc, attachment.filename, context)
                for attachment in self._documents.list_attachments(doc)
                if self._documents.is_image(attachment, context)
            ]
            if images:
                metas[OG_IMAGE_PROPERTY] = images

        return StepResult.ok(metas)

    def _describe(self, context: RequestContextPort, doc: Any, tdoc: Any) -> StepResult[str]:
        try:
            text = self._documents.render_plain_content(tdoc, context)
        except RenderError as e:
            return StepResult.abort(
                f"Failed to render the content of document [{doc.reference}]", e
            )
        description = self._rules.description
        return StepResult.ok(
            abbreviate((text or "").strip(), description.max_length, description.abbrev_marker)
        )

    # --- Loading ---

    def _load_translated_document(self, context: RequestContextPort, doc: Any) -> StepResult[Any]:
        try:
            return StepResult.ok(self._documents.get_translated_document(doc, context))
        except RenderError as e:
            return StepResult.abort(
                f"Failed to get the translated document for [{doc.reference}]", e
            )

    def _load_wiki_descriptor(self, context: RequestContextPort) -> StepResult[Any]:
        try:
            return StepResult.ok(self._wikis.get_by_id(context.wiki_id))
        except WikiLookupError as e:
            return StepResult.abort(
                f"Failed to load the wiki descriptor for wiki [{context.wiki_id}]", e
            )

    # --- Failures ---

    def _abort(self, doc: Any, step: StepResult[Any]) -> ResolveMetasOutput:
        logger.error(
            "Open Graph metadata of [%s] unavailable: %s (%s)",
            doc.reference,
            step.reason,
            step.cause,
            exc_info=step.cause,
        )
        return self._failed(step.reason)

    @staticmethod
    def _failed(message: str) -> ResolveMetasOutput:
        return ResolveMetasOutput(
            metas={},
            status=ResolveStatus.FAILED,
            errors=[OpenGraphValidationError(code="resolution_failed", message=message)],
        )


# --- Serialization ---


def render_meta_tags(metas: MetadataMap) -> list[MetaTag]:
    """One tag per (property, content) pair, keys in map order."""
    return [
        MetaTag(property=prop, content=content)
        for prop, contents in metas.items()
        for content in contents
    ]


def create_metadata_resolver(
    documents: DocumentAccessPort,
    annotations: AnnotationStorePort,
    wikis: WikiDescriptorPort,
    authorization: AuthorizationPort,
    rules: OpenGraphRules | None = None,
) -> MetadataResolver:
    """
    Create a metadata resolver.

    Args:
        documents: Document loading, rendering and URLs
        annotations: OpenGraph annotation store
        wikis: Wiki descriptor lookup
        authorization: View rights check
        rules: OpenGraph rules (defaults when omitted)

    Returns:
        Configured MetadataResolver
    """
    return MetadataResolver(documents, annotations, wikis, authorization, rules)
