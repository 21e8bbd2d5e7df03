"""
OpenGraph component - og:* metadata of wiki pages.
"""

from ._impl import (
    OG_DESCRIPTION_PROPERTY,
    OG_IMAGE_PROPERTY,
    OG_TITLE_PROPERTY,
    OG_TYPE_PROPERTY,
    OG_URL_PROPERTY,
    MetadataResolver,
    abbreviate,
    create_metadata_resolver,
    hold_marker,
    normalize_property,
    render_meta_tags,
)
from .component import run
from .models import (
    MetadataMap,
    MetaTag,
    OpenGraphValidationError,
    PropertyRecord,
    ResolutionContext,
    ResolveMetasInput,
    ResolveMetasOutput,
    ResolveStatus,
    StepOutcome,
    StepResult,
)
from .ports import (
    AnnotationStorePort,
    AuthorizationPort,
    DocumentAccessPort,
    DocumentNotFoundError,
    OpenGraphHostError,
    RenderError,
    RequestContextPort,
    WikiDescriptorPort,
    WikiLookupError,
)

__all__ = [
    # Entry points
    "run",
    # Resolver
    "MetadataResolver",
    "create_metadata_resolver",
    "normalize_property",
    "abbreviate",
    "hold_marker",
    "render_meta_tags",
    "OG_URL_PROPERTY",
    "OG_TYPE_PROPERTY",
    "OG_TITLE_PROPERTY",
    "OG_DESCRIPTION_PROPERTY",
    "OG_IMAGE_PROPERTY",
    # Models
    "MetadataMap",
    "MetaTag",
    "OpenGraphValidationError",
    "PropertyRecord",
    "ResolutionContext",
    "ResolveMetasInput",
    "ResolveMetasOutput",
    "ResolveStatus",
    "StepOutcome",
    "StepResult",
    # Ports
    "AnnotationStorePort",
    "AuthorizationPort",
    "DocumentAccessPort",
    "RequestContextPort",
    "WikiDescriptorPort",
    # Host errors
    "OpenGraphHostError",
    "DocumentNotFoundError",
    "RenderError",
    "WikiLookupError",
]
