import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, Request

from wiki_opengraph.adapters.host import PolicyAuthorization, WikiDocumentAccess, WikiStore
from wiki_opengraph.adapters.render.plain_text import PlainTextRenderer
from wiki_opengraph.adapters.sqlite.repos import SQLiteAnnotationStore, SQLiteWikiStore
from wiki_opengraph.components.opengraph import (
    AnnotationStorePort,
    MetadataResolver,
    create_metadata_resolver,
)
from wiki_opengraph.domain.entities import User
from wiki_opengraph.domain.policy import PolicyEngine
from wiki_opengraph.rules.loader import load_rules
from wiki_opengraph.rules.models import Rules

OPENGRAPH_MACRO = "opengraph"


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("OG_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "opengraph.db")
        self.base_url = os.environ.get("OG_BASE_URL") or None
        self.rules_path = Path(os.environ.get("OG_RULES_PATH", str(self.base_dir / "rules.yaml")))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules(path: Path) -> Rules:
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules(settings.rules_path)


# --- Host ---
def get_wiki(settings: Settings = Depends(get_settings)) -> WikiStore:
    return SQLiteWikiStore(settings.db_path)


def get_annotation_store(settings: Settings = Depends(get_settings)) -> AnnotationStorePort:
    return SQLiteAnnotationStore(settings.db_path, renderer=PlainTextRenderer())


def get_document_access(
    request: Request,
    settings: Settings = Depends(get_settings),
    wiki: WikiStore = Depends(get_wiki),
) -> WikiDocumentAccess:
    base_url = settings.base_url or str(request.base_url)
    return WikiDocumentAccess(wiki, base_url=base_url)


def get_authorization(
    wiki: WikiStore = Depends(get_wiki),
    rules: Rules = Depends(get_rules),
) -> PolicyAuthorization:
    return PolicyAuthorization(PolicyEngine(rules), wiki)


def get_current_user() -> User | None:
    """Requests are anonymous unless an auth layer overrides this dependency."""
    return None


def get_resolver(
    documents: WikiDocumentAccess = Depends(get_document_access),
    annotations: AnnotationStorePort = Depends(get_annotation_store),
    wiki: WikiStore = Depends(get_wiki),
    authorization: PolicyAuthorization = Depends(get_authorization),
    rules: Rules = Depends(get_rules),
) -> MetadataResolver:
    resolver = create_metadata_resolver(
        documents, annotations, wiki, authorization, rules.opengraph
    )
    # Pages may embed their own metadata with {{opengraph/}}.
    documents.renderer.register_macro(
        OPENGRAPH_MACRO,
        lambda context: "\n".join(
            f"{prop}: {content}"
            for prop, contents in resolver.metas(context).items()
            for content in contents
        ),
    )
    return resolver
