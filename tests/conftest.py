from pathlib import Path
from uuid import uuid4

import pytest

from wiki_opengraph.adapters.host import PolicyAuthorization, WikiDocumentAccess
from wiki_opengraph.adapters.memory import InMemoryAnnotationStore, InMemoryWiki
from wiki_opengraph.components.opengraph import MetadataResolver
from wiki_opengraph.domain.entities import (
    Attachment,
    Document,
    DocumentReference,
    User,
    WikiDescriptor,
)
from wiki_opengraph.domain.policy import PolicyEngine
from wiki_opengraph.rules.loader import load_rules
from wiki_opengraph.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent
BASE_URL = "https://wiki.example.com"

MAIN_PAGE = DocumentReference(wiki="xwiki", space="Main", name="WebHome")
GUIDE_PAGE = DocumentReference(wiki="xwiki", space="Docs", name="Guide")


@pytest.fixture
def rules() -> Rules:
    """The rules file shipped at the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def wiki() -> InMemoryWiki:
    """
    A wiki with a main page and a guide page, both carrying two images
    and a PDF.
    """
    wiki = InMemoryWiki()
    wiki.save_wiki(WikiDescriptor(id="xwiki", pretty_name="Home", main_page_reference=MAIN_PAGE))

    attachments = [
        Attachment(filename="cover.png", mime_type="image/png"),
        Attachment(filename="manual.pdf", mime_type="application/pdf"),
        Attachment(filename="diagram one.jpg", mime_type="image/jpeg"),
    ]
    wiki.save_document(
        Document(
            reference=MAIN_PAGE,
            title="Welcome",
            content="= Welcome =\n\nThe **home** of the wiki.",
            attachments=attachments,
        )
    )
    wiki.save_document(
        Document(
            reference=GUIDE_PAGE,
            title="User Guide",
            content="= Guide =\n\nHow to use [[the wiki>>Main.WebHome]].",
            attachments=attachments,
            translations={
                "fr": Document(
                    reference=GUIDE_PAGE,
                    locale="fr",
                    title="Guide utilisateur",
                    content="Comment utiliser le wiki.",
                )
            },
        )
    )
    return wiki


@pytest.fixture
def documents(wiki: InMemoryWiki) -> WikiDocumentAccess:
    return WikiDocumentAccess(wiki, base_url=BASE_URL)


@pytest.fixture
def resolver(
    wiki: InMemoryWiki, documents: WikiDocumentAccess, rules: Rules
) -> MetadataResolver:
    return MetadataResolver(
        documents,
        InMemoryAnnotationStore(),
        wiki,
        PolicyAuthorization(PolicyEngine(rules), wiki),
        rules.opengraph,
    )


@pytest.fixture
def owner() -> User:
    return User(id=uuid4(), username="owner", display_name="Owner")
