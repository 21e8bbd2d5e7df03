"""
Tests for the public SSR routes.

Pages are served with their OpenGraph tags in <head>; the JSON endpoint
exposes the same metadata with the resolution status.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.conftest import BASE_URL, GUIDE_PAGE
from wiki_opengraph.adapters.memory import InMemoryAnnotationStore, InMemoryWiki
from wiki_opengraph.api.deps import (
    Settings,
    get_annotation_store,
    get_current_user,
    get_rules,
    get_settings,
    get_wiki,
)
from wiki_opengraph.api.routes.public_ssr import (
    _escape_html,
    render_meta_tags_html,
    render_ssr_page,
    router,
)
from wiki_opengraph.domain.entities import Document, OpenGraphMetaObject, User
from wiki_opengraph.rules.models import Rules

# --- Fixtures ---


@pytest.fixture
def settings(tmp_path) -> Settings:
    settings = Settings()
    settings.data_dir = tmp_path
    settings.db_path = str(tmp_path / "opengraph.db")
    settings.base_url = BASE_URL
    return settings


@pytest.fixture
def app(wiki: InMemoryWiki, rules: Rules, settings: Settings) -> FastAPI:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_wiki] = lambda: wiki
    app.dependency_overrides[get_annotation_store] = lambda: InMemoryAnnotationStore()
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


# --- HTML Helpers ---


class TestHtmlHelpers:
    def test_escape_html(self) -> None:
        assert _escape_html('<a href="x">&\'') == "&lt;a href=&quot;x&quot;&gt;&amp;&#x27;"

    def test_meta_tags_html(self) -> None:
        html = render_meta_tags_html({"og:title": ["A & B"], "og:image": ["1.png", "2.png"]})

        assert '<meta property="og:title" content="A &amp; B" />' in html
        assert html.count('property="og:image"') == 2

    def test_page_without_metadata(self) -> None:
        page = render_ssr_page("Title", {}, "First\n\nSecond")

        assert "<meta property=" not in page
        assert "<title>Title</title>" in page
        assert "<p>First</p>" in page
        assert "<p>Second</p>" in page


# --- SSR Page ---


class TestSsrDocument:
    def test_page_carries_opengraph_tags(self, client: TestClient) -> None:
        response = client.get("/xwiki/view/Docs/Guide")

        assert response.status_code == 200
        html = response.text
        assert f'<meta property="og:url" content="{BASE_URL}/xwiki/view/Docs/Guide" />' in html
        assert '<meta property="og:type" content="article" />' in html
        assert '<meta property="og:title" content="User Guide" />' in html
        assert (
            f'<meta property="og:image" content="{BASE_URL}/xwiki/download/Docs/Guide/cover.png" />'
            in html
        )
        assert "<h1>User Guide</h1>" in html

    def test_main_page_without_image(self, client: TestClient) -> None:
        response = client.get("/xwiki/view/Main/WebHome")

        assert response.status_code == 200
        assert 'property="og:image"' not in response.text

    def test_language_parameter(self, client: TestClient) -> None:
        response = client.get("/xwiki/view/Docs/Guide", params={"language": "fr"})

        assert response.status_code == 200
        assert '<meta property="og:title" content="Guide utilisateur" />' in response.text

    def test_unknown_document(self, client: TestClient) -> None:
        response = client.get("/xwiki/view/Nope/Nope")

        assert response.status_code == 404

    def test_private_document_forbidden_for_guest(
        self, client: TestClient, wiki: InMemoryWiki
    ) -> None:
        doc = wiki.get_document(GUIDE_PAGE)
        wiki.save_document(doc.model_copy(update={"visibility": "private"}))

        response = client.get("/xwiki/view/Docs/Guide")

        assert response.status_code == 403

    def test_private_document_visible_to_owner(
        self, app: FastAPI, client: TestClient, wiki: InMemoryWiki, owner: User
    ) -> None:
        doc = wiki.get_document(GUIDE_PAGE)
        wiki.save_document(
            doc.model_copy(update={"visibility": "private", "owner_user_id": owner.id})
        )
        app.dependency_overrides[get_current_user] = lambda: owner

        response = client.get("/xwiki/view/Docs/Guide")

        assert response.status_code == 200
        assert '<meta property="og:title" content="User Guide" />' in response.text

    def test_opengraph_macro_in_content(self, client: TestClient, wiki: InMemoryWiki) -> None:
        wiki.save_document(
            Document(
                reference=GUIDE_PAGE,
                title="Embedded",
                content="Metadata:\n\n{{opengraph/}}",
                objects=[OpenGraphMetaObject(property="site_name", content="Docs")],
            )
        )

        response = client.get("/xwiki/view/Docs/Guide")

        assert response.status_code == 200
        # The body lists the metadata once; the nested call made while
        # computing og:description contributes nothing.
        assert "<p>og:site_name: Docs" in response.text
        assert '<meta property="og:description" content="Metadata:" />' in response.text

    def test_unknown_macro_is_server_error(self, client: TestClient, wiki: InMemoryWiki) -> None:
        wiki.save_document(Document(reference=GUIDE_PAGE, title="Broken", content="{{nope/}}"))

        response = client.get("/xwiki/view/Docs/Guide")

        assert response.status_code == 500


# --- JSON Metadata ---


class TestMetadataEndpoint:
    def test_metadata_json(self, client: TestClient) -> None:
        response = client.get("/meta/xwiki/Docs/Guide")

        assert response.status_code == 200
        data = response.json()
        assert data["reference"] == "xwiki:Docs.Guide"
        assert data["status"] == "resolved"
        assert data["metas"]["og:title"] == ["User Guide"]
        assert len(data["metas"]["og:image"]) == 2
        assert data["warnings"] == []

    def test_failed_resolution_reported(self, client: TestClient, wiki: InMemoryWiki) -> None:
        wiki.save_document(Document(reference=GUIDE_PAGE, title="Broken", content="{{nope/}}"))

        response = client.get("/meta/xwiki/Docs/Guide")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["metas"] == {}

    def test_invalid_annotation_warning(self, client: TestClient, wiki: InMemoryWiki) -> None:
        doc = wiki.get_document(GUIDE_PAGE)
        wiki.save_document(
            doc.model_copy(update={"objects": [OpenGraphMetaObject(property=None, content="x")]})
        )

        data = client.get("/meta/xwiki/Docs/Guide").json()

        assert data["status"] == "resolved"
        assert len(data["warnings"]) == 1
