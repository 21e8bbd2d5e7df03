from uuid import uuid4

import pytest

from wiki_opengraph.domain.entities import Document, DocumentReference, User
from wiki_opengraph.domain.policy import PolicyEngine
from wiki_opengraph.rules.models import Rules

REFERENCE = DocumentReference(wiki="xwiki", space="Space", name="Doc")


@pytest.fixture
def engine(rules: Rules) -> PolicyEngine:
    return PolicyEngine(rules)


def _page(visibility: str = "public", owner=None) -> Document:
    return Document(reference=REFERENCE, title="Doc", visibility=visibility, owner_user_id=owner)


def test_guest_can_view_public_page(engine):
    assert engine.can_view(None, _page()) is True


def test_guest_cannot_view_private_page(engine):
    assert engine.can_view(None, _page("private")) is False


def test_user_without_role_cannot_view_private_page(engine):
    user = User(username="nobody")
    assert engine.can_view(user, _page("private")) is False


def test_viewer_can_view_private_page(engine):
    user = User(username="viewer", roles=["viewer"])
    assert engine.can_view(user, _page("private")) is True


def test_scoped_wildcard(engine):
    # editor has "page:*"
    user = User(username="editor", roles=["editor"])
    assert engine.check_permission(user, user.roles, "page:edit", _page("private")) is True
    assert engine.check_permission(user, user.roles, "wiki:admin") is False


def test_admin_global_wildcard(engine):
    user = User(username="admin", roles=["admin"])
    assert engine.check_permission(user, user.roles, "anything:really") is True


def test_owner_can_view_private_page(engine):
    owner_id = uuid4()
    user = User(id=owner_id, username="owner")
    assert engine.can_view(user, _page("private", owner=owner_id)) is True


def test_owner_mismatch_denied(engine):
    user = User(id=uuid4(), username="other")
    assert engine.can_view(user, _page("private", owner=uuid4())) is False


def test_disabled_user_denied(engine):
    user = User(username="gone", roles=["admin"], status="disabled")
    assert engine.can_view(user, _page("private")) is False
    # Public pages stay public
    assert engine.can_view(user, _page()) is True
