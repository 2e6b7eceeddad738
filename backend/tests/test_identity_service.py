import pytest

from chat_identity.models import Account
from chat_identity.services.identity_service import (
    IdentifierKind,
    IdentityResolver,
    classify_identifier,
    resolve_identifier,
)
from chat_identity.utils.errors import InvalidError, NotFoundError


@pytest.fixture
def resolver(db):
    return IdentityResolver(db)


@pytest.fixture
def accounts(db):
    by_email = Account(email="ann@example.org", full_name="Ann", password_hash="x")
    by_phone = Account(phone_number="+15550001234", full_name="Bob", profile_picture="bob.png")
    db.add_all([by_email, by_phone])
    db.commit()
    return by_email, by_phone


class TestClassification:

    @pytest.mark.parametrize("raw", ["ann@example.org", "@", "a@b", "x@y@z"])
    def test_at_sign_means_email(self, raw):
        assert classify_identifier(raw) is IdentifierKind.EMAIL

    @pytest.mark.parametrize("raw", ["+15550001234", "0300-1234567", "not an email"])
    def test_everything_else_is_phone(self, raw):
        assert classify_identifier(raw) is IdentifierKind.PHONE

    def test_resolve_trims(self):
        identifier = resolve_identifier("  ann@example.org \n")
        assert identifier.kind is IdentifierKind.EMAIL
        assert identifier.value == "ann@example.org"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_identifier_rejected(self, raw):
        with pytest.raises(InvalidError):
            resolve_identifier(raw)


class TestLookup:

    def test_find_by_identifier_routes_on_kind(self, resolver, accounts):
        by_email, by_phone = accounts
        assert resolver.find_by_identifier("ann@example.org").id == by_email.id
        assert resolver.find_by_identifier(" +15550001234 ").id == by_phone.id

    def test_email_lookup_never_matches_phone_column(self, resolver, accounts):
        with pytest.raises(NotFoundError):
            resolver.find_by_email("+15550001234")

    def test_unknown_identifiers(self, resolver, accounts):
        with pytest.raises(NotFoundError):
            resolver.find_by_identifier("nobody@example.org")
        with pytest.raises(NotFoundError):
            resolver.find_by_identifier("+19999999999")
        assert resolver.get_by_phone("+19999999999") is None

    def test_find_by_id(self, resolver, accounts):
        by_email, _ = accounts
        assert resolver.find_by_id(by_email.id).email == "ann@example.org"
        with pytest.raises(NotFoundError):
            resolver.find_by_id("missing")

    def test_profile_completeness(self, resolver, accounts):
        by_email, by_phone = accounts
        assert resolver.is_profile_complete(by_email) is False
        assert resolver.is_profile_complete(by_phone) is True
