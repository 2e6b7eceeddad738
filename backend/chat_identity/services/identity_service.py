"""
Identity Resolver
Classifies raw identifiers and maps them to Account records
"""

import enum
from typing import NamedTuple, Optional

from sqlalchemy.orm import Session

from ..models.account import Account
from ..utils.errors import InvalidError, NotFoundError


class IdentifierKind(str, enum.Enum):
    EMAIL = "email"
    PHONE = "phone"


class Identifier(NamedTuple):
    kind: IdentifierKind
    value: str


def classify_identifier(raw: str) -> IdentifierKind:
    """A string containing '@' is an email, anything else is a phone number."""
    return IdentifierKind.EMAIL if "@" in raw else IdentifierKind.PHONE


def resolve_identifier(raw: Optional[str]) -> Identifier:
    """Return the canonical (trimmed) identifier and its kind."""
    value = (raw or "").strip()
    if not value:
        raise InvalidError("Identifier is required")
    return Identifier(classify_identifier(value), value)


def is_profile_complete(account: Account) -> bool:
    return bool(account.full_name) and bool(account.profile_picture)


class IdentityResolver:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Account:
        account = self.db.query(Account).filter(Account.email == email).first()
        if not account:
            raise NotFoundError(f"No account found for email {email}")
        return account

    def find_by_phone(self, phone_number: str) -> Account:
        account = self.get_by_phone(phone_number)
        if not account:
            raise NotFoundError(f"No account found for phone number {phone_number}")
        return account

    def get_by_phone(self, phone_number: str) -> Optional[Account]:
        return self.db.query(Account).filter(Account.phone_number == phone_number).first()

    def find_by_id(self, account_id: str) -> Account:
        account = self.db.query(Account).filter(Account.id == account_id).first()
        if not account:
            raise NotFoundError(f"Account not found with id {account_id}")
        return account

    def find_by_identifier(self, raw: str) -> Account:
        identifier = resolve_identifier(raw)
        if identifier.kind is IdentifierKind.EMAIL:
            return self.find_by_email(identifier.value)
        return self.find_by_phone(identifier.value)

    def is_profile_complete(self, account: Account) -> bool:
        return is_profile_complete(account)
