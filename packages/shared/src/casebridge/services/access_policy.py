"""Who may read or change a case, quote, payment or file.

Every function here is pure: it looks only at records that the caller
already loaded and never touches the database. Roles are matched against
``UserRole`` members, so callers never branch on role strings.
"""

from typing import Iterable

from casebridge.models import Case, CaseFile, Payment, Quote, QuoteStatus, User, UserRole

ANONYMOUS_CLIENT_NAME = "Anonymous Client"
ANONYMOUS_CLIENT_EMAIL = "anonymous@example.com"


def _is_owner(case: Case, actor: User) -> bool:
    return actor.role is UserRole.CLIENT and case.client_id == actor.id


def has_accepted_quote(quotes: Iterable[Quote], lawyer_id: str) -> bool:
    """True if ``lawyer_id`` holds the accepted quote among ``quotes``."""
    return any(
        quote.lawyer_id == lawyer_id and quote.status is QuoteStatus.ACCEPTED
        for quote in quotes
    )


def can_view_case(case: Case, actor: User) -> bool:
    # Lawyers may open any case; anonymization protects the client.
    if actor.role is UserRole.LAWYER:
        return True
    return _is_owner(case, actor)


def can_mutate_case(case: Case, actor: User) -> bool:
    return _is_owner(case, actor)


def can_accept_quote(case: Case, actor: User) -> bool:
    return _is_owner(case, actor)


def should_anonymize_client(case: Case, actor: User, quotes: Iterable[Quote]) -> bool:
    """True when client name and email must be masked for ``actor``."""
    if actor.role is not UserRole.LAWYER:
        return False
    return not has_accepted_quote(quotes, actor.id)


def can_access_file(case_file: CaseFile, case: Case, actor: User, quotes: Iterable[Quote]) -> bool:
    if case_file.case_id != case.id:
        return False
    if actor.role is UserRole.CLIENT:
        return _is_owner(case, actor)
    if actor.role is UserRole.LAWYER:
        return has_accepted_quote(quotes, actor.id)
    return False


def can_mutate_quote(quote: Quote, actor: User) -> bool:
    return actor.role is UserRole.LAWYER and quote.lawyer_id == actor.id


def can_view_payment(payment: Payment, actor: User) -> bool:
    return actor.id in (payment.client_id, payment.lawyer_id)


__all__ = [
    "ANONYMOUS_CLIENT_NAME",
    "ANONYMOUS_CLIENT_EMAIL",
    "has_accepted_quote",
    "can_view_case",
    "can_mutate_case",
    "can_accept_quote",
    "should_anonymize_client",
    "can_access_file",
    "can_mutate_quote",
    "can_view_payment",
]
