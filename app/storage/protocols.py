"""
Interfaces for the storage collaborators the access engine reads and writes.

Implementations raise ``TransientBackendFailure`` when the underlying store
cannot be reached; a uniqueness conflict on insert may be reported either by
returning ``False`` from ``insert_if_absent`` or by raising
``DuplicateRecord``.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from .models import (
    BannedOrigin,
    ContentItem,
    IpLogEntry,
    IpRegistration,
    Profile,
    RegistrationRequest,
    RoleTag,
)


class RoleStore(Protocol):
    """Role-assignment rows: ``(principal_id, role_tag)``."""

    def roles_for(self, principal_id: str) -> List[RoleTag]:
        """Return every role tag held by the principal."""

    def all_privileged(self) -> Dict[str, List[RoleTag]]:
        """Return role tags for all privileged principals at once."""

    def grant(self, principal_id: str, tag: RoleTag) -> bool:
        """Add a role row; ``False`` if it already existed."""

    def revoke(self, principal_id: str, tag: RoleTag) -> bool:
        """Remove a role row; ``False`` if it was absent."""

    def delete_principal(self, principal_id: str) -> None:
        """Remove every role row of the principal."""


class ProfileStore(Protocol):
    """Profile rows keyed by principal id."""

    def get(self, principal_id: str) -> Optional[Profile]:
        """Return the profile or ``None``."""

    def save(self, profile: Profile) -> None:
        """Insert or replace a profile."""

    def delete(self, principal_id: str) -> bool:
        """Delete a profile; ``False`` if it was absent."""


class BannedOriginStore(Protocol):
    """Denylisted origins with exact-match lookup."""

    def find(self, origin: str) -> Optional[BannedOrigin]:
        """Exact-match lookup."""

    def list_all(self) -> List[BannedOrigin]:
        """All bans, newest first."""

    def insert(self, ban: BannedOrigin) -> bool:
        """Insert a ban; ``False`` if the origin is already banned."""

    def delete(self, origin: str) -> bool:
        """Remove a ban; ``False`` if it was absent."""


class ViewRecordStore(Protocol):
    """Day-scoped view records, unique per ``(principal, item, day)``."""

    def insert_if_absent(self, principal_id: str, item_id: str, day: str) -> bool:
        """Insert a record; ``False`` if the tuple already existed."""

    def list_item_ids(self, principal_id: str, day: str) -> List[str]:
        """Item ids recorded for the principal on the day."""

    def count(self, principal_id: str, day: str) -> int:
        """Number of records for the principal on the day."""

    def delete_principal(self, principal_id: str) -> None:
        """Remove every record of the principal."""

    def prune_before(self, day: str) -> int:
        """Remove records older than ``day``; return how many were removed."""


class ContentStore(Protocol):
    """Read access to articles, plus deletion for moderators."""

    def list_published_ids(self) -> List[str]:
        """Ids of every published article."""

    def get(self, item_id: str) -> Optional[ContentItem]:
        """Return the article or ``None``."""

    def delete(self, item_id: str) -> bool:
        """Delete the article; ``False`` if it was absent."""

    def delete_by_author(self, author_id: str) -> int:
        """Delete every article of an author; return how many were removed."""


class GuestAllowanceStore(Protocol):
    """Client-local slot holding one day's guest allowance."""

    def get(self, day_key: str) -> Optional[List[str]]:
        """Stored ids for ``day_key``; ``None`` if absent or for another day."""

    def set(self, day_key: str, ids: List[str]) -> None:
        """Replace the stored allowance."""


class RegistrationStore(Protocol):
    """Editor registration requests, latest request per principal."""

    def latest(self, principal_id: str) -> Optional[RegistrationRequest]:
        """Most recent request of the principal."""

    def list_pending(self) -> List[RegistrationRequest]:
        """Requests still awaiting review, oldest first."""

    def save(self, request: RegistrationRequest) -> None:
        """Insert or replace the principal's latest request."""

    def delete_principal(self, principal_id: str) -> None:
        """Remove every request of the principal."""


class IpLogStore(Protocol):
    """Origins observed for principal actions."""

    def append(self, entry: IpLogEntry) -> None:
        """Append one entry."""

    def list_for(self, principal_id: str) -> List[IpLogEntry]:
        """Entries of the principal, newest first."""

    def delete_principal(self, principal_id: str) -> None:
        """Remove every entry of the principal."""


class IpRegistrationStore(Protocol):
    """One registering principal per network origin."""

    def find(self, origin: str) -> Optional[IpRegistration]:
        """Exact-match lookup."""

    def claim(self, registration: IpRegistration) -> bool:
        """Record the origin for the principal; ``False`` if another principal holds it."""

    def delete_principal(self, principal_id: str) -> None:
        """Release every origin held by the principal."""
