"""
JSON-file implementations of the storage collaborators.

Each table lives in its own file inside the data directory. Every
read-modify-write happens under the table lock, so concurrent requests in
one process never lose updates and duplicate inserts collapse into no-ops.
"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Iterator, List, Optional

from app.errors import TransientBackendFailure

from .models import (
    BannedOrigin,
    ContentItem,
    IpLogEntry,
    IpRegistration,
    Profile,
    RegistrationRequest,
    RoleTag,
    ApprovalStatus,
)

logger = logging.getLogger(__name__)

_ROLE_VALUES = {tag.value for tag in RoleTag}


class JsonTable:
    """A single JSON document guarded by a lock."""

    def __init__(self, path: Path, empty: Callable[[], Any] = dict):
        self.path = path
        self._empty = empty
        self._lock = RLock()

        if not self.path.exists():
            self.write(self._empty())

    def read(self) -> Any:
        """Load the document, raising ``TransientBackendFailure`` on error."""
        with self._lock:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except FileNotFoundError:
                return self._empty()
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Error loading {self.path.name}: {e}")
                raise TransientBackendFailure() from e

    def write(self, data: Any) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                tmp_path.replace(self.path)
            except OSError as e:
                logger.error(f"Error saving {self.path.name}: {e}")
                raise TransientBackendFailure() from e

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Yield the document for mutation and save it afterwards."""
        with self._lock:
            data = self.read()
            yield data
            self.write(data)


class JsonRoleStore:
    """``roles.json``: ``{principal_id: ["admin" | "second_admin", ...]}``."""

    def __init__(self, data_dir: Path):
        self.table = JsonTable(data_dir / "roles.json")

    def roles_for(self, principal_id: str) -> List[RoleTag]:
        tags = self.table.read().get(principal_id, [])
        return [RoleTag(tag) for tag in tags if tag in _ROLE_VALUES]

    def all_privileged(self) -> Dict[str, List[RoleTag]]:
        return {
            pid: [RoleTag(tag) for tag in tags if tag in _ROLE_VALUES]
            for pid, tags in self.table.read().items()
            if tags
        }

    def grant(self, principal_id: str, tag: RoleTag) -> bool:
        with self.table.transaction() as data:
            tags = data.setdefault(principal_id, [])
            if tag.value in tags:
                return False
            tags.append(tag.value)
        return True

    def revoke(self, principal_id: str, tag: RoleTag) -> bool:
        with self.table.transaction() as data:
            tags = data.get(principal_id, [])
            if tag.value not in tags:
                return False
            tags.remove(tag.value)
            if not tags:
                data.pop(principal_id, None)
        return True

    def delete_principal(self, principal_id: str) -> None:
        with self.table.transaction() as data:
            data.pop(principal_id, None)


class JsonProfileStore:
    """``profiles.json``: ``{principal_id: profile}``."""

    def __init__(self, data_dir: Path):
        self.table = JsonTable(data_dir / "profiles.json")

    def get(self, principal_id: str) -> Optional[Profile]:
        raw = self.table.read().get(principal_id)
        return Profile.from_dict(raw) if raw else None

    def list_all(self, status: Optional[ApprovalStatus] = None) -> List[Profile]:
        profiles = [Profile.from_dict(raw) for raw in self.table.read().values()]
        if status is not None:
            profiles = [p for p in profiles if p.status == status]
        return profiles

    def save(self, profile: Profile) -> None:
        with self.table.transaction() as data:
            data[profile.principal_id] = profile.to_dict()

    def delete(self, principal_id: str) -> bool:
        with self.table.transaction() as data:
            return data.pop(principal_id, None) is not None


class JsonBannedOriginStore:
    """``banned_origins.json``: ``{origin: ban}``."""

    def __init__(self, data_dir: Path):
        self.table = JsonTable(data_dir / "banned_origins.json")

    def find(self, origin: str) -> Optional[BannedOrigin]:
        raw = self.table.read().get(origin)
        return BannedOrigin.from_dict(raw) if raw else None

    def list_all(self) -> List[BannedOrigin]:
        bans = [BannedOrigin.from_dict(raw) for raw in self.table.read().values()]
        return sorted(bans, key=lambda b: b.created_at, reverse=True)

    def insert(self, ban: BannedOrigin) -> bool:
        with self.table.transaction() as data:
            if ban.origin in data:
                return False
            data[ban.origin] = ban.to_dict()
        return True

    def delete(self, origin: str) -> bool:
        with self.table.transaction() as data:
            return data.pop(origin, None) is not None


class JsonViewRecordStore:
    """``daily_views.json``: ``{day: {principal_id: [item_id, ...]}}``."""

    def __init__(self, data_dir: Path):
        self.table = JsonTable(data_dir / "daily_views.json")

    def insert_if_absent(self, principal_id: str, item_id: str, day: str) -> bool:
        with self.table.transaction() as data:
            items = data.setdefault(day, {}).setdefault(principal_id, [])
            if item_id in items:
                return False
            items.append(item_id)
        return True

    def list_item_ids(self, principal_id: str, day: str) -> List[str]:
        return list(self.table.read().get(day, {}).get(principal_id, []))

    def count(self, principal_id: str, day: str) -> int:
        return len(self.list_item_ids(principal_id, day))

    def delete_principal(self, principal_id: str) -> None:
        with self.table.transaction() as data:
            for per_day in data.values():
                per_day.pop(principal_id, None)

    def prune_before(self, day: str) -> int:
        removed = 0
        with self.table.transaction() as data:
            # ISO day keys sort chronologically
            for key in [k for k in data if k < day]:
                removed += sum(len(items) for items in data.pop(key).values())
        return removed


class JsonContentStore:
    """``articles.json``: ``{item_id: article}``."""

    def __init__(self, data_dir: Path):
        self.table = JsonTable(data_dir / "articles.json")

    def list_published_ids(self) -> List[str]:
        return [
            item_id for item_id, raw in self.table.read().items()
            if raw.get("published", True)
        ]

    def get(self, item_id: str) -> Optional[ContentItem]:
        raw = self.table.read().get(item_id)
        return ContentItem.from_dict(raw) if raw else None

    def save(self, item: ContentItem) -> None:
        with self.table.transaction() as data:
            data[item.id] = item.to_dict()

    def delete(self, item_id: str) -> bool:
        with self.table.transaction() as data:
            return data.pop(item_id, None) is not None

    def delete_by_author(self, author_id: str) -> int:
        with self.table.transaction() as data:
            doomed = [k for k, raw in data.items() if raw.get("author_id") == author_id]
            for key in doomed:
                del data[key]
        return len(doomed)


class JsonRegistrationStore:
    """``registration_requests.json``: ``{principal_id: request}``."""

    def __init__(self, data_dir: Path):
        self.table = JsonTable(data_dir / "registration_requests.json")

    def latest(self, principal_id: str) -> Optional[RegistrationRequest]:
        raw = self.table.read().get(principal_id)
        return RegistrationRequest.from_dict(raw) if raw else None

    def list_pending(self) -> List[RegistrationRequest]:
        requests = [RegistrationRequest.from_dict(raw) for raw in self.table.read().values()]
        pending = [r for r in requests if r.status == ApprovalStatus.PENDING]
        return sorted(pending, key=lambda r: r.created_at)

    def save(self, request: RegistrationRequest) -> None:
        with self.table.transaction() as data:
            data[request.principal_id] = request.to_dict()

    def delete_principal(self, principal_id: str) -> None:
        with self.table.transaction() as data:
            data.pop(principal_id, None)


class JsonIpLogStore:
    """``ip_logs.json``: ``[entry, ...]`` in insertion order."""

    def __init__(self, data_dir: Path):
        self.table = JsonTable(data_dir / "ip_logs.json", empty=list)

    def append(self, entry: IpLogEntry) -> None:
        with self.table.transaction() as data:
            data.append(entry.to_dict())

    def list_for(self, principal_id: str) -> List[IpLogEntry]:
        entries = [
            IpLogEntry.from_dict(raw) for raw in self.table.read()
            if raw.get("principal_id") == principal_id
        ]
        entries.reverse()
        return entries

    def delete_principal(self, principal_id: str) -> None:
        with self.table.transaction() as data:
            data[:] = [raw for raw in data if raw.get("principal_id") != principal_id]


class JsonIpRegistrationStore:
    """``ip_registrations.json``: ``{origin: registration}``."""

    def __init__(self, data_dir: Path):
        self.table = JsonTable(data_dir / "ip_registrations.json")

    def find(self, origin: str) -> Optional[IpRegistration]:
        raw = self.table.read().get(origin)
        return IpRegistration.from_dict(raw) if raw else None

    def claim(self, registration: IpRegistration) -> bool:
        with self.table.transaction() as data:
            held = data.get(registration.origin)
            if held and held.get("principal_id") != registration.principal_id:
                return False
            if not held:
                data[registration.origin] = registration.to_dict()
        return True

    def delete_principal(self, principal_id: str) -> None:
        with self.table.transaction() as data:
            for origin in [k for k, raw in data.items() if raw.get("principal_id") == principal_id]:
                del data[origin]
