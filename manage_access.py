#!/usr/bin/env python3
"""
Access data management script:
- grant or revoke admin / second-admin roles
- list banned origins
- prune old daily view records
- add articles to the content table

Works directly on the JSON tables in the data directory.
"""

import json
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional
import argparse
import logging

from app.storage.factory import create_storage_module
from app.storage.models import ContentItem, RoleTag

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class AccessDataManager:
    """Maintenance operations on the access tables."""

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir
        self.storage = create_storage_module(data_dir)

    def grant_role(self, principal_id: str, tag: RoleTag = RoleTag.ADMIN) -> bool:
        """Grant a role row. Granting admin drops a second-admin row."""
        changed = self.storage["roles"].grant(principal_id, tag)
        if tag == RoleTag.ADMIN:
            self.storage["roles"].revoke(principal_id, RoleTag.SECOND_ADMIN)
        logger.info(f"Granted {tag.value} to {principal_id} (changed={changed})")
        return changed

    def revoke_role(self, principal_id: str, tag: RoleTag) -> bool:
        changed = self.storage["roles"].revoke(principal_id, tag)
        logger.info(f"Revoked {tag.value} from {principal_id} (changed={changed})")
        return changed

    def list_bans(self) -> List[Dict[str, Any]]:
        return [ban.to_dict() for ban in self.storage["banned_origins"].list_all()]

    def prune_views(self, keep_days: int, today: Optional[date] = None) -> int:
        """Delete view records older than ``keep_days`` days; returns rows removed."""
        if keep_days < 1:
            raise ValueError("keep_days must be at least 1")
        today = today or date.today()
        cutoff = (today - timedelta(days=keep_days - 1)).isoformat()
        removed = self.storage["view_records"].prune_before(cutoff)
        logger.info(f"Pruned {removed} view records before {cutoff}")
        return removed

    def add_article(self, item_id: str, author_id: Optional[str] = None,
                    title: str = "", published: bool = True) -> ContentItem:
        item = ContentItem(id=item_id, published=published, author_id=author_id, title=title)
        self.storage["content"].save(item)
        logger.info(f"Saved article {item_id} (published={published})")
        return item


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Access data management script")
    parser.add_argument("--data-dir", type=Path, default=Path("data"),
                        help="Directory containing the access tables")
    subparsers = parser.add_subparsers(dest="command", required=True)

    grant = subparsers.add_parser("grant-admin", help="Grant the admin (or second-admin) role")
    grant.add_argument("uid", help="Principal id")
    grant.add_argument("--second", action="store_true",
                       help="Grant second_admin instead of admin")

    revoke = subparsers.add_parser("revoke-role", help="Revoke a role row")
    revoke.add_argument("uid", help="Principal id")
    revoke.add_argument("--role", choices=[t.value for t in RoleTag], default=RoleTag.SECOND_ADMIN.value)

    subparsers.add_parser("list-bans", help="List banned origins")

    prune = subparsers.add_parser("prune-views", help="Delete old daily view records")
    prune.add_argument("--keep-days", type=int, default=7,
                       help="Number of most recent days to keep (including today)")

    article = subparsers.add_parser("add-article", help="Add or update an article")
    article.add_argument("id", help="Article id")
    article.add_argument("--author", help="Author principal id")
    article.add_argument("--title", default="")
    article.add_argument("--unpublished", action="store_true")

    args = parser.parse_args(argv)

    manager = AccessDataManager(args.data_dir)

    if args.command == "grant-admin":
        tag = RoleTag.SECOND_ADMIN if args.second else RoleTag.ADMIN
        result = {"uid": args.uid, "role": tag.value, "changed": manager.grant_role(args.uid, tag)}
    elif args.command == "revoke-role":
        tag = RoleTag(args.role)
        result = {"uid": args.uid, "role": tag.value, "changed": manager.revoke_role(args.uid, tag)}
    elif args.command == "list-bans":
        result = manager.list_bans()
    elif args.command == "prune-views":
        result = {"removed": manager.prune_views(args.keep_days)}
    else:
        item = manager.add_article(args.id, args.author, args.title, not args.unpublished)
        result = item.to_dict()

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return result


if __name__ == "__main__":
    main()
