"""
Capability checks derived from role tiers.

| Actor        | Moderate | Delete article          | Act on tier X   | Set second admin |
|--------------|----------|-------------------------|-----------------|------------------|
| admin        | yes      | any                     | any             | yes              |
| second_admin | yes      | non-admin authors only  | any but admin   | no               |
| editor/user  | no       | own only                | no              | no               |
"""

from typing import Optional

from .models import Capabilities, Role


def can_publish(role: Role) -> bool:
    return role >= Role.EDITOR


def can_moderate(role: Role) -> bool:
    """Ban, approve and reject principals."""
    return role >= Role.SECOND_ADMIN


def can_set_second_admin(role: Role) -> bool:
    return role == Role.ADMIN


def can_act_on(actor_role: Role, target_role: Role) -> bool:
    """Whether a moderator may change the status of a principal of ``target_role``."""
    if actor_role == Role.ADMIN:
        return True
    if actor_role == Role.SECOND_ADMIN:
        return target_role != Role.ADMIN
    return False


def can_delete_article(
    actor_role: Role,
    actor_id: Optional[str],
    author_id: Optional[str],
    author_role: Role,
) -> bool:
    if actor_role == Role.GUEST or not actor_id:
        return False
    if actor_role == Role.ADMIN:
        return True
    if actor_role == Role.SECOND_ADMIN and author_role != Role.ADMIN:
        return True
    return author_id is not None and actor_id == author_id


def capabilities_for(role: Role) -> Capabilities:
    return Capabilities(
        role=role,
        can_publish=can_publish(role),
        can_moderate=can_moderate(role),
        can_set_second_admin=can_set_second_admin(role),
        unlimited_viewing=role.is_privileged,
    )
