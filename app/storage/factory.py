"""
Factory for creating the JSON-file storage backend.
"""

from pathlib import Path

from .json_backend import (
    JsonBannedOriginStore,
    JsonContentStore,
    JsonIpLogStore,
    JsonIpRegistrationStore,
    JsonProfileStore,
    JsonRegistrationStore,
    JsonRoleStore,
    JsonViewRecordStore,
)


def create_storage_module(data_dir: Path) -> dict:
    """
    Create every store the access engine needs.

    Args:
        data_dir: Directory holding the JSON table files

    Returns:
        Dictionary with keys ``roles``, ``profiles``, ``banned_origins``,
        ``view_records``, ``content``, ``registrations``, ``ip_logs`` and
        ``ip_registrations``
    """
    data_dir.mkdir(parents=True, exist_ok=True)

    return {
        "roles": JsonRoleStore(data_dir),
        "profiles": JsonProfileStore(data_dir),
        "banned_origins": JsonBannedOriginStore(data_dir),
        "view_records": JsonViewRecordStore(data_dir),
        "content": JsonContentStore(data_dir),
        "registrations": JsonRegistrationStore(data_dir),
        "ip_logs": JsonIpLogStore(data_dir),
        "ip_registrations": JsonIpRegistrationStore(data_dir),
    }
