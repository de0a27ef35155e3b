#  _  __
# | |/ /___ ___ _ __  ___ _ _ ®
# | ' </ -_) -_) '_ \/ -_) '_|
# |_|\_\___\___| .__/\___|_|
#              |_|
#
# Keeper Vault Commander
# Copyright 2024 Keeper Security Inc.
# Contact: ops@keepersecurity.com
#

import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class EntryFormData:
    """Canonical entry shape produced by every importer and consumed by the tree engine.

    group_uuid is a placeholder the caller fills in before inserting the entry.
    """
    title: str = ''
    username: str = ''
    email: str = ''
    password: str = field(default='', repr=False)
    url: str = ''
    notes: str = ''
    totp_secret: str = field(default='', repr=False)
    group_uuid: str = ''
    uuid: str = ''
    icon: Optional[int] = None
    expiry_time: Optional[datetime.datetime] = None
    custom_fields: Optional[Dict[str, str]] = None
    attachments: Optional[Dict[str, bytes]] = field(default=None, repr=False)
    group_path: str = ''


@dataclass
class VaultEntry:
    uuid: str = ''
    title: str = ''
    username: str = ''
    password: str = field(default='', repr=False)
    url: str = ''
    notes: str = ''
    email: str = ''
    icon: int = 0
    otp_url: Optional[str] = field(default=None, repr=False)
    custom: Dict[str, str] = field(default_factory=dict, repr=False)
    tags: List[str] = field(default_factory=list)
    creation_time: Optional[datetime.datetime] = None
    last_mod_time: Optional[datetime.datetime] = None
    expiry_time: Optional[datetime.datetime] = None
    attachments: Dict[str, bytes] = field(default_factory=dict, repr=False)
    history: List['VaultEntry'] = field(default_factory=list, repr=False)


@dataclass
class VaultGroup:
    uuid: str = ''
    name: str = ''
    icon: int = 0
    entries: List[VaultEntry] = field(default_factory=list)
    subgroups: List['VaultGroup'] = field(default_factory=list)
    is_recycle_bin: bool = False
    allow_add: Optional[bool] = None
