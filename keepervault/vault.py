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

"""In-memory vault tree.

This is the shape the container adapter (kdbx.py) loads into and saves from:
UUID-identified groups and entries, a generic string-keyed attribute bag per
entry, and the recycle bin identifier taken from the container metadata.
"""

import datetime
import uuid
from typing import Dict, List, Optional, Set

from . import constants


def utc_now():     # type: () -> datetime.datetime
    return datetime.datetime.now(tz=datetime.timezone.utc)


class Times:
    def __init__(self):
        now = utc_now()
        self.creation_time = now      # type: datetime.datetime
        self.last_mod_time = now      # type: datetime.datetime
        self.expiry_time = None       # type: Optional[datetime.datetime]
        self.expires = False

    def update(self):
        self.last_mod_time = utc_now()

    def copy(self):    # type: () -> 'Times'
        t = Times()
        t.creation_time = self.creation_time
        t.last_mod_time = self.last_mod_time
        t.expiry_time = self.expiry_time
        t.expires = self.expires
        return t


class Group:
    def __init__(self, name='', icon=constants.ICON_FOLDER, group_uuid=None):
        self.uuid = group_uuid or uuid.uuid4()   # type: uuid.UUID
        self.name = name                        # type: str
        self.icon = icon                        # type: int
        self.notes = ''
        self.allow_add = None                   # type: Optional[bool]
        self.entries = []                       # type: List[Entry]
        self.groups = []                        # type: List[Group]
        self.times = Times()

    def __repr__(self):
        return f'Group({self.uuid}, {self.name!r})'


class Entry:
    def __init__(self, entry_uuid=None):
        self.uuid = entry_uuid or uuid.uuid4()  # type: uuid.UUID
        self.fields = {}                        # type: Dict[str, str]
        self.protected = set()                  # type: Set[str]
        self.tags = []                          # type: List[str]
        self.icon = constants.ICON_KEY
        self.times = Times()
        self.history = []                       # type: List[Entry]
        self.attachments = {}                   # type: Dict[str, bytes]

    def get_field(self, key):    # type: (str) -> str
        return self.fields.get(key) or ''

    def set_field(self, key, value, protect=None):   # type: (str, str, Optional[bool]) -> None
        self.fields[key] = value or ''
        if protect is None:
            protect = key in constants.PROTECTED_FIELDS
        if protect:
            self.protected.add(key)
        else:
            self.protected.discard(key)

    def delete_field(self, key):    # type: (str) -> None
        self.fields.pop(key, None)
        self.protected.discard(key)

    @property
    def title(self):
        return self.get_field(constants.FIELD_TITLE)

    def clone(self):    # type: () -> 'Entry'
        """Copy without history"""
        e = Entry(self.uuid)
        e.fields = dict(self.fields)
        e.protected = set(self.protected)
        e.tags = list(self.tags)
        e.icon = self.icon
        e.times = self.times.copy()
        e.attachments = dict(self.attachments)
        return e

    def push_history(self):
        self.history.append(self.clone())

    def __repr__(self):
        return f'Entry({self.uuid}, {self.title!r})'


class Vault:
    def __init__(self, name='', root=None):    # type: (str, Optional[Group]) -> None
        self.name = name
        self.root = root or Group(name or constants.ROOT_GROUP_NAME)
        self.recycle_bin_uuid = None    # type: Optional[uuid.UUID]
        self.recycle_bin_enabled = True

    def is_recycle_bin(self, group):    # type: (Group) -> bool
        return self.recycle_bin_uuid is not None and group.uuid == self.recycle_bin_uuid

    @staticmethod
    def create_group(parent, name, icon=constants.ICON_FOLDER):    # type: (Group, str, int) -> Group
        group = Group(name, icon)
        parent.groups.append(group)
        return group

    @staticmethod
    def create_entry(group):    # type: (Group) -> Entry
        entry = Entry()
        group.entries.append(entry)
        return entry

    def create_recycle_bin(self):    # type: () -> Group
        bin_group = Vault.create_group(self.root, constants.RECYCLE_BIN_NAME, constants.ICON_RECYCLE_BIN)
        self.recycle_bin_uuid = bin_group.uuid
        self.recycle_bin_enabled = True
        return bin_group
