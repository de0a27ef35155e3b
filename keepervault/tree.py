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

"""Lookups and structural edits over the group / entry tree.

Walks are depth-first, preorder, in each group's own child order, and use an
explicit stack so that deeply nested trees do not exhaust the call stack.
A failed mutation leaves the tree as it was: every check runs before the
first detach.
"""

import logging
import uuid
from typing import Iterable, List, Optional, Tuple, Union

from . import constants
from .error import NotFoundError, InvalidOperationError, CycleDetectedError
from .fields import apply_entry_form, entry_to_view
from .record import EntryFormData, VaultGroup
from .vault import Vault, Group, Entry

UuidLike = Union[uuid.UUID, str, None]


def as_uuid(value):    # type: (UuidLike) -> Optional[uuid.UUID]
    if isinstance(value, uuid.UUID):
        return value
    if not value:
        return None
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        return None


def same_uuid(a, b):    # type: (UuidLike, UuidLike) -> bool
    ua = as_uuid(a)
    return ua is not None and ua == as_uuid(b)


def iter_groups(root):    # type: (Group) -> Iterable[Group]
    stack = [root]
    while stack:
        group = stack.pop()
        yield group
        stack.extend(reversed(group.groups))


def iter_entries(root):    # type: (Group) -> Iterable[Tuple[Group, Entry]]
    for group in iter_groups(root):
        for entry in group.entries:
            yield group, entry


def find_group(root, group_uuid):    # type: (Group, UuidLike) -> Optional[Group]
    target = as_uuid(group_uuid)
    if target is None:
        return None
    return next((g for g in iter_groups(root) if g.uuid == target), None)


def find_entry_owner(root, entry_uuid):    # type: (Group, UuidLike) -> Optional[Tuple[Group, Entry]]
    target = as_uuid(entry_uuid)
    if target is None:
        return None
    return next(((g, e) for g, e in iter_entries(root) if e.uuid == target), None)


def find_parent_group(root, group_uuid):    # type: (Group, UuidLike) -> Optional[Group]
    target = as_uuid(group_uuid)
    if target is None:
        return None
    for group in iter_groups(root):
        if any(x.uuid == target for x in group.groups):
            return group
    return None


def is_descendant(candidate, ancestor):    # type: (Group, Group) -> bool
    return any(g.uuid == candidate.uuid for g in iter_groups(ancestor) if g is not ancestor)


def group_path(root, group_uuid, delimiter='/'):    # type: (Group, UuidLike, str) -> str
    names = []   # type: List[str]
    target = as_uuid(group_uuid)
    while target is not None and target != root.uuid:
        group = find_group(root, target)
        parent = find_parent_group(root, target)
        if group is None or parent is None:
            break
        names.append((group.name or '').replace(delimiter, 2*delimiter))
        target = parent.uuid
    names.reverse()
    return delimiter + delimiter.join(names)


def _detach(items, item):
    for i, x in enumerate(items):
        if x is item:
            del items[i]
            return


def add_group(vault, parent_uuid, name, icon=None, allow_add=None):
    # type: (Vault, UuidLike, str, Optional[int], Optional[bool]) -> Group
    parent = find_group(vault.root, parent_uuid)
    if parent is None:
        raise NotFoundError('Parent group not found')

    group = vault.create_group(parent, name)
    if icon is not None:
        group.icon = icon
    if allow_add is not None:
        group.allow_add = allow_add
    group.times.update()
    logging.debug('Group %s added to %s', group.uuid, parent.uuid)
    return group


def update_group(vault, group_uuid, name, icon=None, parent_uuid=None, allow_add=None):
    # type: (Vault, UuidLike, str, Optional[int], UuidLike, Optional[bool]) -> Group
    root = vault.root
    group = find_group(root, group_uuid)
    if group is None:
        raise NotFoundError('Group not found')

    move_from = None     # type: Optional[Group]
    move_to = None       # type: Optional[Group]
    if parent_uuid:
        current_parent = find_parent_group(root, group.uuid)
        if current_parent is None:
            raise NotFoundError('Parent of the group not found')
        if not same_uuid(current_parent.uuid, parent_uuid):
            new_parent = find_group(root, parent_uuid)
            if new_parent is None:
                raise NotFoundError('Target group not found')
            if new_parent is group or is_descendant(new_parent, group):
                raise CycleDetectedError('Cannot move group into itself or its children')
            move_from = current_parent
            move_to = new_parent

    group.name = name
    if icon is not None:
        group.icon = icon
    if allow_add is not None:
        group.allow_add = allow_add

    if move_from is not None and move_to is not None:
        _detach(move_from.groups, group)
        move_to.groups.append(group)
        logging.debug('Group %s moved from %s to %s', group.uuid, move_from.uuid, move_to.uuid)

    group.times.update()
    return group


def rename_group(vault, group_uuid, name):    # type: (Vault, UuidLike, str) -> Group
    return update_group(vault, group_uuid, name)


def delete_group(vault, group_uuid):    # type: (Vault, UuidLike) -> None
    root = vault.root
    if same_uuid(root.uuid, group_uuid):
        raise InvalidOperationError('Cannot delete root group')

    parent = find_parent_group(root, group_uuid)
    if parent is None:
        raise NotFoundError('Group not found')

    target = as_uuid(group_uuid)
    parent.groups = [x for x in parent.groups if x.uuid != target]
    logging.debug('Group %s deleted', target)


def add_entry(vault, group_uuid, data):    # type: (Vault, UuidLike, EntryFormData) -> Entry
    group = find_group(vault.root, group_uuid)
    if group is None:
        raise NotFoundError('Target group not found')

    entry = vault.create_entry(group)
    apply_entry_form(entry, data)
    logging.debug('Entry %s added to %s', entry.uuid, group.uuid)
    return entry


def update_entry(vault, data):    # type: (Vault, EntryFormData) -> Entry
    if not data.uuid:
        raise InvalidOperationError('Entry UUID required for update')
    root = vault.root
    result = find_entry_owner(root, data.uuid)
    if result is None:
        raise NotFoundError('Entry not found')
    group, entry = result

    if data.group_uuid and not same_uuid(group.uuid, data.group_uuid):
        new_group = find_group(root, data.group_uuid)
        if new_group is not None:
            _detach(group.entries, entry)
            new_group.entries.append(entry)
            logging.debug('Entry %s moved from %s to %s', entry.uuid, group.uuid, new_group.uuid)

    entry.push_history()
    apply_entry_form(entry, data, is_update=True)
    return entry


def get_recycle_bin(vault):    # type: (Vault) -> Optional[Group]
    if not vault.recycle_bin_enabled or vault.recycle_bin_uuid is None:
        return None
    return find_group(vault.root, vault.recycle_bin_uuid)


def delete_entry(vault, entry_uuid, permanent=False):    # type: (Vault, UuidLike, bool) -> Optional[Group]
    """Moves the entry to the recycle bin; entries already there, or with the
    recycle bin disabled, are removed. Returns the recycle bin when used.
    """
    root = vault.root
    result = find_entry_owner(root, entry_uuid)
    if result is None:
        raise NotFoundError('Entry not found')
    group, entry = result

    if permanent or not vault.recycle_bin_enabled or vault.is_recycle_bin(group):
        _detach(group.entries, entry)
        logging.debug('Entry %s deleted', entry.uuid)
        return None

    recycle_bin = get_recycle_bin(vault)
    if recycle_bin is None:
        recycle_bin = vault.create_recycle_bin()
        logging.debug('Recycle bin %s created', recycle_bin.uuid)

    entry.set_field(constants.ORIGINAL_GROUP_KEY, str(group.uuid))
    _detach(group.entries, entry)
    recycle_bin.entries.append(entry)
    entry.times.update()
    logging.debug('Entry %s moved to recycle bin', entry.uuid)
    return recycle_bin


def move_entry(vault, entry_uuid, target_group_uuid):    # type: (Vault, UuidLike, UuidLike) -> Entry
    root = vault.root
    result = find_entry_owner(root, entry_uuid)
    if result is None:
        raise NotFoundError('Entry not found')
    group, entry = result
    if same_uuid(group.uuid, target_group_uuid):
        return entry

    target = find_group(root, target_group_uuid)
    if target is None:
        raise NotFoundError('Target group not found')

    _detach(group.entries, entry)
    target.entries.append(entry)
    entry.times.update()
    return entry


def original_group(vault, entry_uuid):    # type: (Vault, UuidLike) -> Optional[Group]
    result = find_entry_owner(vault.root, entry_uuid)
    if result is None:
        return None
    _, entry = result
    group = find_group(vault.root, entry.fields.get(constants.ORIGINAL_GROUP_KEY))
    return group or vault.root


def restore_entry(vault, entry_uuid):    # type: (Vault, UuidLike) -> Group
    root = vault.root
    result = find_entry_owner(root, entry_uuid)
    if result is None:
        raise NotFoundError('Entry not found')
    current_group, entry = result

    target = find_group(root, entry.fields.get(constants.ORIGINAL_GROUP_KEY)) or root
    _detach(current_group.entries, entry)
    target.entries.append(entry)
    entry.delete_field(constants.ORIGINAL_GROUP_KEY)
    entry.times.update()
    return target


def _group_view(vault, group):    # type: (Vault, Group) -> VaultGroup
    view = VaultGroup()
    view.uuid = str(group.uuid)
    view.name = group.name or constants.DEFAULT_GROUP_NAME
    view.icon = group.icon or 0
    view.allow_add = group.allow_add
    view.is_recycle_bin = vault.recycle_bin_enabled and vault.is_recycle_bin(group)
    view.entries = [entry_to_view(x) for x in group.entries]
    return view


def list_groups_ordered(vault):    # type: (Vault) -> List[VaultGroup]
    root_view = None      # type: Optional[VaultGroup]
    views = []            # type: List[VaultGroup]
    stack = [(vault.root, None)]
    while stack:
        group, parent_view = stack.pop()
        view = _group_view(vault, group)
        views.append(view)
        if parent_view is None:
            root_view = view
        else:
            parent_view.subgroups.append(view)
        stack.extend((x, view) for x in reversed(group.groups))

    for view in views:
        view.subgroups.sort(key=lambda x: x.is_recycle_bin)
    return [root_view] if root_view else []
