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

"""KDBX container adapter.

Key derivation, encryption and the byte layout are handled by pykeepass.
The adapter converts between a PyKeePass database and the in-memory Vault.
The opener and creator callables are injected so the adapter never depends
on process-wide crypto registration; default_container() wires pykeepass.
"""

import asyncio
import base64
import binascii
import datetime
import functools
import io
import logging
import os
import shutil
import tempfile
import uuid
from typing import Any, Callable, List, Optional, Union

from . import constants
from .error import DecryptionFailedError, ParseFailedError, InvalidOperationError, VaultError
from .tree import iter_entries, iter_groups
from .vault import Vault, Group, Entry

Opener = Callable[[Any, Optional[str], Optional[str]], Any]
Creator = Callable[[str, Optional[str], Optional[str]], Any]

ZERO_UUID = uuid.UUID(int=0)


def create_vault(name, with_default_groups=True):    # type: (str, bool) -> Vault
    vault = Vault(name)
    vault.root.name = name
    if with_default_groups:
        for group_name in constants.DEFAULT_GROUPS:
            vault.create_group(vault.root, group_name)
    return vault


def _pykeepass_open(source, password, keyfile):
    from pykeepass import PyKeePass
    from pykeepass.exceptions import CredentialsError, HeaderChecksumError, PayloadChecksumError

    try:
        return PyKeePass(source, password=password or None, keyfile=keyfile or None)
    except CredentialsError:
        raise DecryptionFailedError('Failed to unlock the KDBX file. Check password.')
    except (HeaderChecksumError, PayloadChecksumError):
        raise ParseFailedError('KDBX file integrity check failed')


def _pykeepass_create(filename, password, keyfile):
    from pykeepass import create_database
    return create_database(filename, password=password or None, keyfile=keyfile or None)


def _parse_icon(value, default):    # type: (Any, int) -> int
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _meta_element(kp, tag):
    tree = getattr(kp, 'tree', None)
    if tree is None:
        return None
    return tree.find(f'Meta/{tag}')


def _meta_text(kp, tag):    # type: (Any, str) -> str
    element = _meta_element(kp, tag)
    return (element.text or '') if element is not None else ''


def _set_meta_text(kp, tag, text):    # type: (Any, str, str) -> None
    tree = getattr(kp, 'tree', None)
    if tree is None:
        return
    from lxml import etree
    element = tree.find(f'Meta/{tag}')
    if element is None:
        meta = tree.find('Meta')
        if meta is None:
            return
        element = etree.SubElement(meta, tag)
    element.text = text


def _read_custom_data(kp_group, key):    # type: (Any, str) -> Optional[str]
    element = getattr(kp_group, '_element', None)
    if element is None:
        return None
    for item in element.findall('CustomData/Item'):
        if item.findtext('Key') == key:
            return item.findtext('Value') or ''
    return None


def _write_custom_data(kp_group, key, value):    # type: (Any, str, str) -> None
    element = getattr(kp_group, '_element', None)
    if element is None:
        return
    from lxml import etree
    custom_data = element.find('CustomData')
    if custom_data is None:
        custom_data = etree.SubElement(element, 'CustomData')
    for item in custom_data.findall('Item'):
        if item.findtext('Key') == key:
            item.find('Value').text = value
            return
    item = etree.SubElement(custom_data, 'Item')
    etree.SubElement(item, 'Key').text = key
    etree.SubElement(item, 'Value').text = value


def _load_times(times, kp_element):
    ctime = getattr(kp_element, 'ctime', None)
    if isinstance(ctime, datetime.datetime):
        times.creation_time = ctime
    mtime = getattr(kp_element, 'mtime', None)
    if isinstance(mtime, datetime.datetime):
        times.last_mod_time = mtime


def _load_entry(kp_entry, with_history=True):    # type: (Any, bool) -> Entry
    entry = Entry(kp_entry.uuid)
    entry.set_field(constants.FIELD_TITLE, kp_entry.title or '')
    entry.set_field(constants.FIELD_USERNAME, kp_entry.username or '')
    entry.set_field(constants.FIELD_PASSWORD, kp_entry.password or '')
    entry.set_field(constants.FIELD_URL, kp_entry.url or '')
    entry.set_field(constants.FIELD_NOTES, kp_entry.notes or '')
    if kp_entry.otp:
        entry.set_field(constants.FIELD_OTP, kp_entry.otp)
    for key, value in (kp_entry.custom_properties or {}).items():
        entry.set_field(key, value or '', protect=False)
    entry.tags = list(kp_entry.tags or [])
    entry.icon = _parse_icon(kp_entry.icon, constants.ICON_KEY)
    _load_times(entry.times, kp_entry)
    if kp_entry.expires and isinstance(kp_entry.expiry_time, datetime.datetime):
        entry.times.expires = True
        entry.times.expiry_time = kp_entry.expiry_time
    for attachment in kp_entry.attachments or []:
        entry.attachments[attachment.filename] = attachment.binary
    if with_history:
        for kp_history in kp_entry.history or []:
            entry.history.append(_load_entry(kp_history, with_history=False))
    return entry


def load_vault(kp):    # type: (Any) -> Vault
    kp_root = kp.root_group
    if kp_root is None:
        raise ParseFailedError('Root group not found')

    vault = Vault(_meta_text(kp, 'DatabaseName') or kp_root.name or '')
    vault.recycle_bin_enabled = _meta_text(kp, 'RecycleBinEnabled').lower() != 'false'
    recycle_bin_text = _meta_text(kp, 'RecycleBinUUID')
    if recycle_bin_text:
        try:
            bin_uuid = uuid.UUID(bytes=base64.b64decode(recycle_bin_text))
            if bin_uuid != ZERO_UUID:
                vault.recycle_bin_uuid = bin_uuid
        except (binascii.Error, ValueError):
            logging.debug('Invalid recycle bin UUID in database metadata')

    stack = [(kp_root, None)]
    while stack:
        kp_group, parent = stack.pop()
        group = Group(kp_group.name or '', _parse_icon(kp_group.icon, constants.ICON_FOLDER), kp_group.uuid)
        group.notes = kp_group.notes or ''
        allow_add = _read_custom_data(kp_group, constants.ALLOW_ADD_KEY)
        if allow_add is not None:
            group.allow_add = allow_add.lower() == 'true'
        _load_times(group.times, kp_group)
        group.entries.extend(_load_entry(x) for x in kp_group.entries)
        if parent is None:
            vault.root = group
        else:
            parent.groups.append(group)
        stack.extend((x, group) for x in reversed(kp_group.subgroups))
    return vault


def _write_entry(kp_entry, entry):    # type: (Any, Entry) -> None
    fields = entry.fields
    kp_entry.title = fields.get(constants.FIELD_TITLE) or ''
    kp_entry.username = fields.get(constants.FIELD_USERNAME) or ''
    kp_entry.password = fields.get(constants.FIELD_PASSWORD) or ''
    kp_entry.url = fields.get(constants.FIELD_URL) or ''
    kp_entry.notes = fields.get(constants.FIELD_NOTES) or ''
    kp_entry.otp = fields.get(constants.FIELD_OTP) or ''
    kp_entry.tags = list(entry.tags)
    kp_entry.icon = str(entry.icon)

    for key in list(kp_entry.custom_properties or {}):
        if key not in fields:
            kp_entry.delete_custom_property(key)
    for key, value in fields.items():
        if key in constants.RESERVED_FIELDS:
            if key not in constants.STANDARD_FIELDS:
                logging.warning('Entry "%s": field "%s" is reserved by the KDBX format and is not saved',
                                entry.title, key)
            continue
        kp_entry.set_custom_property(key, value or '', protect=key in entry.protected)

    if entry.times.expires and entry.times.expiry_time:
        kp_entry.expiry_time = entry.times.expiry_time
        kp_entry.expires = True
    else:
        kp_entry.expires = False
    kp_entry.ctime = entry.times.creation_time
    kp_entry.mtime = entry.times.last_mod_time


def _store_entry(kp, kp_group, entry):    # type: (Any, Any, Entry) -> Any
    kp_entry = kp.add_entry(kp_group, entry.title, entry.get_field(constants.FIELD_USERNAME),
                            entry.get_field(constants.FIELD_PASSWORD), force_creation=True)
    kp_entry.uuid = entry.uuid
    # history versions are archived oldest first, then the current values go on top
    for version in entry.history:
        _write_entry(kp_entry, version)
        kp_entry.save_history()
    _write_entry(kp_entry, entry)
    for name, data in entry.attachments.items():
        binary_id = kp.add_binary(data, compressed=True, protected=False)
        kp_entry.add_attachment(binary_id, name)
    return kp_entry


def _store_group_times(kp_group, group):    # type: (Any, Group) -> None
    kp_group.ctime = group.times.creation_time
    kp_group.mtime = group.times.last_mod_time


def store_vault(kp, vault):    # type: (Any, Vault) -> None
    """Write the vault tree into a freshly created PyKeePass database"""
    kp_root = kp.root_group
    kp_root.name = vault.root.name
    kp_root.uuid = vault.root.uuid
    if vault.root.notes:
        kp_root.notes = vault.root.notes
    _set_meta_text(kp, 'DatabaseName', vault.name or vault.root.name or '')

    stack = [(vault.root, kp_root)]
    while stack:
        group, kp_group = stack.pop()
        for entry in group.entries:
            _store_entry(kp, kp_group, entry)
        children = []
        for subgroup in group.groups:
            kp_subgroup = kp.add_group(kp_group, subgroup.name or '', icon=str(subgroup.icon),
                                       notes=subgroup.notes or None)
            kp_subgroup.uuid = subgroup.uuid
            if subgroup.allow_add is not None:
                _write_custom_data(kp_subgroup, constants.ALLOW_ADD_KEY, str(subgroup.allow_add).lower())
            children.append((subgroup, kp_subgroup))
        stack.extend(reversed(children))
        _store_group_times(kp_group, group)

    _set_meta_text(kp, 'RecycleBinEnabled', 'True' if vault.recycle_bin_enabled else 'False')
    bin_uuid = vault.recycle_bin_uuid if vault.recycle_bin_uuid else ZERO_UUID
    _set_meta_text(kp, 'RecycleBinUUID', base64.b64encode(bin_uuid.bytes).decode('utf-8'))


def backup_filename(filename, timestamp=None):    # type: (str, Optional[datetime.datetime]) -> str
    timestamp = timestamp or datetime.datetime.now()
    name, _ = os.path.splitext(filename)
    return f'{name}.backup.{timestamp.strftime("%Y%m%d-%H%M%S-%f")}.kdbx'


def list_backups(filename):    # type: (str) -> List[str]
    """Backup copies of a vault file, oldest first"""
    directory = os.path.dirname(os.path.abspath(filename))
    prefix = os.path.basename(os.path.splitext(filename)[0]) + '.backup.'
    names = sorted(x for x in os.listdir(directory) if x.startswith(prefix) and x.endswith('.kdbx'))
    return [os.path.join(directory, x) for x in names]


def backup_vault_file(filename, max_backups):    # type: (str, int) -> Optional[str]
    if max_backups <= 0 or not os.path.isfile(filename):
        return None
    backup = backup_filename(filename)
    shutil.copy2(filename, backup)
    logging.debug('Vault backup created: %s', backup)
    backups = list_backups(filename)
    for old_backup in backups[:-max_backups]:
        os.remove(old_backup)
        logging.debug('Vault backup removed: %s', old_backup)
    return backup


class KdbxContainer:
    def __init__(self, opener=None, creator=None, verify=True, backups=0):
        # type: (Optional[Opener], Optional[Creator], bool, int) -> None
        self.opener = opener
        self.creator = creator
        self.verify = verify
        self.backups = backups

    def _ensure_configured(self):
        if self.opener is None or self.creator is None:
            raise InvalidOperationError('KDBX container is not configured')

    def create_database(self, name, with_default_groups=True):    # type: (str, bool) -> Vault
        return create_vault(name, with_default_groups=with_default_groups)

    def unlock(self, source, password, keyfile=None):
        # type: (Union[str, bytes, io.IOBase], Optional[str], Optional[str]) -> Vault
        self._ensure_configured()
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))
        elif isinstance(source, str):
            source = os.path.expanduser(source)
        try:
            kp = self.opener(source, password, keyfile)
            return load_vault(kp)
        except (VaultError, ImportError, FileNotFoundError):
            raise
        except Exception as e:
            logging.debug('KDBX parse error: %s', e, exc_info=True)
            raise ParseFailedError('Failed to unlock or parse KDBX file. Check password.') from e

    def _verify_file(self, vault, filename, password, keyfile):    # type: (Vault, str, str, Optional[str]) -> None
        saved = self.unlock(filename, password, keyfile)
        expected = sum(1 for _ in iter_entries(vault.root))
        actual = sum(1 for _ in iter_entries(saved.root))
        if actual != expected:
            raise ParseFailedError(f'Saved file verification failed: {actual} of {expected} entries found')

    def save(self, vault, filename, password, keyfile=None):
        # type: (Vault, str, Optional[str], Optional[str]) -> None
        """Write the vault next to the target file, verify it, then move it into place.
        The existing file is left untouched until the new one is complete.
        """
        self._ensure_configured()
        filename = os.path.expanduser(filename)
        directory = os.path.dirname(os.path.abspath(filename))
        fd, temp_filename = tempfile.mkstemp(prefix=f'.{os.path.basename(filename)}.', suffix='.tmp', dir=directory)
        os.close(fd)
        try:
            kp = self.creator(temp_filename, password, keyfile)
            store_vault(kp, vault)
            kp.save()
            if self.verify:
                self._verify_file(vault, temp_filename, password, keyfile)
            backup_vault_file(filename, self.backups)
            os.replace(temp_filename, filename)
        finally:
            if os.path.exists(temp_filename):
                os.remove(temp_filename)
        logging.debug('Vault saved to %s: %d groups', filename, sum(1 for _ in iter_groups(vault.root)))

    async def unlock_async(self, source, password, keyfile=None):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self.unlock, source, password, keyfile))

    async def save_async(self, vault, filename, password, keyfile=None):
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, functools.partial(self.save, vault, filename, password, keyfile))


def default_container(backups=constants.DEFAULT_BACKUP_COUNT):    # type: (int) -> KdbxContainer
    return KdbxContainer(opener=_pykeepass_open, creator=_pykeepass_create, backups=backups)
