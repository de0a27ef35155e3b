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

import logging
from typing import Iterable, List, Optional, Union

from tabulate import tabulate

from .importer import importer_for_format, path_components, BaseImporter
from ..error import NotFoundError
from ..record import EntryFormData
from ..tree import find_group, add_group, add_entry, UuidLike
from ..vault import Vault, Group, Entry


def resolve_import_group(vault, group_uuid=None, folder=None, create=True):
    # type: (Vault, UuidLike, Optional[str], bool) -> Optional[Group]
    """Explicit group UUID first, then a path of subgroups under the root.
    Missing path components are created unless create is False.
    """
    if group_uuid:
        group = find_group(vault.root, group_uuid)
        if group is None:
            raise NotFoundError('Target group not found')
        return group

    group = vault.root
    if folder:
        for name in path_components(folder):
            subgroup = next((x for x in group.groups if x.name == name), None)
            if subgroup is None:
                if not create:
                    return None
                subgroup = add_group(vault, group.uuid, name)
            group = subgroup
    return group


def import_records(vault, records, group_uuid=None, folder=None, dry_run=False):
    # type: (Vault, Iterable[EntryFormData], UuidLike, Optional[str], bool) -> List[Union[Entry, EntryFormData]]
    """Adds every record to the target group.
    Returns the new entries, or the records themselves when dry_run is set.
    """
    if dry_run:
        return list(records)

    group = resolve_import_group(vault, group_uuid=group_uuid, folder=folder)
    result = []   # type: List[Union[Entry, EntryFormData]]
    for record in records:
        record.group_uuid = str(group.uuid)
        result.append(add_entry(vault, group.uuid, record))
    return result


def _import(params, file_format, filename, **kwargs):
    """Import entries from one of a variety of sources."""
    dry_run = kwargs.get('dry_run') is True
    import_into = kwargs.get('import_into') or ''

    importer = importer_for_format(file_format)()  # type: BaseImporter
    records = list(importer.execute(filename, password=kwargs.get('password'), keyfile=kwargs.get('keyfile')))

    if dry_run:
        table = [[i + 1, x.title, x.username, x.url, x.group_path] for i, x in enumerate(records)]
        print(tabulate(table, headers=['#', 'Title', 'Login', 'URL', 'Folder']))
        logging.info('%d entries would be imported', len(records))
        return records

    entries = import_records(params.vault, records, folder=import_into)
    if entries:
        params.modified = True
    logging.info('%d entries imported successfully', len(entries))
    return entries
