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

import getpass
import logging
import os
from typing import Iterable, Optional

from ..importer import BaseFileImporter
from ... import kdbx
from ...fields import entry_to_form
from ...record import EntryFormData
from ...tree import iter_entries


class KeepassImporter(BaseFileImporter):
    """Flattens every entry of a KDBX database into import records.
    Nothing is returned unless the whole database unlocks and loads.
    """

    def __init__(self, container=None):    # type: (Optional[kdbx.KdbxContainer]) -> None
        super(KeepassImporter, self).__init__()
        self.container = container

    def do_import(self, filename, password=None, keyfile=None, **kwargs):
        if password is None:
            password = getpass.getpass(prompt='...' + 'Keepass Password'.rjust(20) + ': ', stream=None)
        if keyfile:
            keyfile = os.path.expanduser(keyfile)
        yield from self.parse(self.read_file(filename), password=password, keyfile=keyfile, **kwargs)

    def read_file(self, filename):
        with open(filename, 'rb') as f:
            return f.read()

    def parse(self, payload, password=None, keyfile=None, **kwargs):
        # type: (bytes, Optional[str], Optional[str], ...) -> Iterable[EntryFormData]
        container = self.container or kdbx.default_container()
        vault = container.unlock(payload, password, keyfile)
        records = [entry_to_form(entry, with_custom=False) for _, entry in iter_entries(vault.root)]
        logging.debug('KDBX import: %d entries found', len(records))
        for record in records:
            record.uuid = ''
            yield record

    def extension(self):
        return 'kdbx'
