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

import json
import logging
from typing import Iterable

from .. import importer
from ...constants import DEFAULT_ENTRY_TITLE, DEFAULT_NOTE_TITLE
from ...error import ParseFailedError
from ...record import EntryFormData

ITEM_TYPE_LOGIN = 1
ITEM_TYPE_SECURE_NOTE = 2


class BitwardenImporter(importer.BaseFileImporter):
    def parse(self, payload, **kwargs):
        # type: (str, ...) -> Iterable[EntryFormData]
        try:
            bw_import = json.loads(payload)
        except ValueError as e:
            raise ParseFailedError(f'Not a Bitwarden JSON export: {e}')
        if not isinstance(bw_import, dict):
            raise ParseFailedError('Not a Bitwarden JSON export')
        if bw_import.get('encrypted') is True:
            raise ParseFailedError('Encrypted Bitwarden JSON export not supported.')

        items = bw_import.get('items')
        if not isinstance(items, list):
            logging.debug('Bitwarden export contains no items')
            return

        for i in items:
            if not isinstance(i, dict):
                logging.debug('Bitwarden item skipped: not an object')
                continue

            item_type = i.get('type', 0)
            if item_type == ITEM_TYPE_LOGIN:
                login = i.get('login')
                if not isinstance(login, dict) or not login:
                    continue
                record = EntryFormData()
                record.title = i.get('name') or DEFAULT_ENTRY_TITLE
                record.username = login.get('username') or ''
                record.password = login.get('password') or ''
                record.notes = i.get('notes') or ''
                record.totp_secret = login.get('totp') or ''
                uris = login.get('uris')
                if isinstance(uris, list) and len(uris) > 0:
                    u = uris[0]
                    if isinstance(u, dict):
                        record.url = u.get('uri') or ''
                yield record
            elif item_type == ITEM_TYPE_SECURE_NOTE:
                record = EntryFormData()
                record.title = i.get('name') or DEFAULT_NOTE_TITLE
                record.notes = i.get('notes') or ''
                yield record

    def extension(self):
        return 'json'
