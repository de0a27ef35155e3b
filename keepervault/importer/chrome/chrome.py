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

from ..importer import ExactColumnCsvImporter
from ...constants import DEFAULT_ENTRY_TITLE
from ...record import EntryFormData


class ChromeCsvImporter(ExactColumnCsvImporter):
    """Chrome / Chromium password export: name,url,username,password,note"""

    COLUMNS = {
        'name': 'title',
        'url': 'url',
        'username': 'username',
        'password': 'password',
        'note': 'notes',
    }

    def create_record(self, values):
        record = EntryFormData()
        record.title = values.get('title') or DEFAULT_ENTRY_TITLE
        record.username = values.get('username') or ''
        record.password = values.get('password') or ''
        record.url = values.get('url') or ''
        record.notes = values.get('notes') or ''
        return record
