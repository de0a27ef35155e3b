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


class LastPassCsvImporter(ExactColumnCsvImporter):
    """LastPass CSV export: url,username,password,totp,extra,name,grouping,fav"""

    COLUMNS = {
        'url': 'url',
        'username': 'username',
        'password': 'password',
        'totp': 'totp',
        'extra': 'notes',
        'name': 'title',
        'grouping': 'group',
    }

    def create_record(self, values):
        record = EntryFormData()
        record.title = values.get('title') or DEFAULT_ENTRY_TITLE
        record.username = values.get('username') or ''
        record.password = values.get('password') or ''
        record.url = values.get('url') or ''
        record.notes = values.get('notes') or ''
        record.totp_secret = values.get('totp') or ''
        record.group_path = values.get('group') or ''
        return record
