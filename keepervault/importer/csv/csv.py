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

from ..importer import BaseCsvImporter
from ...constants import DEFAULT_ENTRY_TITLE
from ...record import EntryFormData

'''
Any CSV with a header row. A column is recognized when its header contains:
  title -> title
  user -> username
  pass -> password
  url, website -> url
  note -> notes
  otp, totp -> TOTP secret
'''


class GenericCsvImporter(BaseCsvImporter):
    def resolve_column(self, header):
        if 'title' in header:
            return 'title'
        elif 'user' in header:
            return 'username'
        elif 'pass' in header:
            return 'password'
        elif 'url' in header or 'website' in header:
            return 'url'
        elif 'note' in header:
            return 'notes'
        elif 'otp' in header:
            return 'totp'

    def create_record(self, values):
        record = EntryFormData()
        record.title = values.get('title') or DEFAULT_ENTRY_TITLE
        record.username = values.get('username') or ''
        record.password = values.get('password') or ''
        record.url = values.get('url') or ''
        record.notes = values.get('notes') or ''
        record.totp_secret = values.get('totp') or ''
        return record
