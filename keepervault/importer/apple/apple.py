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
from ...fields import totp_secret_from_uri
from ...record import EntryFormData


class AppleCsvImporter(ExactColumnCsvImporter):
    """Apple Passwords / iCloud Keychain CSV: Title,URL,Username,Password,Notes,OTPAuth

    OTPAuth holds a complete otpauth:// URL; only its secret is kept.
    """

    COLUMNS = {
        'title': 'title',
        'url': 'url',
        'username': 'username',
        'password': 'password',
        'notes': 'notes',
        'otpauth': 'otpauth',
    }

    def create_record(self, values):
        record = EntryFormData()
        record.title = values.get('title') or DEFAULT_ENTRY_TITLE
        record.username = values.get('username') or ''
        record.password = values.get('password') or ''
        record.url = values.get('url') or ''
        record.notes = values.get('notes') or ''
        record.totp_secret = totp_secret_from_uri(values.get('otpauth'))
        return record
