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

from urllib.parse import urlparse

from ..importer import ExactColumnCsvImporter
from ...constants import DEFAULT_ENTRY_TITLE
from ...record import EntryFormData


def title_from_url(url):    # type: (str) -> str
    if not url:
        return DEFAULT_ENTRY_TITLE
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    return host or url


class FirefoxCsvImporter(ExactColumnCsvImporter):
    """Firefox logins export: "url","username","password","httpRealm",...

    The export has no title column; the site host name is used instead.
    """

    COLUMNS = {
        'url': 'url',
        'username': 'username',
        'password': 'password',
    }

    def create_record(self, values):
        record = EntryFormData()
        record.url = values.get('url') or ''
        record.title = title_from_url(record.url)
        record.username = values.get('username') or ''
        record.password = values.get('password') or ''
        return record
