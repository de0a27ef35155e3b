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

"""Translation between EntryFormData and the entry attribute bag.

Create and update modes differ on purpose in one place: an empty email is
omitted on create and written as an empty string on update.
"""

import logging
import re
from collections import namedtuple
from typing import Dict, Optional
from urllib.parse import urlparse, parse_qs, unquote, quote

from . import constants
from .record import EntryFormData, VaultEntry
from .vault import Entry

BASE32_PATTERN = re.compile(r'^[A-Z2-7=]+$')

TotpSettings = namedtuple('TotpSettings', 'issuer account secret algorithm digits period')


def clean_otp_secret(secret):    # type: (Optional[str]) -> str
    return re.sub(r'\s', '', secret or '').upper()


def generate_otp_url(secret, label, issuer=constants.OTP_ISSUER):
    # type: (str, str, str) -> Optional[str]
    clean = clean_otp_secret(secret)
    if not clean:
        return None
    if not BASE32_PATTERN.match(clean):
        return None
    enc_issuer = quote(issuer or '', safe='')
    enc_label = quote(label or '', safe='')
    return f'otpauth://totp/{enc_issuer}:{enc_label}?secret={clean}&issuer={enc_issuer}'


def parse_totp_uri(uri):    # type: (Optional[str]) -> Optional[TotpSettings]
    if not uri or not uri.startswith(constants.OTP_SCHEME):
        return None
    parsed = urlparse(uri)
    query = parse_qs(parsed.query)

    def param(name):    # type: (str) -> str
        values = query.get(name)
        return values[0].strip() if values else ''

    def positive_int(name, default):    # type: (str, int) -> int
        value = param(name)
        return int(value) if value.isdigit() and int(value) > 0 else default

    issuer, _, account = unquote(parsed.path.lstrip('/')).rpartition(':')
    return TotpSettings(issuer=param('issuer') or issuer.strip(), account=account.strip(),
                        secret=param('secret'), algorithm=(param('algorithm') or 'SHA1').upper(),
                        digits=positive_int('digits', 6), period=positive_int('period', 30))


def totp_secret_from_uri(uri):    # type: (Optional[str]) -> str
    totp = parse_totp_uri(uri)
    return totp.secret if totp else ''


def recover_otp_url(fields, title=''):    # type: (Dict[str, str], str) -> Optional[str]
    otp_value = next((fields[x] for x in constants.OTP_FIELD_KEYS if fields.get(x)), None)
    if not otp_value:
        return None
    if otp_value.startswith(constants.OTP_SCHEME):
        return otp_value
    return generate_otp_url(otp_value, title or constants.OTP_DEFAULT_LABEL)


def apply_entry_form(entry, data, is_update=False):    # type: (Entry, EntryFormData, bool) -> None
    entry.set_field(constants.FIELD_TITLE, data.title)
    entry.set_field(constants.FIELD_USERNAME, data.username)
    entry.set_field(constants.FIELD_PASSWORD, data.password)
    entry.set_field(constants.FIELD_URL, data.url)
    entry.set_field(constants.FIELD_NOTES, data.notes)
    if data.icon is not None:
        entry.icon = data.icon

    if data.email:
        entry.set_field(constants.FIELD_EMAIL, data.email)
    elif is_update:
        entry.set_field(constants.FIELD_EMAIL, '')

    if data.totp_secret:
        otp_url = generate_otp_url(data.totp_secret, data.title)
        if otp_url:
            entry.set_field(constants.FIELD_OTP, otp_url)

    if data.expiry_time:
        entry.times.expiry_time = data.expiry_time
        entry.times.expires = True
    else:
        entry.times.expires = False

    custom_fields = data.custom_fields or {}
    if is_update:
        for key in list(entry.fields.keys()):
            if key not in constants.STANDARD_FIELDS and key not in custom_fields:
                entry.delete_field(key)
    for key, value in custom_fields.items():
        if key in constants.RESERVED_FIELDS:
            logging.warning('Entry "%s": custom field "%s" is reserved and skipped', data.title, key)
        elif key and value:
            entry.set_field(key, value)

    if data.attachments is not None:
        if is_update:
            entry.attachments.clear()
        entry.attachments.update(data.attachments)

    entry.times.update()


def entry_to_view(entry, include_history=True):    # type: (Entry, bool) -> VaultEntry
    fields = entry.fields
    title = fields.get(constants.FIELD_TITLE) or ''
    view = VaultEntry()
    view.uuid = str(entry.uuid)
    view.title = title or constants.DEFAULT_ENTRY_TITLE
    view.username = fields.get(constants.FIELD_USERNAME) or ''
    view.password = fields.get(constants.FIELD_PASSWORD) or ''
    view.url = fields.get(constants.FIELD_URL) or ''
    view.notes = fields.get(constants.FIELD_NOTES) or ''
    view.email = fields.get(constants.FIELD_EMAIL) or ''
    view.icon = entry.icon or 0
    view.otp_url = recover_otp_url(fields, title)
    view.custom = {k: v for k, v in fields.items() if k not in constants.STANDARD_FIELDS}
    view.tags = list(entry.tags)
    view.creation_time = entry.times.creation_time
    view.last_mod_time = entry.times.last_mod_time
    view.expiry_time = entry.times.expiry_time if entry.times.expires else None
    view.attachments = dict(entry.attachments)
    if include_history:
        view.history = [entry_to_view(x, include_history=False) for x in entry.history]
    return view


def entry_to_form(entry, group_uuid='', with_custom=True):    # type: (Entry, str, bool) -> EntryFormData
    fields = entry.fields
    otp_value = next((fields[x] for x in constants.IMPORT_OTP_FIELD_KEYS if fields.get(x)), '')

    data = EntryFormData()
    data.uuid = str(entry.uuid)
    data.group_uuid = group_uuid
    data.title = fields.get(constants.FIELD_TITLE) or constants.DEFAULT_ENTRY_TITLE
    data.username = fields.get(constants.FIELD_USERNAME) or ''
    data.password = fields.get(constants.FIELD_PASSWORD) or ''
    data.url = fields.get(constants.FIELD_URL) or ''
    data.notes = fields.get(constants.FIELD_NOTES) or ''
    data.email = fields.get(constants.FIELD_EMAIL) or ''
    data.totp_secret = totp_secret_from_uri(otp_value)
    if with_custom:
        data.icon = entry.icon
        if entry.times.expires:
            data.expiry_time = entry.times.expiry_time
        data.custom_fields = {k: v for k, v in fields.items() if k not in constants.STANDARD_FIELDS}
    return data
