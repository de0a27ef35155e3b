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

OTP_ISSUER = 'KeeperVault'
OTP_DEFAULT_LABEL = 'Account'
OTP_SCHEME = 'otpauth://'

FIELD_TITLE = 'Title'
FIELD_USERNAME = 'UserName'
FIELD_PASSWORD = 'Password'
FIELD_URL = 'URL'
FIELD_NOTES = 'Notes'
FIELD_EMAIL = 'Email'
FIELD_OTP = 'otp'

STANDARD_FIELDS = (FIELD_TITLE, FIELD_USERNAME, FIELD_PASSWORD, FIELD_URL, FIELD_NOTES, FIELD_OTP, FIELD_EMAIL)
PROTECTED_FIELDS = {FIELD_PASSWORD, FIELD_OTP}

# preference order when recovering an OTP value from an entry
OTP_FIELD_KEYS = ('otp', 'TOTP', 'totp', 'TOTP Settings', 'otpauth')
# keys the container importer inspects for an otpauth:// URL
IMPORT_OTP_FIELD_KEYS = ('otp', 'TOTP', 'totp')

ALLOW_ADD_KEY = 'keepervault_allow_add'
ORIGINAL_GROUP_KEY = 'KeeperVault_OriginalGroup'

DEFAULT_ENTRY_TITLE = 'Untitled'
DEFAULT_NOTE_TITLE = 'Untitled Note'
DEFAULT_GROUP_NAME = 'Unnamed Group'
ROOT_GROUP_NAME = 'Root'
RECYCLE_BIN_NAME = 'Recycle Bin'

ICON_KEY = 0
ICON_FOLDER = 48
ICON_RECYCLE_BIN = 43

DEFAULT_GROUPS = ('General', 'Windows', 'Network', 'Internet', 'eMail', 'Homebanking')

# string keys the KDBX format keeps for itself; custom fields cannot use them
RESERVED_FIELDS = ('Title', 'UserName', 'Password', 'URL', 'Notes', 'otp', 'Tags', 'IconID', 'Times', 'History')

# backup copies kept next to the vault file on save
DEFAULT_BACKUP_COUNT = 2
