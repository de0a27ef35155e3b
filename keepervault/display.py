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

from typing import List

from colorama import init, Fore
from tabulate import tabulate

from . import __version__
from .fields import parse_totp_uri
from .generator import audit_password
from .record import VaultEntry, VaultGroup

init()


class bcolors:
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'


MASK = '********'


def welcome():
    print(f'{bcolors.BOLD}Keeper Vault Commander{bcolors.ENDC} v{__version__}')
    print('Type "help" to list commands.')
    print('')


def abbreviate_text(text, chars_num, verbose=False):    # type: (str, int, bool) -> str
    if verbose:
        return text
    return text if len(text) < chars_num else text[:chars_num] + '...'


def formatted_tree(group, show_entries=False, verbose=False):    # type: (VaultGroup, bool, bool) -> None
    """Print a group hierarchy. The recycle bin is rendered in gray."""
    lines = []    # type: List[str]
    stack = [('group', group, '', '')]
    while stack:
        kind, item, prefix, child_prefix = stack.pop()
        if kind == 'entry':
            title = f'{Fore.GREEN}{item.title}{Fore.RESET}'
            lines.append(prefix + title + (f' ({item.uuid})' if verbose else ''))
            continue

        name = item.name
        if item.is_recycle_bin:
            name = f'{Fore.LIGHTBLACK_EX}{name}{Fore.RESET}'
        lines.append(prefix + name + (f' ({item.uuid})' if verbose else ''))

        children = [('entry', x) for x in item.entries] if show_entries else []
        children.extend(('group', x) for x in item.subgroups)
        nodes = []
        for i, (child_kind, child) in enumerate(children):
            last = i == len(children) - 1
            nodes.append((child_kind, child,
                          child_prefix + ('└── ' if last else '├── '),
                          child_prefix + ('    ' if last else '│   ')))
        stack.extend(reversed(nodes))
    print('\n'.join(lines))


def password_rating(password):    # type: (str) -> str
    if not password:
        return ''
    return audit_password(password).label


def formatted_entries(entries, verbose=False):    # type: (List[VaultEntry], bool) -> None
    """Display titles/uuids for the supplied entries"""
    entries = sorted(entries, key=lambda x: x.title.lower())
    if len(entries) > 0:
        table = [[i + 1, e.uuid, abbreviate_text(e.title, 32, verbose), e.username,
                  abbreviate_text(e.url, 32, verbose), password_rating(e.password)] for i, e in enumerate(entries)]
        print(tabulate(table, headers=['#', 'Entry UUID', 'Title', 'Username', 'URL', 'Strength']))


def formatted_groups(groups, verbose=False):    # type: (List[VaultGroup], bool) -> None
    if len(groups) > 0:
        table = [[i + 1, g.uuid, abbreviate_text(g.name, 32, verbose), len(g.entries), len(g.subgroups)]
                 for i, g in enumerate(groups)]
        print(tabulate(table, headers=['#', 'Group UUID', 'Name', 'Entries', 'Groups']))


def print_entry(entry, group_path='', unmask=False):    # type: (VaultEntry, str, bool) -> None
    rows = [
        ['UUID', entry.uuid],
        ['Title', entry.title],
    ]
    if group_path:
        rows.append(['Group', group_path])
    if entry.username:
        rows.append(['Username', entry.username])
    if entry.email:
        rows.append(['Email', entry.email])
    if entry.password:
        rows.append(['Password', entry.password if unmask else MASK])
        audit = audit_password(entry.password)
        rows.append(['Strength', f'{audit.label} ({audit.score}%)'])
    if entry.url:
        rows.append(['URL', entry.url])
    if entry.otp_url:
        rows.append(['TOTP URL', entry.otp_url if unmask else MASK])
        totp = parse_totp_uri(entry.otp_url)
        if totp:
            rows.append(['TOTP', f'{totp.algorithm}, {totp.digits} digits, {totp.period}s'])
    for key, value in entry.custom.items():
        rows.append([key, value])
    if entry.tags:
        rows.append(['Tags', ', '.join(entry.tags)])
    if entry.expiry_time:
        rows.append(['Expires', entry.expiry_time.isoformat()])
    if entry.last_mod_time:
        rows.append(['Modified', entry.last_mod_time.isoformat()])
    if entry.attachments:
        rows.append(['Attachments', ', '.join(entry.attachments.keys())])
    if entry.notes:
        rows.append(['Notes', entry.notes])
    print(tabulate(rows, tablefmt='plain'))