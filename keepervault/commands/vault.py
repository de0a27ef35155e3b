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

import argparse
import getpass
import logging
import os

from .base import Command, user_choice
from ..error import CommandError, VaultError
from ..kdbx import create_vault
from ..tree import iter_entries, iter_groups


def register_commands(commands):
    commands['create'] = VaultCreateCommand()
    commands['open'] = VaultOpenCommand()
    commands['save'] = VaultSaveCommand()
    commands['close'] = VaultCloseCommand()


def register_command_info(aliases, command_info):
    for p in [create_parser, open_parser, save_parser, close_parser]:
        command_info[p.prog] = p.description


create_parser = argparse.ArgumentParser(prog='create', description='Create a new empty vault.')
create_parser.add_argument('--no-default-groups', dest='no_default_groups', action='store_true',
                           help='do not create the default groups')
create_parser.add_argument('name', type=str, action='store', help='database name')
create_parser.add_argument('filename', type=str, nargs='?', action='store', help='KDBX file name used by "save"')


open_parser = argparse.ArgumentParser(prog='open', description='Unlock a KDBX vault file.')
open_parser.add_argument('--keyfile', dest='keyfile', action='store', help='path to the key file')
open_parser.add_argument('filename', type=str, nargs='?', action='store', help='KDBX file name')


save_parser = argparse.ArgumentParser(prog='save', description='Save the vault to a KDBX file.')
save_parser.add_argument('--keyfile', dest='keyfile', action='store', help='path to the key file')
save_parser.add_argument('filename', type=str, nargs='?', action='store',
                         help='KDBX file name. The opened file if omitted.')


close_parser = argparse.ArgumentParser(prog='close', description='Close the vault.')
close_parser.add_argument('--force', dest='force', action='store_true', help='discard unsaved changes')


def read_master_password(params, prompt='Master Password'):
    if params.password is None:
        params.password = getpass.getpass(prompt='...' + prompt.rjust(20) + ': ', stream=None)
    return params.password


class VaultCreateCommand(Command):
    def get_parser(self):
        return create_parser

    def requires_vault(self):
        return False

    def execute(self, params, **kwargs):
        if params.vault is not None and params.modified:
            raise CommandError('create', 'The current vault has unsaved changes. Save or close it first.')
        name = kwargs.get('name') or ''
        params.clear_session()
        params.vault = create_vault(name, with_default_groups=not kwargs.get('no_default_groups'))
        params.vault_filename = kwargs.get('filename')
        params.modified = True
        logging.info('Vault "%s" created', name)


class VaultOpenCommand(Command):
    def get_parser(self):
        return open_parser

    def requires_vault(self):
        return False

    def execute(self, params, **kwargs):
        filename = kwargs.get('filename') or params.default_vault_file
        if not filename:
            raise CommandError('open', 'KDBX file name is required')
        filename = os.path.expanduser(filename)
        if not os.path.isfile(filename):
            raise CommandError('open', f'File "{filename}" does not exist')
        keyfile = kwargs.get('keyfile') or params.keyfile
        password = read_master_password(params)
        try:
            vault = params.get_container().unlock(filename, password, keyfile)
        except VaultError:
            params.password = None
            raise
        params.clear_session()
        params.vault = vault
        params.vault_filename = filename
        params.keyfile = keyfile
        logging.info('Vault "%s" opened: %d groups, %d entries', vault.name,
                     sum(1 for _ in iter_groups(vault.root)), sum(1 for _ in iter_entries(vault.root)))


class VaultSaveCommand(Command):
    def get_parser(self):
        return save_parser

    def execute(self, params, **kwargs):
        filename = kwargs.get('filename') or params.vault_filename
        if not filename:
            raise CommandError('save', 'KDBX file name is required')
        keyfile = kwargs.get('keyfile') or params.keyfile
        password = read_master_password(params)
        params.get_container().save(params.vault, filename, password, keyfile)
        params.vault_filename = filename
        params.keyfile = keyfile
        params.modified = False
        logging.info('Vault saved to "%s"', filename)


class VaultCloseCommand(Command):
    def get_parser(self):
        return close_parser

    def execute(self, params, **kwargs):
        if params.modified and not kwargs.get('force'):
            answer = 'y' if params.batch_mode else user_choice('Discard unsaved changes?', 'yn', default='n')
            if answer.lower() != 'y':
                return
        params.clear_session()
        params.vault_filename = None
        params.password = None
