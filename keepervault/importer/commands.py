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
import logging

from . import imp_exp
from ..commands.base import Command
from ..error import CommandError


def register_commands(commands):
    commands['import'] = RecordImportCommand()


def register_command_info(aliases, command_info):
    for p in [import_parser]:
        command_info[p.prog] = p.description


import_parser = argparse.ArgumentParser(prog='import', description='Import data from a local file into the vault.')
import_parser.add_argument(
    '--format', choices=['csv', 'lastpass', 'apple', 'chrome', 'firefox', 'bitwarden', 'keepass'],
    required=True, help='file format')
import_parser.add_argument('--folder', dest='import_into', action='store',
                           help='import into a separate group.')
import_parser.add_argument('--dry-run', dest='dry_run', action='store_true',
                           help='display entries to be imported without importing them')
import_parser.add_argument('--password', dest='password', action='store',
                           help='master password of the KeePass file')
import_parser.add_argument('--keyfile', dest='keyfile', action='store', help='key file of the KeePass file')
import_parser.add_argument('name', type=str, help='file name')


class RecordImportCommand(Command):
    def get_parser(self):
        return import_parser

    def execute(self, params, **kwargs):
        import_format = kwargs.get('format')
        import_name = kwargs.get('name')
        if not import_format:
            raise CommandError('import', '"--format" parameter is mandatory')
        if not import_name:
            raise CommandError('import', '"name" parameter is mandatory')

        kwargs.pop('format', None)
        kwargs.pop('name', None)
        logging.info('Processing... please wait.')
        imp_exp._import(params, import_format, import_name, **kwargs)
