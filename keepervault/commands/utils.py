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
import json
from typing import Dict, List

from .base import Command
from ..error import CommandError
from ..generator import (RandomPasswordGenerator, PassphraseGenerator, audit_password,
                         DEFAULT_PASSWORD_LENGTH, DEFAULT_WORD_COUNT)


def register_commands(commands):
    commands['generate'] = GenerateCommand()


def register_command_info(aliases, command_info):
    aliases['gen'] = 'generate'
    command_info[generate_parser.prog] = generate_parser.description


generate_parser = argparse.ArgumentParser(prog='generate', description='Generate a new password')
generate_parser.add_argument('--quiet', '-q', dest='quiet', action='store_true', help='Only print password list')
generate_parser.add_argument(
    '--format', '-f', dest='output_format', action='store', choices=['table', 'json'],
    default='table', help='Output format for displaying password and strength'
)
generate_parser.add_argument(
    '--number', '-n', type=int, dest='number', action='store', help='Number of passwords', default=1
)

random_group = generate_parser.add_argument_group('Random')
random_group.add_argument(
    '--count', '-c', type=int, dest='length', action='store', help='Length of password',
    default=DEFAULT_PASSWORD_LENGTH
)
random_group.add_argument('--no-uppercase', dest='no_uppercase', action='store_true', help='Exclude uppercase letters')
random_group.add_argument('--no-lowercase', dest='no_lowercase', action='store_true', help='Exclude lowercase letters')
random_group.add_argument('--no-digits', dest='no_digits', action='store_true', help='Exclude digits')
random_group.add_argument('--no-symbols', dest='no_symbols', action='store_true', help='Exclude symbols')

passphrase_group = generate_parser.add_argument_group('Passphrase')
passphrase_group.add_argument(
    '--words', '-w', type=int, dest='words', action='store',
    help=f'Generate a passphrase of this many words (default {DEFAULT_WORD_COUNT})'
)
passphrase_group.add_argument('--delimiter', '-dl', dest='delimiter', action='store', default='-',
                              help='Passphrase word delimiter')


class GenerateCommand(Command):
    def get_parser(self):
        return generate_parser

    def requires_vault(self):
        return False

    def execute(self, params, number=None, length=None, output_format=None, quiet=False,
                return_result=False, **kwargs):
        if isinstance(kwargs.get('words'), int):
            kpg = PassphraseGenerator(kwargs['words'], delimiter=kwargs.get('delimiter') or '-')
        else:
            try:
                kpg = RandomPasswordGenerator(length=length or DEFAULT_PASSWORD_LENGTH,
                                              caps=not kwargs.get('no_uppercase'),
                                              lower=not kwargs.get('no_lowercase'),
                                              digits=not kwargs.get('no_digits'),
                                              symbols=not kwargs.get('no_symbols'))
            except ValueError as e:
                raise CommandError('generate', str(e))

        passwords = []    # type: List[Dict]
        for _ in range(max(number or 1, 1)):
            password = kpg.generate()
            audit = audit_password(password)
            passwords.append({'password': password, 'strength': audit.score, 'rating': audit.label})

        if quiet:
            formatted_output = '\n'.join(p['password'] for p in passwords)
        elif output_format == 'json':
            formatted_output = json.dumps(passwords, indent=2)
        else:
            format_template = '{count:<5}{strength:<13}{rating:<11}{password}'
            header = format_template.format(count='', strength='Strength(%)', rating='Rating', password='Password')
            password_output = [format_template.format(count=i, **p) for i, p in enumerate(passwords, start=1)]
            formatted_output = header + '\n' + '\n'.join(password_output)

        print(formatted_output)
        if return_result:
            return passwords
