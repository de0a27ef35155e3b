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

import logging
import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.enums import EditingMode
from prompt_toolkit.shortcuts import CompleteStyle

from . import display
from .commands import register_commands, commands, aliases, command_info
from .error import CommandError, Error
from .params import VaultParams
from .tree import group_path

register_commands(commands, aliases, command_info)


def display_command_help():
    alias_lookup = {x[1]: x[0] for x in aliases.items()}
    print(f'\n{display.bcolors.BOLD}Commands:{display.bcolors.ENDC}')
    for cmd, description in command_info.items():
        alias = alias_lookup.get(cmd)
        name = f'{cmd} ({alias})' if alias else cmd
        print(f'  {display.bcolors.OKGREEN}{name.ljust(16)}{display.bcolors.ENDC} {description}')
    print(f'  {"help".ljust(16)} Display this list')
    print(f'  {"quit (q)".ljust(16)} Exit')
    print('\nType "command -h" to display help on a command')


def command_and_args_from_cmd(command_line):
    args = ''
    pos = command_line.find(' ')
    if pos > 0:
        cmd = command_line[:pos]
        args = command_line[pos + 1:].strip()
    else:
        cmd = command_line.strip()

    return cmd, args


def do_command(params, command_line):    # type: (VaultParams, str) -> ...
    if command_line.lower() in ('h', 'help', '?'):
        display_command_help()
        return

    cmd, args = command_and_args_from_cmd(command_line)
    if not cmd:
        return
    orig_cmd = cmd
    if cmd in aliases and cmd not in commands:
        cmd = aliases[cmd]

    command = commands.get(cmd)
    if command is None:
        display_command_help()
        return

    if command.requires_vault() and params.vault is None:
        raise CommandError(orig_cmd, 'No vault is open. Use "open" or "create" first.')

    return command.execute_args(params, args, command=orig_cmd)


def runcommands(params, commands=None, quiet=False):    # type: (VaultParams, list, bool) -> int
    if commands is None:
        commands = params.commands

    error_no = 0
    for command in commands:
        if not quiet:
            logging.info('Executing [%s]...', command)
        try:
            result = do_command(params, command)
            if result is not None:
                print(result)
        except CommandError as e:
            error_no = 1
            msg = f'{e.command}: {e.message}' if e.command else f'{e.message}'
            logging.error(msg)
        except Error as e:
            error_no = 1
            logging.error('Vault Error: %s', e.message)
        except Exception as e:
            error_no = 1
            logging.debug(e, exc_info=True)
            logging.error('An unexpected error occurred: %s', sys.exc_info()[0])
    return error_no


def get_prompt(params):    # type: (VaultParams) -> str
    if params.batch_mode:
        return ''
    if params.vault is None:
        return 'No vault> '

    group = params.get_current_group()
    path = group_path(params.vault.root, group.uuid)
    name = params.vault.root.name or 'Vault'
    prompt = name + (path if path != '/' else '')
    if params.modified:
        prompt += '*'
    if len(prompt) > 40:
        prompt = '...' + prompt[-37:]
    return prompt + '> '


def read_command_with_continuation(prompt_session, params):
    """Read command with support for line continuation using backslash."""
    command_lines = []
    current_prompt = get_prompt(params)

    while True:
        if prompt_session is not None:
            line = prompt_session.prompt(current_prompt)
        else:
            line = input(current_prompt)

        stripped_line = line.rstrip()
        if stripped_line.endswith('\\'):
            line_content = stripped_line[:-1].strip()
            if line_content:
                command_lines.append(line_content)
            current_prompt = '... '
        else:
            if stripped_line:
                command_lines.append(stripped_line)
            break

    return ' '.join(command_lines)


def loop(params):  # type: (VaultParams) -> int
    error_no = 0
    suppress_errno = False

    logging.getLogger().setLevel(logging.DEBUG if params.debug else logging.WARNING if params.batch_mode else logging.INFO)
    prompt_session = None
    if not params.batch_mode:
        if os.isatty(0) and os.isatty(1):
            completer = WordCompleter(sorted(list(commands.keys()) + list(aliases.keys())))
            prompt_session = PromptSession(multiline=False,
                                           editing_mode=EditingMode.VI,
                                           completer=completer,
                                           complete_style=CompleteStyle.MULTI_COLUMN,
                                           complete_while_typing=False)
        display.welcome()
        if params.vault is None:
            logging.info('To open a vault type: open <file.kdbx>')

    while True:
        command = ''
        if len(params.commands) > 0:
            command = params.commands[0].strip()
            params.commands = params.commands[1:]

        try:
            if not command:
                command = read_command_with_continuation(prompt_session, params)

            if command.lower() == 'q' or command.lower() == 'quit':
                if params.modified and not params.batch_mode:
                    logging.warning('The vault has unsaved changes. Type "save" or "close --force" first.')
                    continue
                break

            suppress_errno = False
            command = command.strip()
            if command.startswith('@'):
                suppress_errno = True
                command = command[1:]
            if params.batch_mode:
                logging.info('> %s', command)
            error_no = 1
            result = do_command(params, command)
            error_no = 0
            if result:
                print(result)
        except EOFError:
            break
        except KeyboardInterrupt:
            pass
        except CommandError as e:
            if e.command:
                logging.warning('%s: %s', e.command, e.message)
            else:
                logging.warning('%s', e.message)
        except Error as e:
            logging.error('Vault Error: %s', e.message)
        except Exception as e:
            logging.debug(e, exc_info=True)
            logging.error('An unexpected error occurred: %s. Use --debug for verbose error output', e)

        if params.batch_mode and error_no != 0 and not suppress_errno:
            break

    if not params.batch_mode:
        logging.info('\nGoodbye.\n')

    return error_no
