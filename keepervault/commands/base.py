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

import abc
import argparse
import collections
import logging
import shlex
from typing import Any, Dict, Optional, Tuple

from ..error import CommandError
from ..importer.importer import path_components, PathDelimiter
from ..params import VaultParams
from ..tree import as_uuid, find_group, find_entry_owner, find_parent_group
from ..vault import Group, Entry

commands = {}                # type: Dict[str, Command]
aliases = {}                 # type: Dict[str, str]
command_info = collections.OrderedDict()


class ParseError(Exception):
    pass


def register_commands(commands, aliases, command_info):
    from .vault import register_commands as vault_commands, register_command_info as vault_command_info
    vault_commands(commands)
    vault_command_info(aliases, command_info)

    from .folder import register_commands as folder_commands, register_command_info as folder_command_info
    folder_commands(commands)
    folder_command_info(aliases, command_info)

    from .record import register_commands as record_commands, register_command_info as record_command_info
    record_commands(commands)
    record_command_info(aliases, command_info)

    from .utils import register_commands as utils_commands, register_command_info as utils_command_info
    utils_commands(commands)
    utils_command_info(aliases, command_info)

    from ..importer.commands import register_commands as importer_commands, register_command_info as importer_command_info
    importer_commands(commands)
    importer_command_info(aliases, command_info)


def user_choice(question, choice, default='', show_choice=True):
    choices = [ch.lower() for ch in choice]

    while True:
        pr = question
        if show_choice:
            pr = pr + ' [' + '/'.join(choices) + ']'

        pr = pr + ': '
        result = input(pr)

        if len(result) == 0:
            return default

        if any(map(lambda x: x.upper() == result.upper(), choices)):
            return result

        logging.error('Error: invalid input')


def raise_parse_exception(m):
    raise ParseError(m)


def suppress_exit(*args):
    raise ParseError()


def try_resolve_path(params, path):    # type: (VaultParams, Optional[str]) -> Tuple[Group, str]
    """Walks the existing part of a group path.
    Returns the deepest group found and the part of the path that does not exist yet.
    """
    vault = params.vault
    group = params.get_current_group()
    if not path:
        return group, ''
    if path.startswith(PathDelimiter) and not path.startswith(2*PathDelimiter):
        group = vault.root
        path = path[1:]

    components = list(path_components(path))
    while components:
        comp = components[0]
        if comp == '.':
            pass
        elif comp == '..':
            group = find_parent_group(vault.root, group.uuid) or vault.root
        else:
            subgroup = next((x for x in group.groups if x.name == comp), None)
            if subgroup is None:
                break
            group = subgroup
        components.pop(0)

    rest = PathDelimiter.join(x.replace(PathDelimiter, 2*PathDelimiter) for x in components)
    return group, rest


def resolve_group(params, name):    # type: (VaultParams, Optional[str]) -> Optional[Group]
    if not name:
        return params.get_current_group()
    if as_uuid(name):
        group = find_group(params.vault.root, name)
        if group:
            return group
    group, rest = try_resolve_path(params, name)
    return None if rest else group


def resolve_entry(params, name):    # type: (VaultParams, str) -> Optional[Tuple[Group, Entry]]
    if as_uuid(name):
        result = find_entry_owner(params.vault.root, name)
        if result:
            return result
    group_name, _, title = name.rpartition(PathDelimiter)
    if group_name or name.startswith(PathDelimiter):
        group = resolve_group(params, group_name or PathDelimiter)
    else:
        group = params.get_current_group()
    if group is None:
        return None
    matches = [x for x in group.entries if x.title == title]
    if len(matches) > 1:
        raise CommandError('', f'There are {len(matches)} entries titled "{title}". Use entry UUID.')
    return (group, matches[0]) if matches else None


class CliCommand(abc.ABC):
    @abc.abstractmethod
    def execute_args(self, params, args, **kwargs):   # type: (VaultParams, str, ...) -> Any
        pass

    def requires_vault(self):
        return True


class Command(CliCommand):
    def execute(self, params, **kwargs):     # type: (VaultParams, Any) -> Any
        raise NotImplementedError()

    def execute_args(self, params, args, **kwargs):
        # type: (Command, VaultParams, str, ...) -> Any
        try:
            d = {}
            d.update(kwargs)
            parser = self._get_parser_safe()
            args = '' if args is None else args
            if parser:
                opts = parser.parse_args(shlex.split(args))
                d.update(opts.__dict__)

            return self.execute(params, **d)
        except ParseError as e:
            if e.args and e.args[0]:
                logging.error(e)

    def get_parser(self):   # type: () -> Optional[argparse.ArgumentParser]
        return None

    def _ensure_parser(func):
        def _wrapper(self):
            parser = func(self)
            if parser:
                if parser.exit != suppress_exit:
                    parser.exit = suppress_exit
                if parser.error != raise_parse_exception:
                    parser.error = raise_parse_exception
            return parser
        return _wrapper

    @_ensure_parser
    def _get_parser_safe(self):
        return self.get_parser()
    _ensure_parser = staticmethod(_ensure_parser)
