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
from typing import Optional

from .base import Command, user_choice, try_resolve_path, resolve_group, resolve_entry
from ..display import formatted_tree, formatted_groups, formatted_entries
from ..error import CommandError
from ..importer.importer import path_components, PathDelimiter
from ..params import VaultParams
from ..record import VaultGroup
from ..tree import (add_group, update_group, delete_group, move_entry, group_path, list_groups_ordered,
                    iter_groups, iter_entries)


def register_commands(commands):
    commands['ls'] = FolderListCommand()
    commands['cd'] = FolderCdCommand()
    commands['tree'] = FolderTreeCommand()
    commands['mkdir'] = FolderMakeCommand()
    commands['rndir'] = FolderRenameCommand()
    commands['rmdir'] = FolderRemoveCommand()
    commands['mv'] = FolderMoveCommand()


def register_command_info(aliases, command_info):
    for p in [cd_parser, ls_parser, tree_parser, mkdir_parser, rndir_parser, rmdir_parser, mv_parser]:
        command_info[p.prog] = p.description


ls_parser = argparse.ArgumentParser(prog='ls', description='List group contents.')
ls_parser.add_argument('-f', '--folders', dest='folders_only', action='store_true', help='display groups only')
ls_parser.add_argument('-r', '--records', dest='records_only', action='store_true', help='display entries only')
ls_parser.add_argument('-v', '--verbose', dest='verbose', action='store_true', help='verbose output')
ls_parser.add_argument('folder', nargs='?', type=str, action='store', help='group path or UUID')


cd_parser = argparse.ArgumentParser(prog='cd', description='Change current group.')
cd_parser.add_argument('folder', nargs='?', type=str, action='store', help='group path or UUID')


tree_parser = argparse.ArgumentParser(prog='tree', description='Display the group structure.')
tree_parser.add_argument('-v', '--verbose', dest='verbose', action='store_true', help='print UUIDs')
tree_parser.add_argument('-r', '--records', action='store_true', help='show entries within each group')
tree_parser.add_argument('folder', nargs='?', type=str, action='store', help='group path or UUID')


mkdir_parser = argparse.ArgumentParser(prog='mkdir', description='Create a group.')
mkdir_parser.add_argument('--icon', dest='icon', type=int, action='store', help='group icon number')
mkdir_parser.add_argument('--allow-add', dest='allow_add', action='store', choices=['on', 'off'],
                          help='whether entries may be added to the group')
mkdir_parser.add_argument('folder', type=str, action='store', help='group path')


rndir_parser = argparse.ArgumentParser(prog='rndir', description='Rename or reconfigure a group.')
rndir_parser.add_argument('-n', '--name', dest='name', action='store', help='group new name')
rndir_parser.add_argument('--icon', dest='icon', type=int, action='store', help='group icon number')
rndir_parser.add_argument('--allow-add', dest='allow_add', action='store', choices=['on', 'off'],
                          help='whether entries may be added to the group')
rndir_parser.add_argument('folder', type=str, action='store', help='group path or UUID')


rmdir_parser = argparse.ArgumentParser(prog='rmdir', description='Remove a group and its contents.')
rmdir_parser.add_argument('-f', '--force', dest='force', action='store_true', help='remove group without prompting')
rmdir_parser.add_argument('folder', type=str, action='store', help='group path or UUID')


mv_parser = argparse.ArgumentParser(prog='mv', description='Move an entry or group to another group.')
mv_parser.add_argument('src', type=str, action='store', help='source path to group/entry or UUID')
mv_parser.add_argument('dst', type=str, action='store', help='destination group or UUID')


def allow_add_flag(value):    # type: (Optional[str]) -> Optional[bool]
    if value is None:
        return None
    return value == 'on'


def find_group_view(params, group_uuid):    # type: (VaultParams, str) -> Optional[VaultGroup]
    views = list_groups_ordered(params.vault)
    stack = list(views)
    while stack:
        view = stack.pop()
        if view.uuid == group_uuid:
            return view
        stack.extend(view.subgroups)
    return None


def get_group(params, name, command):
    group = resolve_group(params, name)
    if group is None:
        raise CommandError(command, f'Group "{name}" not found')
    return group


class FolderListCommand(Command):
    def get_parser(self):
        return ls_parser

    def execute(self, params, **kwargs):
        group = get_group(params, kwargs.get('folder'), 'ls')
        view = find_group_view(params, str(group.uuid))
        if view is None:
            return
        verbose = kwargs.get('verbose') or False
        if not kwargs.get('records_only'):
            formatted_groups(view.subgroups, verbose=verbose)
        if not kwargs.get('folders_only'):
            if view.subgroups and view.entries and not kwargs.get('records_only'):
                print('')
            formatted_entries(view.entries, verbose=verbose)


class FolderCdCommand(Command):
    def get_parser(self):
        return cd_parser

    def execute(self, params, **kwargs):
        name = kwargs.get('folder')
        if not name:
            params.current_group = None
            return
        group = get_group(params, name, 'cd')
        params.current_group = None if group is params.vault.root else str(group.uuid)


class FolderTreeCommand(Command):
    def get_parser(self):
        return tree_parser

    def execute(self, params, **kwargs):
        name = kwargs.get('folder')
        group = get_group(params, name, 'tree') if name else params.vault.root
        view = find_group_view(params, str(group.uuid))
        if view:
            formatted_tree(view, show_entries=kwargs.get('records') or False, verbose=kwargs.get('verbose') or False)


class FolderMakeCommand(Command):
    def get_parser(self):
        return mkdir_parser

    def execute(self, params, **kwargs):
        name = kwargs.get('folder')
        if not name:
            raise CommandError('mkdir', 'Group name is required')
        base_group, rest = try_resolve_path(params, name)
        if not rest:
            logging.warning('mkdir: Group "%s" already exists', name)
            return

        icon = kwargs.get('icon')
        allow_add = allow_add_flag(kwargs.get('allow_add'))
        group = base_group
        for component in path_components(rest):
            group = add_group(params.vault, group.uuid, component, icon=icon, allow_add=allow_add)
        params.modified = True
        return str(group.uuid)


class FolderRenameCommand(Command):
    def get_parser(self):
        return rndir_parser

    def execute(self, params, **kwargs):
        group = get_group(params, kwargs.get('folder'), 'rndir')
        new_name = kwargs.get('name')
        icon = kwargs.get('icon')
        allow_add = allow_add_flag(kwargs.get('allow_add'))
        if not new_name and icon is None and allow_add is None:
            raise CommandError('rndir', 'New group name is required')
        update_group(params.vault, group.uuid, new_name or group.name, icon=icon, allow_add=allow_add)
        params.modified = True


class FolderRemoveCommand(Command):
    def get_parser(self):
        return rmdir_parser

    def execute(self, params, **kwargs):
        vault = params.vault
        group = get_group(params, kwargs.get('folder'), 'rmdir')
        if group is vault.root:
            raise CommandError('rmdir', 'Cannot remove the root group')

        if not kwargs.get('force') and not params.batch_mode:
            group_count = sum(1 for _ in iter_groups(group)) - 1
            entry_count = sum(1 for _ in iter_entries(group))
            path = group_path(vault.root, group.uuid)
            np = user_choice(f'Remove group "{path}" with {group_count} subgroup(s) and {entry_count} entry(ies)?',
                             'yn', default='n')
            if np.lower() != 'y':
                return

        current = params.get_current_group()
        delete_group(vault, group.uuid)
        if current is group or (current and current.uuid not in {x.uuid for x in iter_groups(vault.root)}):
            params.current_group = None
        params.modified = True


class FolderMoveCommand(Command):
    def get_parser(self):
        return mv_parser

    def execute(self, params, **kwargs):
        vault = params.vault
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            raise CommandError('mv', 'Source and destination are required')

        dst_group = get_group(params, dst, 'mv')
        src_entry = resolve_entry(params, src)
        if src_entry:
            _, entry = src_entry
            move_entry(vault, entry.uuid, dst_group.uuid)
            params.modified = True
            return

        src_group = resolve_group(params, src.rstrip(PathDelimiter) or PathDelimiter)
        if src_group is None:
            raise CommandError('mv', f'Source "{src}" not found')
        if src_group is vault.root:
            raise CommandError('mv', 'Cannot move the root group')
        update_group(vault, src_group.uuid, src_group.name, parent_uuid=dst_group.uuid)
        params.modified = True
