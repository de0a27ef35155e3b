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
import datetime
import json
import logging
import os
from typing import Dict, Optional

from .base import Command, user_choice, resolve_group, resolve_entry
from .. import constants, generator
from ..display import print_entry
from ..error import CommandError
from ..fields import entry_to_form, entry_to_view, generate_otp_url, parse_totp_uri
from ..record import EntryFormData
from ..tree import add_entry, update_entry, delete_entry, restore_entry, group_path


def register_commands(commands):
    commands['add'] = RecordAddCommand()
    commands['edit'] = RecordEditCommand()
    commands['rm'] = RecordRemoveCommand()
    commands['restore'] = RecordRestoreCommand()
    commands['get'] = RecordGetCommand()


def register_command_info(aliases, command_info):
    aliases['g'] = 'get'
    for p in [get_parser, add_parser, edit_parser, rm_parser, restore_parser]:
        command_info[p.prog] = p.description


def add_entry_options(parser):
    parser.add_argument('-t', '--title', dest='title', action='store', help='entry title')
    parser.add_argument('-l', '--login', dest='login', action='store', help='login name')
    parser.add_argument('-e', '--email', dest='email', action='store', help='email address')
    parser.add_argument('-p', '--password', dest='password', action='store', help='password')
    parser.add_argument('-g', '--generate', dest='generate', action='store_true', help='generate a random password')
    parser.add_argument('--url', dest='url', action='store', help='website address')
    parser.add_argument('-n', '--notes', dest='notes', action='store', help='entry notes')
    parser.add_argument('--totp', dest='totp', action='store', help='TOTP secret or otpauth:// URL')
    parser.add_argument('--expires', dest='expires', action='store', metavar='YYYY-MM-DD',
                        help='expiration date. "never" clears it')
    parser.add_argument('--attach', dest='attachments', action='append', help='file to attach')
    parser.add_argument('fields', nargs='*', type=str, help='custom fields: name=value')


add_parser = argparse.ArgumentParser(prog='add', description='Add an entry to a group.')
add_parser.add_argument('--folder', dest='folder', action='store', help='group path or UUID to store the entry')
add_entry_options(add_parser)


edit_parser = argparse.ArgumentParser(prog='edit', description='Update an entry.')
edit_parser.add_argument('-r', '--record', dest='record', action='store', required=True,
                         help='entry path or UUID')
add_entry_options(edit_parser)


rm_parser = argparse.ArgumentParser(prog='rm', description='Move an entry to the recycle bin.')
rm_parser.add_argument('-f', '--force', dest='force', action='store_true', help='do not prompt')
rm_parser.add_argument('--permanent', dest='permanent', action='store_true',
                       help='remove the entry instead of recycling it')
rm_parser.add_argument('record', type=str, action='store', help='entry path or UUID')


restore_parser = argparse.ArgumentParser(prog='restore', description='Restore a recycled entry to its group.')
restore_parser.add_argument('record', type=str, action='store', help='entry path or UUID')


get_parser = argparse.ArgumentParser(prog='get', description='Display an entry.')
get_parser.add_argument('--format', dest='format', action='store', choices=['detail', 'json'],
                        default='detail', help='output format')
get_parser.add_argument('--unmask', dest='unmask', action='store_true', help='display secret values')
get_parser.add_argument('record', type=str, action='store', help='entry path or UUID')


def parse_custom_fields(fields, command):    # type: (list, str) -> Dict[str, str]
    result = {}
    for field in fields or []:
        name, sep, value = field.partition('=')
        name = name.strip()
        if not sep or not name:
            raise CommandError(command, f'Invalid custom field "{field}". Expected name=value')
        if name in constants.RESERVED_FIELDS:
            raise CommandError(command, f'Field name "{name}" is reserved. Use a different name')
        result[name] = value
    return result


def parse_expiration(value, command):
    if not value:
        return None
    try:
        dt = datetime.datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        raise CommandError(command, f'Invalid expiration date "{value}". Expected YYYY-MM-DD')
    return dt.replace(tzinfo=datetime.timezone.utc)


def parse_totp(value, command):    # type: (Optional[str], str) -> Optional[str]
    """Accepts a Base32 secret or an otpauth:// URL and returns the secret"""
    if not value:
        return value
    if value.startswith(constants.OTP_SCHEME):
        totp = parse_totp_uri(value)
        if totp is None or not totp.secret:
            raise CommandError(command, 'TOTP URL does not contain a secret')
        if (totp.algorithm, totp.digits, totp.period) != ('SHA1', 6, 30):
            logging.warning('TOTP settings %s, %d digits, %ds are replaced with the defaults',
                            totp.algorithm, totp.digits, totp.period)
        value = totp.secret
    if generate_otp_url(value, constants.OTP_DEFAULT_LABEL) is None:
        raise CommandError(command, 'Invalid TOTP secret. Expected Base32 string')
    return value


def resolve_password(kwargs, command):    # type: (dict, str) -> Optional[str]
    if kwargs.get('generate'):
        if kwargs.get('password'):
            raise CommandError(command, '"--password" and "--generate" cannot be used together')
        return generator.generate()
    return kwargs.get('password')


def load_attachments(filenames, command):    # type: (list, str) -> Dict[str, bytes]
    attachments = {}
    for filename in filenames:
        filename = os.path.expanduser(filename)
        if not os.path.isfile(filename):
            raise CommandError(command, f'File "{filename}" does not exist')
        with open(filename, 'rb') as f:
            attachments[os.path.basename(filename)] = f.read()
    return attachments


def get_entry(params, name, command):
    result = resolve_entry(params, name)
    if result is None:
        raise CommandError(command, f'Entry "{name}" not found')
    return result


class RecordAddCommand(Command):
    def get_parser(self):
        return add_parser

    def execute(self, params, **kwargs):
        title = kwargs.get('title')
        if not title:
            raise CommandError('add', 'Title parameter is required.')
        folder = kwargs.get('folder')
        group = resolve_group(params, folder)
        if group is None:
            raise CommandError('add', f'Group "{folder}" not found')

        data = EntryFormData()
        data.title = title
        data.username = kwargs.get('login') or ''
        data.email = kwargs.get('email') or ''
        data.password = resolve_password(kwargs, 'add') or ''
        data.url = kwargs.get('url') or ''
        data.notes = kwargs.get('notes') or ''
        data.totp_secret = parse_totp(kwargs.get('totp'), 'add') or ''
        data.custom_fields = parse_custom_fields(kwargs.get('fields'), 'add')
        expires = kwargs.get('expires')
        if expires and expires != 'never':
            data.expiry_time = parse_expiration(expires, 'add')
        if kwargs.get('attachments'):
            data.attachments = load_attachments(kwargs['attachments'], 'add')

        entry = add_entry(params.vault, group.uuid, data)
        params.modified = True
        return str(entry.uuid)


class RecordEditCommand(Command):
    def get_parser(self):
        return edit_parser

    def execute(self, params, **kwargs):
        group, entry = get_entry(params, kwargs.get('record'), 'edit')
        data = entry_to_form(entry, group_uuid=str(group.uuid))

        if kwargs.get('title'):
            data.title = kwargs['title']
        for key, attr in (('login', 'username'), ('email', 'email'), ('url', 'url'), ('notes', 'notes')):
            value = kwargs.get(key)
            if value is not None:
                setattr(data, attr, value)
        password = resolve_password(kwargs, 'edit')
        if password is not None:
            data.password = password
        totp = parse_totp(kwargs.get('totp'), 'edit')
        if totp is not None:
            data.totp_secret = totp

        expires = kwargs.get('expires')
        if expires == 'never':
            data.expiry_time = None
        elif expires:
            data.expiry_time = parse_expiration(expires, 'edit')

        custom = dict(data.custom_fields or {})
        for name, value in parse_custom_fields(kwargs.get('fields'), 'edit').items():
            if value:
                custom[name] = value
            else:
                custom.pop(name, None)
        data.custom_fields = custom

        if kwargs.get('attachments'):
            attachments = dict(entry.attachments)
            attachments.update(load_attachments(kwargs['attachments'], 'edit'))
            data.attachments = attachments

        update_entry(params.vault, data)
        params.modified = True


class RecordRemoveCommand(Command):
    def get_parser(self):
        return rm_parser

    def execute(self, params, **kwargs):
        vault = params.vault
        group, entry = get_entry(params, kwargs.get('record'), 'rm')
        permanent = kwargs.get('permanent') or False
        if permanent and not kwargs.get('force') and not params.batch_mode:
            answer = user_choice(f'Permanently delete entry "{entry.title}"?', 'yn', default='n')
            if answer.lower() != 'y':
                return
        recycle_bin = delete_entry(vault, entry.uuid, permanent=permanent)
        if recycle_bin is not None:
            logging.info('Entry "%s" moved to "%s"', entry.title, recycle_bin.name)
        else:
            logging.info('Entry "%s" deleted', entry.title)
        params.modified = True


class RecordRestoreCommand(Command):
    def get_parser(self):
        return restore_parser

    def execute(self, params, **kwargs):
        vault = params.vault
        group, entry = get_entry(params, kwargs.get('record'), 'restore')
        if not vault.is_recycle_bin(group):
            raise CommandError('restore', f'Entry "{entry.title}" is not in the recycle bin')
        target = restore_entry(vault, entry.uuid)
        logging.info('Entry "%s" restored to "%s"', entry.title, group_path(vault.root, target.uuid))
        params.modified = True


class RecordGetCommand(Command):
    def get_parser(self):
        return get_parser

    def execute(self, params, **kwargs):
        group, entry = get_entry(params, kwargs.get('record'), 'get')
        view = entry_to_view(entry)
        path = group_path(params.vault.root, group.uuid)
        unmask = kwargs.get('unmask') or params.unmask_all
        if kwargs.get('format') == 'json':
            ro = {
                'uuid': view.uuid,
                'title': view.title,
                'group': path,
                'username': view.username,
                'email': view.email,
                'url': view.url,
                'notes': view.notes,
                'custom': view.custom,
                'tags': view.tags,
                'attachments': list(view.attachments.keys()),
            }
            if view.password:
                audit = generator.audit_password(view.password)
                ro['password_strength'] = {'score': audit.score, 'rating': audit.label, 'entropy': audit.entropy}
            totp = parse_totp_uri(view.otp_url)
            if totp:
                ro['totp'] = {'algorithm': totp.algorithm, 'digits': totp.digits, 'period': totp.period}
            if unmask:
                ro['password'] = view.password
                ro['otp_url'] = view.otp_url
            if view.expiry_time:
                ro['expiry_time'] = view.expiry_time.isoformat()
            return json.dumps(ro, indent=2)
        print_entry(view, group_path=path, unmask=unmask)
