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
import logging
import os
import re
import shlex
import sys
from typing import Optional

from . import __version__
from . import cli
from .params import VaultParams, get_default_path


def get_params_from_config(config_filename=None):    # type: (Optional[str]) -> VaultParams
    if os.getenv('KEEPERVAULT_DEBUG'):
        logging.getLogger().setLevel(logging.DEBUG)
        logging.info('Debug ON')

    def get_env_config():
        path = os.getenv('KEEPERVAULT_CONFIG_FILE')
        if path:
            logging.debug(f'Setting config file from KEEPERVAULT_CONFIG_FILE env variable {path}')
        return path

    config_filename = config_filename or get_env_config()
    if not config_filename:
        config_filename = 'config.json'
        if not os.path.isfile(config_filename):
            config_filename = os.path.join(get_default_path(), config_filename)
        else:
            config_filename = os.path.join(os.getcwd(), config_filename)
    else:
        config_filename = os.path.expanduser(config_filename)

    params = VaultParams(config_filename)
    if os.getenv('KEEPERVAULT_DEBUG'):
        params.debug = True
    if os.path.exists(config_filename):
        try:
            with open(config_filename) as config_file:
                params.config = json.load(config_file)
        except IOError as ioe:
            logging.warning('Error: Unable to open config file %s: %s', config_filename, ioe)
        except ValueError:
            logging.error('Unable to parse JSON configuration file "%s"', os.path.abspath(config_filename))
            raise

        config = params.config
        if config.get('commands'):
            params.commands.extend(config['commands'])
        if config.get('debug') is True:
            params.debug = True
        if config.get('batch_mode') is True:
            params.batch_mode = True
        if config.get('unmask_all') is True:
            params.unmask_all = True
        if config.get('keyfile'):
            params.keyfile = os.path.expanduser(config['keyfile'])

    return params


def usage(m):
    print(m)
    parser.print_help()
    cli.display_command_help()
    sys.exit(1)


parser = argparse.ArgumentParser(prog='keepervault', add_help=False, allow_abbrev=False)
parser.add_argument('--vault', '-kv', dest='vault', action='store', help='KDBX file to open.')
parser.add_argument('--password', '-kp', dest='password', action='store', help='Master password for the vault.')
parser.add_argument('--keyfile', '-kk', dest='keyfile', action='store', help='Key file for the vault.')
parser.add_argument('--version', dest='version', action='store_true', help='Display version')
parser.add_argument('--config', dest='config', action='store', help='Config file to use')
parser.add_argument('--debug', dest='debug', action='store_true', help='Turn on debug mode')
parser.add_argument('--batch-mode', dest='batch_mode', action='store_true', help='Run in batch or basic UI mode.')
unmask_help = 'Disable default masking of sensitive information (e.g., passwords) in output'
parser.add_argument('--unmask-all', action='store_true', help=unmask_help)
parser.add_argument('command', nargs='?', type=str, action='store', help='Command')
parser.add_argument('options', nargs='*', action='store', help='Options')
parser.error = usage


def main():
    logging.basicConfig(format='%(message)s')

    sys.argv[0] = re.sub(r'(-script\.pyw?|\.exe)?$', '', sys.argv[0])
    opts, flags = parser.parse_known_args(sys.argv[1:])

    params = get_params_from_config(opts.config)

    if opts.batch_mode:
        params.batch_mode = True

    if opts.debug:
        params.debug = opts.debug

    logging.getLogger().setLevel(logging.DEBUG if params.debug else logging.WARNING if params.batch_mode else logging.INFO)

    if opts.unmask_all:
        params.unmask_all = opts.unmask_all

    if opts.vault:
        params.config['vault'] = opts.vault

    if opts.keyfile:
        params.keyfile = os.path.expanduser(opts.keyfile)

    if opts.password:
        params.password = opts.password
    else:
        pwd = os.getenv('KEEPERVAULT_PASSWORD')
        if pwd:
            params.password = pwd

    if opts.version:
        print(f'Keeper Vault Commander, version {__version__}')
        return

    if flags and len(flags) > 0:
        if flags[0] in ('-h', '--help'):
            flags.clear()
            opts.command = '?'
    elif opts.command == 'help' and len(opts.options) == 0:
        opts.command = '?'
    if (opts.command or '') == '?':
        usage('')

    if params.default_vault_file and opts.command not in ('create', 'open'):
        params.commands.insert(0, 'open')

    if not opts.command:
        opts.command = 'shell'

    if opts.command in {'shell', '-'}:
        if opts.command == '-':
            params.batch_mode = True
    elif os.path.isfile(opts.command):
        with open(opts.command, 'r') as f:
            lines = f.readlines()
            params.commands.extend([x.strip() for x in lines])
        params.commands.append('q')
        params.batch_mode = True
    else:
        flags = ' '.join([shlex.quote(x) for x in flags]) if flags is not None else ''
        options = ' '.join([shlex.quote(x) for x in opts.options]) if opts.options is not None else ''
        options = ' -- ' + options if options.startswith('-') else options
        command = ' '.join([opts.command, options, flags])
        params.commands.append(command)
        params.commands.append('q')
        params.batch_mode = True

    errno = cli.loop(params)
    sys.exit(errno)


if __name__ == '__main__':
    main()
