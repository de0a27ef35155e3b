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

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .vault import Vault, Group


def get_default_path():    # type: () -> Path
    default_path = Path.home().joinpath('.keepervault')
    default_path.mkdir(parents=True, exist_ok=True)
    return default_path


class VaultParams:
    def __init__(self, config_filename='', config=None):
        self.config_filename = config_filename
        self.config = config or {}       # type: Dict[str, Any]
        self.debug = False
        self.batch_mode = False
        self.unmask_all = False
        self.commands = []               # type: List[str]
        self.vault = None                # type: Optional[Vault]
        self.vault_filename = None       # type: Optional[str]
        self.password = None             # type: Optional[str]
        self.keyfile = None              # type: Optional[str]
        self.current_group = None        # type: Optional[str]
        self.container = None
        self.modified = False

    def clear_session(self):
        self.vault = None
        self.current_group = None
        self.modified = False

    def get_current_group(self):    # type: () -> Optional[Group]
        if self.vault is None:
            return None
        from .tree import find_group
        return find_group(self.vault.root, self.current_group) or self.vault.root

    def get_container(self):
        if self.container is None:
            from .kdbx import default_container
            backups = self.config.get('backups')
            self.container = default_container() if backups is None else default_container(backups=int(backups))
        return self.container

    @property
    def default_vault_file(self):    # type: () -> Optional[str]
        filename = self.config.get('vault')
        return os.path.expanduser(filename) if filename else None
