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

__version__ = '1.2.0'
