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

class Error(Exception):
    """Base class for exceptions in this module."""
    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class CommandError(Error):
    def __init__(self, command, message):
        super().__init__(message)
        self.command = command

    def __str__(self):
        if self.command:
            return f'{self.command}: {self.message}'
        else:
            return super().__str__()


class VaultError(Error):
    """Errors raised by the vault tree engine and the importers.
    Messages never carry password or OTP material.
    """
    pass


class NotFoundError(VaultError):
    pass


class InvalidOperationError(VaultError):
    pass


class CycleDetectedError(VaultError):
    pass


class DecryptionFailedError(VaultError):
    pass


class ParseFailedError(VaultError):
    pass
