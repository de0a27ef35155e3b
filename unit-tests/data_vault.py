import types

from keepervault import constants
from keepervault.kdbx import create_vault, KdbxContainer
from keepervault.params import VaultParams
from keepervault.record import EntryFormData
from keepervault.tree import add_entry, add_group
from keepervault.vault import Vault, Group

VAULT_PASSWORD = 'Sample Vault Password'
TOTP_SECRET = 'JBSWY3DPEHPK3PXP'


def get_vault():    # type: () -> Vault
    """Root
        General
        Internet
            Social
                Forums
        eMail
        Homebanking
    """
    vault = create_vault('Sample', with_default_groups=False)
    root = vault.root
    general = add_group(vault, root.uuid, 'General')
    internet = add_group(vault, root.uuid, 'Internet')
    social = add_group(vault, internet.uuid, 'Social')
    add_group(vault, social.uuid, 'Forums')
    email = add_group(vault, root.uuid, 'eMail')
    bank = add_group(vault, root.uuid, 'Homebanking')

    add_entry(vault, general.uuid, EntryFormData(title='Router', username='admin', password='r0uter'))
    add_entry(vault, email.uuid, EntryFormData(title='Gmail', username='me@x.com', password='Secr3t!',
                                               url='https://gmail.com', totp_secret=TOTP_SECRET))
    add_entry(vault, bank.uuid, EntryFormData(title='Bank', username='u', password='p', email='me@bank.com',
                                              url='https://bank.com', custom_fields={'PIN': '1234'}))
    add_entry(vault, social.uuid, EntryFormData(title='Forum', username='poster', password='f0rum'))
    return vault


def get_group(vault, name):    # type: (Vault, str) -> Group
    stack = [vault.root]
    while stack:
        group = stack.pop()
        if group.name == name:
            return group
        stack.extend(group.groups)
    raise KeyError(name)


def tree_snapshot(group):    # type: (Group) -> tuple
    """Structure of a tree: names, uuids, entry uuids and child order"""
    return (group.uuid, group.name, tuple(x.uuid for x in group.entries),
            tuple(tree_snapshot(x) for x in group.groups))


def get_params(vault=None):    # type: (Vault) -> VaultParams
    params = VaultParams()
    params.vault = vault or get_vault()
    params.password = VAULT_PASSWORD
    params.batch_mode = True
    params.container = KdbxContainer(opener=lambda *_: None, creator=lambda *_: None)
    return params


def fake_kp_entry(title, username='', password='', otp=None, custom=None, history=None, **kwargs):
    entry = types.SimpleNamespace(uuid=kwargs.get('uuid'), title=title, username=username, password=password,
                                  url=kwargs.get('url'), notes=kwargs.get('notes'), otp=otp,
                                  custom_properties=custom or {}, tags=[], icon=None, expires=False,
                                  expiry_time=None, attachments=[], history=history or [])
    return entry


def fake_kp_group(name, entries=None, subgroups=None, **kwargs):
    return types.SimpleNamespace(uuid=kwargs.get('uuid'), name=name, icon=str(constants.ICON_FOLDER), notes=None,
                                 entries=entries or [], subgroups=subgroups or [])


def fake_kp(root):
    return types.SimpleNamespace(root_group=root)
