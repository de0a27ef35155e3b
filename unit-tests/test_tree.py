import uuid
from unittest import TestCase

import pytest

from data_vault import get_vault, get_group, tree_snapshot
from keepervault import constants, tree
from keepervault.error import NotFoundError, InvalidOperationError, CycleDetectedError
from keepervault.record import EntryFormData
from keepervault.vault import Group


def count_occurrences(root, group_uuid):
    return sum(1 for x in tree.iter_groups(root) if x.uuid == group_uuid)


class TestTreeLookup(TestCase):
    def test_find_group_reachable(self):
        vault = get_vault()
        for group in tree.iter_groups(vault.root):
            self.assertIs(tree.find_group(vault.root, group.uuid), group)
            self.assertIs(tree.find_group(vault.root, str(group.uuid)), group)

    def test_find_group_unreachable(self):
        vault = get_vault()
        self.assertIsNone(tree.find_group(vault.root, Group('Detached').uuid))
        self.assertIsNone(tree.find_group(vault.root, 'not a uuid'))
        self.assertIsNone(tree.find_group(vault.root, None))

    def test_preorder_walk(self):
        vault = get_vault()
        names = [x.name for x in tree.iter_groups(vault.root)]
        self.assertEqual(names, ['Sample', 'General', 'Internet', 'Social', 'Forums', 'eMail', 'Homebanking'])

    def test_deep_tree(self):
        vault = get_vault()
        parent = vault.root
        for i in range(1200):
            parent = vault.create_group(parent, f'Level {i}')
        self.assertIs(tree.find_group(vault.root, parent.uuid), parent)
        self.assertEqual(tree.group_path(vault.root, parent.uuid).count('/'), 1200)

    def test_find_entry_owner(self):
        vault = get_vault()
        email = get_group(vault, 'eMail')
        gmail = email.entries[0]
        group, entry = tree.find_entry_owner(vault.root, str(gmail.uuid))
        self.assertIs(group, email)
        self.assertIs(entry, gmail)
        self.assertIsNone(tree.find_entry_owner(vault.root, uuid.uuid4()))

    def test_find_parent_group(self):
        vault = get_vault()
        social = get_group(vault, 'Social')
        self.assertIs(tree.find_parent_group(vault.root, social.uuid), get_group(vault, 'Internet'))
        self.assertIsNone(tree.find_parent_group(vault.root, vault.root.uuid))

    def test_group_path(self):
        vault = get_vault()
        forums = get_group(vault, 'Forums')
        self.assertEqual(tree.group_path(vault.root, forums.uuid), '/Internet/Social/Forums')
        self.assertEqual(tree.group_path(vault.root, vault.root.uuid), '/')


class TestGroupMutation(TestCase):
    def test_add_group(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        group = tree.add_group(vault, general.uuid, 'Wifi', icon=12, allow_add=False)
        self.assertIs(general.groups[-1], group)
        self.assertEqual(group.icon, 12)
        self.assertFalse(group.allow_add)

        with self.assertRaises(NotFoundError):
            tree.add_group(vault, uuid.uuid4(), 'Orphan')

    def test_rename_group(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        tree.rename_group(vault, general.uuid, 'Misc')
        self.assertEqual(general.name, 'Misc')
        with self.assertRaises(NotFoundError):
            tree.rename_group(vault, uuid.uuid4(), 'Misc')

    def test_move_group(self):
        vault = get_vault()
        social = get_group(vault, 'Social')
        internet = get_group(vault, 'Internet')
        general = get_group(vault, 'General')

        tree.update_group(vault, social.uuid, 'Social', parent_uuid=general.uuid)
        self.assertEqual(count_occurrences(vault.root, social.uuid), 1)
        self.assertIn(social, general.groups)
        self.assertNotIn(social, internet.groups)
        self.assertIs(tree.find_parent_group(vault.root, social.uuid), general)
        self.assertEqual(len(social.groups), 1)

    def test_move_group_same_parent(self):
        vault = get_vault()
        social = get_group(vault, 'Social')
        internet = get_group(vault, 'Internet')
        before = tree_snapshot(vault.root)
        tree.update_group(vault, social.uuid, 'Social', parent_uuid=str(internet.uuid))
        self.assertEqual(tree_snapshot(vault.root), before)

    def test_move_into_itself(self):
        vault = get_vault()
        internet = get_group(vault, 'Internet')
        before = tree_snapshot(vault.root)
        with self.assertRaises(CycleDetectedError):
            tree.update_group(vault, internet.uuid, 'Renamed', parent_uuid=internet.uuid)
        self.assertEqual(tree_snapshot(vault.root), before)
        self.assertEqual(internet.name, 'Internet')

    def test_move_into_descendant(self):
        vault = get_vault()
        internet = get_group(vault, 'Internet')
        for target in ('Social', 'Forums'):
            before = tree_snapshot(vault.root)
            with self.assertRaises(CycleDetectedError):
                tree.update_group(vault, internet.uuid, 'Internet', parent_uuid=get_group(vault, target).uuid)
            self.assertEqual(tree_snapshot(vault.root), before)

    def test_move_into_sibling_subtree_is_allowed(self):
        vault = get_vault()
        email = get_group(vault, 'eMail')
        forums = get_group(vault, 'Forums')
        tree.update_group(vault, email.uuid, 'eMail', parent_uuid=forums.uuid)
        self.assertEqual(tree.group_path(vault.root, email.uuid), '/Internet/Social/Forums/eMail')

    def test_move_to_missing_target(self):
        vault = get_vault()
        social = get_group(vault, 'Social')
        before = tree_snapshot(vault.root)
        with self.assertRaises(NotFoundError):
            tree.update_group(vault, social.uuid, 'Other', parent_uuid=uuid.uuid4())
        self.assertEqual(tree_snapshot(vault.root), before)
        self.assertEqual(social.name, 'Social')

    def test_move_root(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        with self.assertRaises(NotFoundError):
            tree.update_group(vault, vault.root.uuid, 'Root', parent_uuid=general.uuid)

    def test_delete_root(self):
        vault = get_vault()
        with self.assertRaises(InvalidOperationError):
            tree.delete_group(vault, vault.root.uuid)

    def test_delete_group_subtree(self):
        vault = get_vault()
        internet = get_group(vault, 'Internet')
        removed = [x.uuid for x in tree.iter_groups(internet)]
        removed_entries = [e.uuid for _, e in tree.iter_entries(internet)]
        tree.delete_group(vault, internet.uuid)
        for group_uuid in removed:
            self.assertIsNone(tree.find_group(vault.root, group_uuid))
        for entry_uuid in removed_entries:
            self.assertIsNone(tree.find_entry_owner(vault.root, entry_uuid))

        with self.assertRaises(NotFoundError):
            tree.delete_group(vault, internet.uuid)


class TestEntryMutation(TestCase):
    def test_add_entry(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        entry = tree.add_entry(vault, str(general.uuid), EntryFormData(title='NAS', password='x'))
        self.assertIs(general.entries[-1], entry)
        self.assertIn(constants.FIELD_PASSWORD, entry.protected)
        with self.assertRaises(NotFoundError):
            tree.add_entry(vault, uuid.uuid4(), EntryFormData(title='NAS'))

    def test_update_entry_keeps_history(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        entry = general.entries[0]
        data = EntryFormData(uuid=str(entry.uuid), title='Router', username='root', password='new')
        tree.update_entry(vault, data)
        self.assertEqual(entry.get_field(constants.FIELD_USERNAME), 'root')
        self.assertEqual(len(entry.history), 1)
        self.assertEqual(entry.history[0].get_field(constants.FIELD_USERNAME), 'admin')

    def test_update_entry_moves_group(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        bank = get_group(vault, 'Homebanking')
        entry = general.entries[0]
        tree.update_entry(vault, EntryFormData(uuid=str(entry.uuid), title='Router', group_uuid=str(bank.uuid)))
        self.assertNotIn(entry, general.entries)
        self.assertIn(entry, bank.entries)

    def test_update_entry_errors(self):
        vault = get_vault()
        with self.assertRaises(InvalidOperationError):
            tree.update_entry(vault, EntryFormData(title='No uuid'))
        with self.assertRaises(NotFoundError):
            tree.update_entry(vault, EntryFormData(uuid=str(uuid.uuid4()), title='Missing'))

    def test_delete_entry_to_recycle_bin(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        entry = general.entries[0]
        self.assertIsNone(vault.recycle_bin_uuid)

        recycle_bin = tree.delete_entry(vault, entry.uuid)
        self.assertIsNotNone(recycle_bin)
        self.assertTrue(vault.is_recycle_bin(recycle_bin))
        self.assertEqual(recycle_bin.name, constants.RECYCLE_BIN_NAME)
        self.assertIn(entry, recycle_bin.entries)
        self.assertNotIn(entry, general.entries)
        self.assertEqual(entry.get_field(constants.ORIGINAL_GROUP_KEY), str(general.uuid))

        self.assertIsNone(tree.delete_entry(vault, entry.uuid))
        self.assertIsNone(tree.find_entry_owner(vault.root, entry.uuid))

    def test_delete_entry_permanent(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        entry = general.entries[0]
        self.assertIsNone(tree.delete_entry(vault, entry.uuid, permanent=True))
        self.assertIsNone(vault.recycle_bin_uuid)
        self.assertIsNone(tree.find_entry_owner(vault.root, entry.uuid))

    def test_delete_entry_recycle_bin_disabled(self):
        vault = get_vault()
        vault.recycle_bin_enabled = False
        entry = get_group(vault, 'General').entries[0]
        self.assertIsNone(tree.delete_entry(vault, entry.uuid))
        self.assertIsNone(tree.find_entry_owner(vault.root, entry.uuid))

    def test_restore_entry(self):
        vault = get_vault()
        social = get_group(vault, 'Social')
        entry = social.entries[0]
        tree.delete_entry(vault, entry.uuid)
        self.assertIs(tree.original_group(vault, entry.uuid), social)

        target = tree.restore_entry(vault, entry.uuid)
        self.assertIs(target, social)
        self.assertIn(entry, social.entries)
        self.assertNotIn(constants.ORIGINAL_GROUP_KEY, entry.fields)

    def test_restore_entry_original_group_deleted(self):
        vault = get_vault()
        social = get_group(vault, 'Social')
        entry = social.entries[0]
        tree.delete_entry(vault, entry.uuid)
        tree.delete_group(vault, social.uuid)
        self.assertIs(tree.restore_entry(vault, entry.uuid), vault.root)

    def test_move_entry(self):
        vault = get_vault()
        general = get_group(vault, 'General')
        forums = get_group(vault, 'Forums')
        entry = general.entries[0]
        tree.move_entry(vault, entry.uuid, forums.uuid)
        self.assertIn(entry, forums.entries)
        with self.assertRaises(NotFoundError):
            tree.move_entry(vault, entry.uuid, uuid.uuid4())
        self.assertIn(entry, forums.entries)


@pytest.mark.parametrize('names, bin_index', [
    (['A', 'B', 'C'], 0),
    (['A', 'B', 'C'], 1),
    (['A', 'B', 'C'], 3),
    ([], 0),
])
def test_list_groups_ordered(names, bin_index):
    vault = get_vault()
    parent = vault.create_group(vault.root, 'Parent')
    for name in names:
        vault.create_group(parent, name)
    recycle_bin = Group(constants.RECYCLE_BIN_NAME, constants.ICON_RECYCLE_BIN)
    parent.groups.insert(bin_index, recycle_bin)
    vault.recycle_bin_uuid = recycle_bin.uuid

    views = tree.list_groups_ordered(vault)
    assert len(views) == 1
    parent_view = next(x for x in views[0].subgroups if x.name == 'Parent')
    assert [x.name for x in parent_view.subgroups] == names + [constants.RECYCLE_BIN_NAME]
    assert parent_view.subgroups[-1].is_recycle_bin
    assert [x.name for x in parent.groups][bin_index] == constants.RECYCLE_BIN_NAME


def test_list_groups_ordered_views():
    vault = get_vault()
    vault.create_recycle_bin()
    vault.root.groups.insert(0, vault.root.groups.pop())
    root_view = tree.list_groups_ordered(vault)[0]
    assert root_view.name == 'Sample'
    assert [x.name for x in root_view.subgroups] == \
        ['General', 'Internet', 'eMail', 'Homebanking', constants.RECYCLE_BIN_NAME]
    gmail = next(x for x in root_view.subgroups if x.name == 'eMail').entries[0]
    assert gmail.title == 'Gmail'
    assert gmail.otp_url.startswith('otpauth://totp/')
