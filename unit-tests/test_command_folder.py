from unittest import TestCase, mock

from data_vault import get_params, get_group
from keepervault.commands import folder
from keepervault.error import CommandError, CycleDetectedError
from keepervault.tree import group_path


class TestFolder(TestCase):
    def test_list(self):
        params = get_params()

        cmd = folder.FolderListCommand()
        with mock.patch('builtins.print') as mock_print:
            cmd.execute(params)
            cmd.execute(params, folder='/Internet', verbose=True)
            cmd.execute(params, folder='eMail', records_only=True)
            self.assertTrue(mock_print.called)

        with self.assertRaises(CommandError):
            cmd.execute(params, folder='Invalid')

    def test_change_directory(self):
        params = get_params()

        cmd = folder.FolderCdCommand()
        cmd.execute(params, folder='Internet/Social')
        self.assertIs(params.get_current_group(), get_group(params.vault, 'Social'))

        cmd.execute(params, folder='..')
        self.assertIs(params.get_current_group(), get_group(params.vault, 'Internet'))

        cmd.execute(params, folder='/')
        self.assertIs(params.get_current_group(), params.vault.root)

        social = get_group(params.vault, 'Social')
        cmd.execute(params, folder=str(social.uuid))
        self.assertIs(params.get_current_group(), social)

        with self.assertRaises(CommandError):
            cmd.execute(params, folder='Invalid')

    def test_tree(self):
        params = get_params()
        cmd = folder.FolderTreeCommand()

        with mock.patch('builtins.print'):
            cmd.execute(params)
            cmd.execute(params, folder='Internet', records=True, verbose=True)
        with self.assertRaises(CommandError):
            cmd.execute(params, folder='Invalid')

    def test_make_folder(self):
        params = get_params()
        cmd = folder.FolderMakeCommand()

        group_uuid = cmd.execute(params, folder='Internet/Shopping/Books', icon=5, allow_add='off')
        books = get_group(params.vault, 'Books')
        self.assertEqual(str(books.uuid), group_uuid)
        self.assertEqual(group_path(params.vault.root, books.uuid), '/Internet/Shopping/Books')
        self.assertEqual(books.icon, 5)
        self.assertIs(books.allow_add, False)
        self.assertTrue(params.modified)

        params.modified = False
        with mock.patch('logging.warning') as mock_warning:
            cmd.execute(params, folder='Internet/Shopping')
            mock_warning.assert_called()
        self.assertFalse(params.modified)

        cmd.execute(params, folder='/Slash//Name')
        self.assertEqual(params.vault.root.groups[-1].name, 'Slash/Name')

    def test_rename_folder(self):
        params = get_params()
        cmd = folder.FolderRenameCommand()

        cmd.execute(params, folder='Internet/Social', name='Networks')
        self.assertEqual(get_group(params.vault, 'Networks').name, 'Networks')

        cmd.execute(params, folder='Internet/Networks', allow_add='on')
        self.assertIs(get_group(params.vault, 'Networks').allow_add, True)

        with self.assertRaises(CommandError):
            cmd.execute(params, folder='Internet/Networks')
        with self.assertRaises(CommandError):
            cmd.execute(params, folder='Invalid', name='Other')

    def test_remove_folder(self):
        params = get_params()
        cmd = folder.FolderRemoveCommand()
        params.current_group = str(get_group(params.vault, 'Forums').uuid)

        cmd.execute(params, folder='/Internet')
        self.assertNotIn('Internet', [x.name for x in params.vault.root.groups])
        self.assertIs(params.get_current_group(), params.vault.root)
        self.assertIsNone(params.current_group)

        with self.assertRaises(CommandError):
            cmd.execute(params, folder='/')

    def test_remove_folder_prompt(self):
        params = get_params()
        params.batch_mode = False
        cmd = folder.FolderRemoveCommand()

        with mock.patch('builtins.input', return_value='n'):
            cmd.execute(params, folder='General')
        self.assertIn('General', [x.name for x in params.vault.root.groups])

        with mock.patch('builtins.input', return_value='y'):
            cmd.execute(params, folder='General')
        self.assertNotIn('General', [x.name for x in params.vault.root.groups])

    def test_move(self):
        params = get_params()
        cmd = folder.FolderMoveCommand()

        cmd.execute(params, src='eMail/Gmail', dst='General')
        self.assertEqual([x.title for x in get_group(params.vault, 'General').entries], ['Router', 'Gmail'])

        cmd.execute(params, src='/Internet/Social', dst='/eMail')
        self.assertEqual(group_path(params.vault.root, get_group(params.vault, 'Social').uuid), '/eMail/Social')

        with self.assertRaises(CycleDetectedError):
            cmd.execute(params, src='eMail', dst='eMail/Social/Forums')
        with self.assertRaises(CommandError):
            cmd.execute(params, src='Invalid', dst='General')
        with self.assertRaises(CommandError):
            cmd.execute(params, src='General', dst='Invalid')
