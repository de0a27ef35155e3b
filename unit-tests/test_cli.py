from unittest import TestCase, mock

from data_vault import get_params
from keepervault import cli
from keepervault.commands import base
from keepervault.error import CommandError
from keepervault.params import VaultParams


class TestCommandLineInterface(TestCase):
    def test_command_registration(self):
        for name in ['create', 'open', 'save', 'close', 'ls', 'cd', 'tree', 'mkdir', 'rndir', 'rmdir', 'mv',
                     'add', 'edit', 'rm', 'restore', 'get', 'generate', 'import']:
            self.assertIn(name, base.commands)
            self.assertIn(name, base.command_info)
        self.assertEqual(base.aliases['g'], 'get')
        self.assertEqual(base.aliases['gen'], 'generate')

    def test_do_command(self):
        params = get_params()
        cli.do_command(params, 'mkdir "Internet/New Folder"')
        self.assertIn('New Folder', [x.name for x in params.vault.root.groups[1].groups])

        with mock.patch('builtins.print'):
            self.assertIsNone(cli.do_command(params, 'g --unmask eMail/Gmail'))

    def test_requires_vault(self):
        params = VaultParams()
        with self.assertRaises(CommandError):
            cli.do_command(params, 'ls')

    def test_unknown_command(self):
        params = get_params()
        with mock.patch('builtins.print') as mock_print:
            cli.do_command(params, 'unknown')
            cli.do_command(params, 'help')
            self.assertTrue(mock_print.called)

    def test_parse_error(self):
        params = get_params()
        with mock.patch('logging.error') as mock_error:
            cli.do_command(params, 'mv --invalid')
            mock_error.assert_called()

    def test_runcommands(self):
        params = get_params()
        with mock.patch('builtins.print'):
            errno = cli.runcommands(params, ['mkdir Work', 'add -t Jira --folder Work', 'tree -r'], quiet=True)
        self.assertEqual(errno, 0)
        with mock.patch('logging.error'):
            errno = cli.runcommands(params, ['rmdir /', 'rm Missing'], quiet=True)
        self.assertEqual(errno, 1)

    def test_batch_loop(self):
        params = get_params()
        params.commands = ['mkdir Batch', 'add -t Entry --folder Batch', 'q']
        self.assertEqual(cli.loop(params), 0)
        batch = next(x for x in params.vault.root.groups if x.name == 'Batch')
        self.assertEqual(batch.entries[0].title, 'Entry')

        params.commands = ['rmdir Invalid', 'mkdir Unreached', 'q']
        with mock.patch('logging.warning'):
            self.assertEqual(cli.loop(params), 1)
        self.assertNotIn('Unreached', [x.name for x in params.vault.root.groups])

    def test_prompt(self):
        params = get_params()
        params.batch_mode = False
        self.assertEqual(cli.get_prompt(params), 'Sample> ')
        cli.do_command(params, 'cd Internet/Social')
        params.modified = True
        self.assertEqual(cli.get_prompt(params), 'Sample/Internet/Social*> ')
        self.assertEqual(cli.get_prompt(VaultParams()), 'No vault> ')

    def test_line_continuation(self):
        params = get_params()
        params.batch_mode = False
        input_lines = ['add -t "Test Entry" \\', '  --folder General  \\', '-p pw']
        with mock.patch('builtins.input', side_effect=input_lines):
            command = cli.read_command_with_continuation(None, params)
        self.assertEqual(command, 'add -t "Test Entry" --folder General -p pw')
