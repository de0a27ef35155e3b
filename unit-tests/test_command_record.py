import json
import os
from unittest import TestCase, mock

from data_vault import get_params, get_group, TOTP_SECRET
from keepervault import constants
from keepervault.commands import record
from keepervault.error import CommandError
from keepervault.tree import find_entry_owner


class TestRecord(TestCase):
    def test_parse_custom_fields(self):
        self.assertEqual(record.parse_custom_fields(['PIN=1234', 'Code==x', 'Empty='], 'add'),
                         {'PIN': '1234', 'Code': '=x', 'Empty': ''})
        with self.assertRaises(CommandError):
            record.parse_custom_fields(['novalue'], 'add')
        with self.assertRaises(CommandError):
            record.parse_custom_fields(['=value'], 'add')
        for name in ['Tags', 'Times', 'History', 'IconID', 'Title']:
            with self.assertRaises(CommandError):
                record.parse_custom_fields([f'{name}=x'], 'add')

    def test_add_totp_url(self):
        params = get_params()
        cmd = record.RecordAddCommand()
        url = f'otpauth://totp/GH:me?secret={TOTP_SECRET}&issuer=GH'
        entry_uuid = cmd.execute(params, title='Git', totp=url)
        _, entry = find_entry_owner(params.vault.root, entry_uuid)
        otp_url = entry.get_field(constants.FIELD_OTP)
        self.assertTrue(otp_url.startswith('otpauth://totp/KeeperVault:Git?'))
        self.assertIn('secret=' + TOTP_SECRET, otp_url)

        with self.assertLogs(level='WARNING'):
            cmd.execute(params, title='Git8', totp=f'otpauth://totp/GH:me?secret={TOTP_SECRET}&digits=8')

        for totp in ['otpauth://totp/GH:me?issuer=GH', 'not base32!']:
            with self.assertRaises(CommandError):
                cmd.execute(params, title='Bad', totp=totp)

    def test_edit_totp_url(self):
        params = get_params()
        router = get_group(params.vault, 'General').entries[0]
        record.RecordEditCommand().execute(params, record='General/Router',
                                           totp=f'otpauth://totp/X:router?secret={TOTP_SECRET}')
        self.assertIn('secret=' + TOTP_SECRET, router.get_field(constants.FIELD_OTP))

    def test_add_generate(self):
        params = get_params()
        cmd = record.RecordAddCommand()
        entry_uuid = cmd.execute_args(params, '-t Generated -g')
        _, entry = find_entry_owner(params.vault.root, entry_uuid)
        self.assertEqual(len(entry.get_field(constants.FIELD_PASSWORD)), 20)

        with self.assertRaises(CommandError):
            cmd.execute(params, title='Both', password='pw', generate=True)

    def test_edit_generate(self):
        params = get_params()
        router = get_group(params.vault, 'General').entries[0]
        record.RecordEditCommand().execute(params, record='General/Router', generate=True)
        password = router.get_field(constants.FIELD_PASSWORD)
        self.assertNotEqual(password, 'r0uter')
        self.assertEqual(len(password), 20)
        self.assertEqual(router.history[-1].get_field(constants.FIELD_PASSWORD), 'r0uter')

    def test_add_command(self):
        params = get_params()
        cmd = record.RecordAddCommand()

        entry_uuid = cmd.execute(params, title='NAS', login='admin', password='pw', url='http://nas',
                                 totp=TOTP_SECRET, folder='General', fields=['Port=5000'], expires='2030-01-31')
        group, entry = find_entry_owner(params.vault.root, entry_uuid)
        self.assertIs(group, get_group(params.vault, 'General'))
        self.assertEqual(entry.get_field(constants.FIELD_USERNAME), 'admin')
        self.assertEqual(entry.get_field('Port'), '5000')
        self.assertTrue(entry.get_field(constants.FIELD_OTP).startswith('otpauth://totp/KeeperVault:NAS?'))
        self.assertTrue(entry.times.expires)
        self.assertEqual(entry.times.expiry_time.year, 2030)
        self.assertTrue(params.modified)

        with self.assertRaises(CommandError):
            cmd.execute(params, login='nobody')
        with self.assertRaises(CommandError):
            cmd.execute(params, title='X', folder='Invalid')
        with self.assertRaises(CommandError):
            cmd.execute(params, title='X', expires='31/01/2030')

    def test_add_command_args(self):
        params = get_params()
        cmd = record.RecordAddCommand()
        entry_uuid = cmd.execute_args(params, '--title "Home Wifi" -p "s3cr3t" --folder /Internet SSID=home')
        group, entry = find_entry_owner(params.vault.root, entry_uuid)
        self.assertEqual(group.name, 'Internet')
        self.assertEqual(entry.title, 'Home Wifi')
        self.assertEqual(entry.get_field('SSID'), 'home')

    def test_add_attachment(self):
        params = get_params()
        cmd = record.RecordAddCommand()
        with mock.patch('os.path.isfile', return_value=True), \
                mock.patch('builtins.open', mock.mock_open(read_data=b'key data')):
            entry_uuid = cmd.execute(params, title='SSH', attachments=['~/keys/id_rsa'])
        _, entry = find_entry_owner(params.vault.root, entry_uuid)
        self.assertEqual(entry.attachments, {'id_rsa': b'key data'})

    def test_edit_command(self):
        params = get_params()
        cmd = record.RecordEditCommand()

        cmd.execute(params, record='Homebanking/Bank', login='new user', email='', fields=['PIN=', 'Branch=42'],
                    expires='never')
        _, entry = find_entry_owner(params.vault.root, get_group(params.vault, 'Homebanking').entries[0].uuid)
        self.assertEqual(entry.get_field(constants.FIELD_USERNAME), 'new user')
        self.assertEqual(entry.get_field(constants.FIELD_PASSWORD), 'p')
        self.assertEqual(entry.get_field(constants.FIELD_URL), 'https://bank.com')
        self.assertEqual(entry.fields[constants.FIELD_EMAIL], '')
        self.assertNotIn('PIN', entry.fields)
        self.assertEqual(entry.get_field('Branch'), '42')
        self.assertEqual(len(entry.history), 1)
        self.assertEqual(entry.history[0].get_field('PIN'), '1234')

        with self.assertRaises(CommandError):
            cmd.execute(params, record='Homebanking/Invalid')

    def test_edit_keeps_totp(self):
        params = get_params()
        cmd = record.RecordEditCommand()
        gmail = get_group(params.vault, 'eMail').entries[0]
        otp_url = gmail.get_field(constants.FIELD_OTP)
        cmd.execute(params, record=str(gmail.uuid), title='Google Mail')
        self.assertEqual(gmail.title, 'Google Mail')
        self.assertNotEqual(gmail.get_field(constants.FIELD_OTP), otp_url)
        self.assertIn('secret=' + TOTP_SECRET, gmail.get_field(constants.FIELD_OTP))

    def test_remove_and_restore(self):
        params = get_params()
        rm = record.RecordRemoveCommand()
        restore = record.RecordRestoreCommand()
        general = get_group(params.vault, 'General')
        router = general.entries[0]

        with self.assertRaises(CommandError):
            restore.execute(params, record='General/Router')

        rm.execute(params, record='General/Router')
        self.assertEqual(general.entries, [])
        recycle_bin, _ = find_entry_owner(params.vault.root, router.uuid)
        self.assertTrue(params.vault.is_recycle_bin(recycle_bin))

        restore.execute(params, record=str(router.uuid))
        self.assertEqual(general.entries, [router])

        rm.execute(params, record='General/Router', permanent=True)
        self.assertIsNone(find_entry_owner(params.vault.root, router.uuid))

    def test_remove_prompt(self):
        params = get_params()
        params.batch_mode = False
        rm = record.RecordRemoveCommand()
        with mock.patch('builtins.input', return_value='n'):
            rm.execute(params, record='General/Router', permanent=True)
        self.assertEqual(len(get_group(params.vault, 'General').entries), 1)

    def test_get_command(self):
        params = get_params()
        cmd = record.RecordGetCommand()

        with mock.patch('builtins.print') as mock_print:
            cmd.execute(params, record='eMail/Gmail')
            output = '\n'.join(str(x[0][0]) for x in mock_print.call_args_list)
        self.assertIn('/eMail', output)
        self.assertNotIn('Secr3t!', output)
        self.assertIn('Strength', output)
        self.assertIn('SHA1, 6 digits, 30s', output)

        ro = json.loads(cmd.execute(params, record='eMail/Gmail', format='json'))
        self.assertEqual(ro['totp'], {'algorithm': 'SHA1', 'digits': 6, 'period': 30})
        self.assertEqual(ro['password_strength']['rating'], 'Good')
        self.assertNotIn('otp_url', ro)

        ro = json.loads(cmd.execute(params, record='Homebanking/Bank', format='json'))
        self.assertEqual(ro['title'], 'Bank')
        self.assertEqual(ro['email'], 'me@bank.com')
        self.assertEqual(ro['custom'], {'PIN': '1234'})
        self.assertNotIn('password', ro)

        ro = json.loads(cmd.execute(params, record='Homebanking/Bank', format='json', unmask=True))
        self.assertEqual(ro['password'], 'p')

        with self.assertRaises(CommandError):
            cmd.execute(params, record='Missing')

    def test_duplicate_titles(self):
        params = get_params()
        add = record.RecordAddCommand()
        add.execute(params, title='Router', folder='General')
        with self.assertRaises(CommandError):
            record.RecordGetCommand().execute(params, record='General/Router')

    def test_load_attachments_missing(self):
        with self.assertRaises(CommandError):
            record.load_attachments([os.path.join('no', 'such', 'file')], 'add')
