import json
import string
from unittest import TestCase, mock

import pytest

from data_vault import get_params
from keepervault import cli, generator
from keepervault.commands import utils
from keepervault.error import CommandError
from keepervault.params import VaultParams


@pytest.mark.parametrize('password, score, label, entropy', [
    ('', 0, 'Very Weak', 0),
    ('abc', 11, 'Very Weak', 14),
    ('aaaaaa', 22, 'Weak', 28),
    ('password', 29, 'Good', 38),
    ('Tr0ub4dor&3', 56, 'Strong', 72),
    ('correcthorsebatterystaple', 92, 'Strong', 118),
    ('A1!' * 8, 100, 'Excellent', 146),
])
def test_audit_password(password, score, label, entropy):
    audit = generator.audit_password(password)
    assert audit == generator.PasswordAudit(score=score, label=label, entropy=entropy)


class TestPasswordGenerator(TestCase):
    def test_random_password(self):
        for _ in range(20):
            password = generator.RandomPasswordGenerator(length=12).generate()
            self.assertEqual(len(password), 12)
            self.assertTrue(any(x in string.ascii_uppercase for x in password))
            self.assertTrue(any(x in string.ascii_lowercase for x in password))
            self.assertTrue(any(x in string.digits for x in password))
            self.assertTrue(any(x in generator.PW_SPECIAL_CHARACTERS for x in password))

    def test_excluded_sets(self):
        password = generator.RandomPasswordGenerator(length=40, symbols=False, caps=False).generate()
        self.assertTrue(all(x in string.ascii_lowercase + string.digits for x in password))
        self.assertEqual(len(generator.RandomPasswordGenerator(length=2).generate()), 2)
        self.assertEqual(len(generator.generate()), generator.DEFAULT_PASSWORD_LENGTH)

    def test_invalid_settings(self):
        with self.assertRaises(ValueError):
            generator.RandomPasswordGenerator(caps=False, lower=False, digits=False, symbols=False)
        with self.assertRaises(ValueError):
            generator.RandomPasswordGenerator(length=0)

    def test_passphrase(self):
        phrase = generator.PassphraseGenerator(5, delimiter='.').generate()
        words = phrase.split('.')
        self.assertEqual(len(words), 5)
        for word in words:
            self.assertIn(word.lower(), generator.WORD_LIST)
            self.assertTrue(word[0].isupper())
        self.assertEqual(len(generator.PassphraseGenerator(0).generate().split('-')), generator.DEFAULT_WORD_COUNT)


class TestGenerateCommand(TestCase):
    def test_generate(self):
        cmd = utils.GenerateCommand()
        self.assertFalse(cmd.requires_vault())
        with mock.patch('builtins.print') as mock_print:
            passwords = cmd.execute(VaultParams(), number=3, length=16, return_result=True)
        self.assertEqual(len(passwords), 3)
        for p in passwords:
            self.assertEqual(len(p['password']), 16)
            self.assertEqual(p['strength'], generator.audit_password(p['password']).score)
        output = mock_print.call_args[0][0]
        self.assertIn('Strength(%)', output)
        self.assertIn(passwords[0]['password'], output)

    def test_generate_args(self):
        cmd = utils.GenerateCommand()
        with mock.patch('builtins.print') as mock_print:
            cmd.execute_args(VaultParams(), '-f json -w 3 -dl _')
        passwords = json.loads(mock_print.call_args[0][0])
        self.assertEqual(len(passwords), 1)
        self.assertEqual(len(passwords[0]['password'].split('_')), 3)

        with mock.patch('builtins.print') as mock_print:
            cmd.execute_args(VaultParams(), '-q -n 2 -c 8 --no-symbols')
        lines = mock_print.call_args[0][0].split('\n')
        self.assertEqual(len(lines), 2)
        self.assertTrue(all(len(x) == 8 and x.isalnum() for x in lines))

    def test_empty_character_set(self):
        with self.assertRaises(CommandError):
            utils.GenerateCommand().execute(VaultParams(), no_uppercase=True, no_lowercase=True,
                                            no_digits=True, no_symbols=True)

    def test_generate_without_vault(self):
        with mock.patch('builtins.print'):
            cli.do_command(VaultParams(), 'gen -q')
        with mock.patch('builtins.print'):
            cli.do_command(get_params(), 'generate -n 2')
