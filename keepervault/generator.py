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

import abc
import math
import re
import string
from collections import namedtuple
from secrets import choice
from typing import Sequence

from Cryptodome.Random.random import shuffle

DEFAULT_PASSWORD_LENGTH = 20
DEFAULT_WORD_COUNT = 4
PW_SPECIAL_CHARACTERS = '!@#$%^&*()_+-=[]{}|;:,.<>?'

WORD_LIST = (
    'apple', 'banana', 'cherry', 'dragon', 'elephant', 'falcon', 'giraffe', 'hammer',
    'island', 'jungle', 'kitten', 'lemon', 'mountain', 'notebook', 'ocean', 'penguin',
    'quantum', 'rainbow', 'sunset', 'thunder', 'umbrella', 'volcano', 'whisper', 'xylophone',
    'yellow', 'zebra', 'anchor', 'bridge', 'castle', 'diamond', 'emerald', 'forest',
    'galaxy', 'horizon', 'iceberg', 'jasmine', 'knight', 'lantern', 'meadow', 'nebula',
    'orchid', 'palace', 'quartz', 'river', 'sapphire', 'temple', 'universe', 'valley',
    'waterfall', 'crystal', 'phoenix', 'shadow', 'wisdom', 'zenith', 'aurora',
)

PasswordAudit = namedtuple('PasswordAudit', 'score label entropy')

# upper entropy bound (bits) for each rating
STRENGTH_RATINGS = ((28, 'Very Weak'), (36, 'Weak'), (60, 'Good'), (128, 'Strong'))
EXCELLENT = 'Excellent'
MAX_SCORE_ENTROPY = 128


def _round_half_up(value):    # type: (float) -> int
    return int(math.floor(value + 0.5))


def audit_password(password):    # type: (str) -> PasswordAudit
    """Estimate strength from the length and the character classes present.

    score is the entropy scaled to 0-100, where 128 bits or more scores 100.
    """
    if not password:
        return PasswordAudit(score=0, label=STRENGTH_RATINGS[0][1], entropy=0)

    pool_size = 0
    if re.search(r'[a-z]', password):
        pool_size += 26
    if re.search(r'[A-Z]', password):
        pool_size += 26
    if re.search(r'[0-9]', password):
        pool_size += 10
    if re.search(r'[^a-zA-Z0-9]', password):
        pool_size += 32

    entropy = len(password) * math.log2(max(pool_size, 1))
    label = next((x[1] for x in STRENGTH_RATINGS if entropy < x[0]), EXCELLENT)
    score = min(100, _round_half_up(entropy / MAX_SCORE_ENTROPY * 100))
    return PasswordAudit(score=score, label=label, entropy=_round_half_up(entropy))


def generate(length=DEFAULT_PASSWORD_LENGTH):    # type: (int) -> str
    return RandomPasswordGenerator(length=length).generate()


class PasswordGenerator(abc.ABC):
    @abc.abstractmethod
    def generate(self):   # type: () -> str
        pass


class RandomPasswordGenerator(PasswordGenerator):
    def __init__(self, length=DEFAULT_PASSWORD_LENGTH, caps=True, lower=True, digits=True, symbols=True,
                 special_characters=PW_SPECIAL_CHARACTERS):
        # type: (int, bool, bool, bool, bool, str) -> None
        if length <= 0:
            raise ValueError('Password length should be positive')
        self.length = length
        self.categories = [chars for enabled, chars in ((caps, string.ascii_uppercase),
                                                         (lower, string.ascii_lowercase),
                                                         (digits, string.digits),
                                                         (symbols, special_characters)) if enabled and chars]
        if not self.categories:
            raise ValueError('Password character set is empty')

    def generate(self):    # type: () -> str
        # one character of every enabled set, as far as the length allows
        password_list = [choice(x) for x in self.categories[:self.length]]
        all_chars = ''.join(self.categories)
        password_list.extend(choice(all_chars) for _ in range(self.length - len(password_list)))
        shuffle(password_list)
        return ''.join(password_list)


class PassphraseGenerator(PasswordGenerator):
    def __init__(self, word_count=DEFAULT_WORD_COUNT, delimiter='-', word_list=WORD_LIST):
        # type: (int, str, Sequence[str]) -> None
        self.word_count = word_count if word_count > 0 else DEFAULT_WORD_COUNT
        self.delimiter = delimiter
        self.word_list = word_list

    def generate(self):    # type: () -> str
        return self.delimiter.join(choice(self.word_list).capitalize() for _ in range(self.word_count))
