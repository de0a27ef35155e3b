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
import csv
import importlib
import io
import logging
import os.path
from typing import Dict, Iterable, List, Optional

from ..error import CommandError
from ..record import EntryFormData

PathDelimiter = '/'


def importer_for_format(input_format):
    full_name = 'keepervault.importer.' + input_format
    try:
        module = importlib.import_module(full_name)
    except ModuleNotFoundError as e:
        if e.name and e.name.startswith('keepervault'):
            raise CommandError('import', f'Unsupported import format: {input_format}')
        raise CommandError('import', f'The required module is not installed:\n\tpip install {e.name}')
    if hasattr(module, 'Importer'):
        return module.Importer
    raise CommandError('import', 'Cannot resolve importer for format {}'.format(input_format))


def strip_path_delimiter(name, delimiter=PathDelimiter):
    folder = name.strip()
    if folder == delimiter:
        return ''
    if len(folder) > 1:
        if folder[:1] == delimiter and folder[:2] != delimiter*2:
            folder = folder[1:].strip()
    if len(folder) > 1:
        if folder[-1:] == delimiter and folder[-2:] != delimiter*2:
            folder = folder[:-1].strip()
    return folder


def path_components(path, delimiter=PathDelimiter):    # type: (str, str) -> Iterable[str]
    p = path.strip()
    pos = 0
    while pos < len(p):
        idx = p.find(delimiter, pos)
        if idx >= 0:
            if idx+1 < len(p):
                if p[idx+1] == delimiter:
                    pos = idx + 2
                    continue
            comp = p[:idx].strip()
            p = p[idx+1:].strip()
            pos = 0
            if len(comp) > 0:
                yield comp.replace(2*delimiter, delimiter)
        else:
            p = strip_path_delimiter(p, delimiter=delimiter)
            if len(p) > 0:
                yield p.replace(2*delimiter, delimiter)
                p = ''


def read_csv_rows(text):    # type: (str) -> List[List[str]]
    """RFC 4180 rows. Quoted fields may hold commas, line breaks and doubled quotes.
    Blank lines produce no row.
    """
    rows = []    # type: List[List[str]]
    reader = csv.reader(io.StringIO(text or '', newline=''))
    while True:
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            logging.debug('CSV line %d skipped: %s', reader.line_num, e)
            continue
        if len(row) == 0 or (len(row) == 1 and not row[0]):
            continue
        rows.append(row)
    return rows


class BaseImporter(abc.ABC):
    def execute(self, name, **kwargs):
        # type: (BaseImporter, str, ...) -> Iterable[EntryFormData]
        yield from self.do_import(name, **kwargs)

    @abc.abstractmethod
    def do_import(self, filename, **kwargs):
        # type: (BaseImporter, str, ...) -> Iterable[EntryFormData]
        pass

    def extension(self):
        return ''


class BaseFileImporter(BaseImporter, abc.ABC):
    def __init__(self):
        super(BaseFileImporter, self).__init__()

    def execute(self, name, **kwargs):
        # type: (str, ...) -> Iterable[EntryFormData]

        path = os.path.expanduser(name)
        if not os.path.isfile(path):
            ext = self.extension()
            if ext:
                path = path + '.' + ext

        if not os.path.isfile(path):
            raise CommandError('import', f'File \'{name}\' does not exist')

        yield from self.do_import(path, **kwargs)

    def do_import(self, filename, **kwargs):
        yield from self.parse(self.read_file(filename), **kwargs)

    def read_file(self, filename):
        with open(filename, 'r', encoding='utf-8-sig') as f:
            return f.read()

    @abc.abstractmethod
    def parse(self, payload, **kwargs):
        # type: (BaseFileImporter, ...) -> Iterable[EntryFormData]
        pass


class BaseCsvImporter(BaseFileImporter, abc.ABC):
    """Header driven CSV import. Columns that resolve to no record property are dropped."""

    @abc.abstractmethod
    def resolve_column(self, header):    # type: (str) -> Optional[str]
        pass

    @abc.abstractmethod
    def create_record(self, values):    # type: (Dict[str, str]) -> Optional[EntryFormData]
        pass

    def map_columns(self, header_row):    # type: (List[str]) -> Dict[str, int]
        columns = {}    # type: Dict[str, int]
        for i, header in enumerate(header_row):
            key = self.resolve_column(header.lower().strip())
            if key:
                columns[key] = i
        return columns

    def parse(self, payload, **kwargs):
        rows = read_csv_rows(payload)
        if len(rows) < 2:
            return
        columns = self.map_columns(rows[0])
        for row_no, row in enumerate(rows[1:], start=2):
            values = {key: row[idx] if idx < len(row) else '' for key, idx in columns.items()}
            try:
                record = self.create_record(values)
            except ValueError as e:
                logging.debug('CSV row %d skipped: %s', row_no, e)
                continue
            if record:
                yield record

    def extension(self):
        return 'csv'


class ExactColumnCsvImporter(BaseCsvImporter, abc.ABC):
    COLUMNS = {}    # type: Dict[str, str]

    def resolve_column(self, header):
        return self.COLUMNS.get(header)
