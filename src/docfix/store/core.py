# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Store configuration, errors, and value coercion."""


# type annotations
from __future__ import annotations
from typing import Any, Iterator, Tuple, Type

# standard libs
import re
from datetime import date, datetime

# external libs
from cmdkit.config import Namespace
from sqlalchemy.engine import URL

# public interface
__all__ = [
    'StoreConfiguration', 'providers',
    'StoreError', 'StoreFailure', 'NotFound', 'ValidationError',
    'to_json', 'from_json',
]


# Accepted names for `store.provider` and their SQLAlchemy dialect
providers = {
    'sqlite': 'sqlite',
    'postgres': 'postgresql',
    'postgresql': 'postgresql',
}


SERVER_FIELDS = ('user', 'password', 'host', 'port')


class StoreConfiguration(Namespace):
    """
    Connection details for the document store.

    SQLite takes a `file` (or `database`) path, ':memory:' for a private
    in-memory store. PostgreSQL takes a `database` and optionally the server
    fields. Unrecognized fields become URL query parameters.

    Example:
        >>> StoreConfiguration(provider='sqlite', file=':memory:').url.database
        ':memory:'
        >>> StoreConfiguration(provider='postgres', database='fixtures', sslmode='disable').encode()
        'postgresql:///fixtures?sslmode=disable'
    """

    def __init__(self, **fields) -> None:
        """Check and normalize `fields`."""
        if 'provider' not in fields:
            raise AttributeError('Missing \'provider\'')
        provider = fields.pop('provider')
        if provider not in providers:
            raise AttributeError(f'Unsupported provider \'{provider}\'')
        echo = fields.pop('echo', False)
        if not isinstance(echo, bool):
            raise AttributeError('\'echo\' must be true or false')
        super().__init__(provider=providers[provider], echo=echo,
                         connect_args=fields.pop('connect_args', {}),
                         database=fields.pop('database', None),
                         file=fields.pop('file', None),
                         **{name: fields.pop(name, None) for name in SERVER_FIELDS},
                         parameters=fields)
        if self.provider == 'sqlite':
            self.__check_sqlite()
        else:
            self.__check_server()

    def __check_sqlite(self: StoreConfiguration) -> None:
        """SQLite needs exactly one path and no server fields."""
        if self.file is None and self.database is None:
            raise AttributeError('Must provide \'file\' for SQLite')
        if self.file is not None and self.database is not None:
            raise AttributeError('Must provide either \'file\' or \'database\' for SQLite')
        for name in SERVER_FIELDS:
            if self.get(name) is not None:
                raise AttributeError(f'Cannot provide \'{name}\' for SQLite')

    def __check_server(self: StoreConfiguration) -> None:
        """Server databases need a name and paired credentials."""
        if self.file:
            raise AttributeError('Cannot provide \'file\' if not SQLite')
        if not self.database:
            raise AttributeError('Must provide \'database\' if not SQLite')
        if (self.user is None) != (self.password is None):
            missing = 'password' if self.password is None else 'user'
            given = 'user' if missing == 'password' else 'password'
            raise AttributeError(f'Must provide \'{missing}\' if \'{given}\' provided')

    def __shown(self: StoreConfiguration) -> Iterator[Tuple[str, Any]]:
        for name, value in self.items():
            if name == 'parameters':
                yield from value.items()
            elif value:
                yield name, '****' if name == 'password' else value

    def __repr__(self: StoreConfiguration) -> str:
        """Interactive representation (password masked)."""
        fields = ', '.join(f'{name}={value!r}' for name, value in self.__shown())
        return f'<{self.__class__.__name__}({fields})>'

    def __str__(self: StoreConfiguration) -> str:
        return self.encode()

    @property
    def url(self: StoreConfiguration) -> URL:
        """SQLAlchemy URL for these connection details."""
        query = {name: str(value) for name, value in self.parameters.items()}
        if self.provider == 'sqlite':
            return URL.create('sqlite', database=self.file or self.database, query=query)
        host = self.host
        if host is None and (self.user or self.port):
            host = 'localhost'
        return URL.create(self.provider, username=self.user, password=self.password, host=host,
                          port=None if self.port is None else int(self.port),
                          database=self.database, query=query)

    def encode(self: StoreConfiguration) -> str:
        """Full URL string (password included)."""
        return self.url.render_as_string(hide_password=False)

    @classmethod
    def from_namespace(cls: Type[StoreConfiguration], ns: Namespace) -> StoreConfiguration:
        """Build from configuration section, expanding `_env` and `_eval` fields."""
        names = dict.fromkeys(re.sub(r'_(env|eval)$', '', key) for key in ns.keys())
        return cls(**{name: getattr(ns, name) for name in names})


class StoreError(Exception):
    """Generic error with respect to the document store."""


class StoreFailure(StoreError):
    """The underlying persistence operation failed."""


class NotFound(StoreError):
    """No document found on lookup by identifier."""


class ValidationError(StoreError):
    """Document attributes violate the model declaration."""


# Tagged JSON forms for values without a native JSON type
DATETIME_TAG = '$datetime'
DATE_TAG = '$date'


def to_json(value: Any) -> Any:
    """
    Document value as JSON-encodable value.

    Datetime and date values are wrapped as single-key objects so that
    `from_json` restores exactly these and leaves plain strings alone.

    Example:
        >>> to_json({'at': date(2024, 1, 2), 'note': '2024-01-02'})
        {'at': {'$date': '2024-01-02'}, 'note': '2024-01-02'}
    """
    if isinstance(value, dict):
        return {key: to_json(member) for key, member in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(member) for member in value]
    if isinstance(value, datetime):
        return {DATETIME_TAG: value.isoformat()}
    if isinstance(value, date):
        return {DATE_TAG: value.isoformat()}
    return value


def _restore_tagged(key: str, member: Any) -> Any:
    """Tagged value as datetime or date (None if not a valid tagged form)."""
    parse = {DATETIME_TAG: datetime.fromisoformat, DATE_TAG: date.fromisoformat}.get(key)
    if parse is None or not isinstance(member, str):
        return None
    try:
        return parse(member)
    except ValueError:
        return None


def from_json(value: Any) -> Any:
    """Stored JSON value as document value (tagged dates and datetimes restored)."""
    if isinstance(value, dict):
        if len(value) == 1:
            restored = _restore_tagged(*next(iter(value.items())))
            if restored is not None:
                return restored
        return {key: from_json(member) for key, member in value.items()}
    if isinstance(value, list):
        return [from_json(member) for member in value]
    return value
