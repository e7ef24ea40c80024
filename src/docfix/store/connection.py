# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Store engine and session management."""


# type annotations
from __future__ import annotations
from typing import Type

# standard libs
from functools import cached_property

# external libs
from cmdkit.config import Namespace, ConfigurationError
from sqlalchemy.engine import Engine, create_engine
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

# internal libs
from docfix.core.config import config
from docfix.core.logging import Logger, handler, INFO
from docfix.store.core import StoreConfiguration

# public interface
__all__ = ['ConnectionManager', 'default_connection', ]

# module logger
log = Logger.with_name(__name__)


class ConnectionManager:
    """Engine and session manager for one document store."""

    _store_config: Namespace

    def __init__(self: ConnectionManager, store_config: Namespace) -> None:
        """Initialization does not establish connections."""
        self._store_config = store_config

    @classmethod
    def default(cls: Type[ConnectionManager]) -> ConnectionManager:
        """Access global default manager (configured by `store` section)."""
        return default_connection

    @classmethod
    def memory(cls: Type[ConnectionManager]) -> ConnectionManager:
        """New manager for a private in-memory SQLite database."""
        return cls(Namespace({'provider': 'sqlite', 'file': ':memory:'}))

    @cached_property
    def config(self: ConnectionManager) -> StoreConfiguration:
        """Validated store configuration."""
        try:
            return StoreConfiguration.from_namespace(Namespace(self._store_config))
        except AttributeError as error:
            raise ConfigurationError(f'Store: {error}') from error

    @cached_property
    def engine(self: ConnectionManager) -> Engine:
        """Create engine instance from configuration."""
        url = self.config.url
        if self.config.echo:
            sql_log = Logger.with_name('sqlalchemy.engine')
            sql_log.addHandler(handler)
            sql_log.setLevel(INFO)
        try:
            if self.config.provider == 'sqlite' and self.config.file == ':memory:':
                # NOTE: a single shared connection keeps the in-memory database alive
                return create_engine(url, connect_args={'check_same_thread': False, **self.config.connect_args},
                                     poolclass=StaticPool)
            return create_engine(url, connect_args=dict(self.config.connect_args))
        except ArgumentError as error:
            raise ConfigurationError(f'Store engine: ({error})') from error

    @cached_property
    def session(self: ConnectionManager) -> scoped_session:
        """Scoped session bound to the engine."""
        log.debug(f'Opening session ({self.config.provider})')
        return scoped_session(sessionmaker(bind=self.engine))

    def close(self: ConnectionManager) -> None:
        """Release session and dispose of the engine."""
        if 'session' in self.__dict__:
            self.session.remove()
        if 'engine' in self.__dict__:
            self.engine.dispose()
            del self.__dict__['engine']
        self.__dict__.pop('session', None)


default_connection = ConnectionManager(config.store)
