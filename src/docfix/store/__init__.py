# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Document store: connection, persistence, and documents."""


# internal libs
from docfix.store.core import StoreConfiguration, StoreError, StoreFailure, NotFound, ValidationError
from docfix.store.connection import ConnectionManager, default_connection
from docfix.store.document import Document
from docfix.store.interface import DocumentStore, new_identifier

# public interface
__all__ = ['StoreConfiguration', 'StoreError', 'StoreFailure', 'NotFound', 'ValidationError',
           'ConnectionManager', 'default_connection', 'Document', 'DocumentStore', 'new_identifier', ]
