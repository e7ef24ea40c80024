# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Deterministic identifiers derived from fixture labels."""


# standard libs
import hashlib

# internal libs
from docfix.core.typing import Label, Identifier

# public interface
__all__ = ['identifier_for', 'IDENTIFIER_BYTES', ]


# Identifiers use the 12-byte object id layout (24 hex digits)
IDENTIFIER_BYTES = 12


def identifier_for(label: Label) -> Identifier:
    """
    Identifier for `label`, independent of the record-set it appears in.

    Example:
        >>> identifier_for('alice')
        '6384e2b2184bcbf58eccf10c'
        >>> identifier_for('alice') == identifier_for('alice')
        True
    """
    return hashlib.md5(str(label).encode('utf-8')).digest()[:IDENTIFIER_BYTES].hex()
