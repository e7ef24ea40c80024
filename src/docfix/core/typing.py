# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Annotation types shared across fixtures and the store."""


# type annotations
from typing import Dict, Union, Any

# public interface
__all__ = ['Scalar', 'Label', 'Identifier', 'Attributes', ]


# Values a store filter can match on
Scalar = Union[bool, str, int, float, None]

# Human-readable name of a fixture record
Label = str

# Hex-encoded document identifier
Identifier = str

# Field name to value, nested mappings and lists allowed
Attributes = Dict[str, Any]
