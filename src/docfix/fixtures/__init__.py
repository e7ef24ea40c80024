# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Fixture parsing, relation resolution, and loading."""


# internal libs
from docfix.fixtures.errors import FixtureError, FixtureDefinitionError, FixtureNotFound
from docfix.fixtures.identity import identifier_for
from docfix.fixtures.parser import Fixture, parse_fixtures, find_fixture_files, interpolate_label
from docfix.fixtures.resolver import RelationResolver, Resolution, parse_reference
from docfix.fixtures.merger import DocumentMerger, merge_attributes
from docfix.fixtures.loader import (FixtureSet, FixtureCache, FixtureLoader, ModelMap,
                                    load_fixtures, reset_cache, is_cached, cached)

# public interface
__all__ = ['FixtureError', 'FixtureDefinitionError', 'FixtureNotFound', 'identifier_for',
           'Fixture', 'parse_fixtures', 'find_fixture_files', 'interpolate_label',
           'RelationResolver', 'Resolution', 'parse_reference', 'DocumentMerger', 'merge_attributes',
           'FixtureSet', 'FixtureCache', 'FixtureLoader', 'ModelMap',
           'load_fixtures', 'reset_cache', 'is_cached', 'cached', ]
