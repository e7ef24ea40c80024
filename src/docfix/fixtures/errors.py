# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Fixture exceptions."""


# public interface
__all__ = ['FixtureError', 'FixtureDefinitionError', 'FixtureNotFound', ]


class FixtureError(Exception):
    """Generic error with respect to fixtures."""


class FixtureDefinitionError(FixtureError):
    """A fixture is structurally invalid for its relation context."""


class FixtureNotFound(FixtureError):
    """No fixture files or no fixture record for the requested name or label."""
