# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Test configuration."""


pytest_plugins = ['docfix.testing']
