# SPDX-FileCopyrightText: 2022-2024 DocFix Team
# SPDX-License-Identifier: Apache-2.0

"""Setup and installation script for docfix."""


# standard libs
import re
from setuptools import setup, find_packages


# get long description from README.rst
with open('README.rst', mode='r') as readme:
    long_description = readme.read()


# get package metadata by parsing __init__ module
with open('src/docfix/__init__.py', mode='r') as source:
    content = source.read().strip()
    metadata = {key: re.search(key + r'\s*=\s*[\'"]([^\'"]*)[\'"]', content).group(1)
                for key in ['__version__', '__developer__', '__contact__',
                            '__description__', '__license__', '__keywords__', '__website__']}


setup(
    name                 = 'docfix',
    version              = metadata['__version__'],
    author               = metadata['__developer__'],
    author_email         = metadata['__contact__'],
    description          = metadata['__description__'],
    license              = metadata['__license__'],
    keywords             = metadata['__keywords__'],
    url                  = metadata['__website__'],
    package_dir          = {'': 'src'},
    packages             = find_packages('src'),
    long_description     = long_description,
    long_description_content_type = 'text/x-rst',
    classifiers          = ['Development Status :: 4 - Beta',
                            'Topic :: Software Development :: Testing',
                            'Framework :: Pytest',
                            'Programming Language :: Python :: 3',
                            'Programming Language :: Python :: 3.9',
                            'Programming Language :: Python :: 3.10',
                            'Programming Language :: Python :: 3.11',
                            'Programming Language :: Python :: 3.12',
                            'Operating System :: POSIX :: Linux', ],
    python_requires      = '>=3.9',
    entry_points         = {'console_scripts': ['docfix=docfix.apps.docfix:main']},
    install_requires     = [
        'sqlalchemy>=2.0.0', 'cmdkit>=2.6.1', 'toml>=0.10.2', 'pyyaml>=6.0', 'rich>=12.0.0',
    ],
    extras_require       = {
        'postgres': ['psycopg2>=2.9.3', ],
        'test': ['pytest>=7.0.0', 'hypothesis>=6.0.0', ],
    },
)
