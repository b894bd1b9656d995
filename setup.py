#!/usr/bin/env python
"""
Raygun
======

Raygun is a Python client for `Raygun <https://raygun.com/>`_ crash
reporting. It delivers error reports immediately, in timed batches, or
keeps them on disk while the application is offline and replays them
once it is back online. It includes drop-in support for any
`WSGI <https://wsgi.readthedocs.io/>`_-compatible web application and for
`Flask <http://flask.pocoo.org/>`_.
"""

from setuptools import setup, find_packages
import re
import ast


_version_re = re.compile(r'VERSION\s+=\s+(.*)')

with open('raygun/__init__.py', 'rb') as f:
    version = str(ast.literal_eval(_version_re.search(
        f.read().decode('utf-8')).group(1)))


install_requires = [
    'requests>=2.0',
]

flask_requires = [
    'Flask>=1.0',
    'blinker>=1.1',
]

tests_require = [
    'mock',
    'pytest',
] + flask_requires


setup(
    name='raygun',
    version=version,
    author='Raygun',
    url='https://github.com/MindscapeHQ/raygun4py',
    description='Raygun is a client for Raygun crash reporting (https://raygun.com)',
    long_description=__doc__,
    packages=find_packages(exclude=("tests", "tests.*",)),
    zip_safe=False,
    python_requires='>=3.7',
    extras_require={
        'flask': flask_requires,
        'tests': tests_require,
    },
    license='BSD',
    install_requires=install_requires,
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'raygun = raygun.scripts.runner:main',
        ],
    },
    classifiers=[
        'Intended Audience :: Developers',
        'Intended Audience :: System Administrators',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python',
        'Topic :: Software Development',
    ],
)
