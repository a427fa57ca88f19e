#!/usr/bin/python3
# Setup file for zit
# Copyright (C) 2026 Zit contributors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

tests_require = ["pytest"]


setup(
    name="zit",
    version="0.1.0",
    description="A minimal version control system",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["zit"],
    install_requires=["rich"],
    extras_require={
        "patiencediff": ["patiencediff"],
        "test": tests_require,
    },
    entry_points={
        "console_scripts": ["zit = zit.cli:_main"],
    },
    package_data={"": ["py.typed"]},
)
