#!/usr/bin/env python

from setuptools import setup

setup(
    name="apptargets",
    version="0.1.0",
    packages=[
        "apptargets",
        "apptargets.details",
        "apptargets.details.tools",
        "apptargets.generators",
        "apptargets.generators.android",
        "apptargets.generators.xcode",
        "apptargets.storage",
    ],
    python_requires=">=3.9",
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["apptargets = apptargets.__main__:main"]},
)
