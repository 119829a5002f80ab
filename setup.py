# SPDX-License-Identifier: LGPL-3.0-or-later
from setuptools import setup, find_packages

setup(
    name="bulkstatic",
    version="0.3.0",
    packages=find_packages(include=["bulkstatic", "bulkstatic.*"]),
    python_requires=">=3.8",
    install_requires=[l.strip() for l in open("requirements.txt", encoding="utf-8") if l.strip() and not l.startswith("#")],
    extras_require={"test": ["pytest>=7.0"]},
    entry_points={"console_scripts": ["bulkstatic=bulkstatic.__main__:main"]},
)
