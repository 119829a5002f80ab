# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/cli/args/builder.py
from __future__ import annotations

import argparse

from ...core.logger import c
from ..help_texts import EXIT_CODES, FEATURE_SUMMARY, YAML_EXAMPLE

_EPILOG_SECTIONS = (
    ("YAML example", YAML_EXAMPLE),
    ("Feature summary", FEATURE_SUMMARY),
    ("Exit codes", EXIT_CODES),
)


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Keeps the epilog layout and shows defaults."""


def _build_epilog() -> str:
    return "\n".join(
        c(f"{title}:", "cyan", ["bold"]) + "\n" + c(body.rstrip("\n"), "cyan") + "\n"
        for title, body in _EPILOG_SECTIONS
    )
