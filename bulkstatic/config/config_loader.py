# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/config/config_loader.py
from __future__ import annotations

import argparse
import glob
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..core.utils import U

# never taken from YAML: they only make sense on the command line
_CLI_ONLY = frozenset({"config", "help", "version", "dump_config", "dump_args"})


def _deep_merge_dict(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge dicts:
      - dict values merge recursively
      - everything else is replaced (override wins)
    """
    out: Dict[str, Any] = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge_dict(out[k], v)
        else:
            out[k] = v
    return out


def _normalize_key(k: Any) -> str:
    return str(k).strip().replace("-", "_")


class Config:
    @staticmethod
    def expand_configs(logger: logging.Logger, cfgs: List[str]) -> List[Path]:
        """Expand ~, $VARS and globs; a path that matches nothing is fatal."""
        out: List[Path] = []
        for raw in cfgs:
            s = os.path.expandvars(os.path.expanduser(str(raw)))
            hits = sorted(glob.glob(s)) if glob.has_magic(s) else [s]
            if not hits:
                U.die(logger, f"Config glob matched nothing: {raw}", 1)
            for h in hits:
                p = Path(h)
                if not p.is_file():
                    U.die(logger, f"Config file not found: {p}", 1)
                out.append(p)
        logger.debug("Config files: %s", ", ".join(str(p) for p in out))
        return out

    @staticmethod
    def load_one(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            U.die(logger, f"Cannot read config {path}: {e}", 1)
        except yaml.YAMLError as e:
            U.die(logger, f"Invalid YAML in {path}: {e}", 1)

        if data is None:
            return {}
        if not isinstance(data, dict):
            U.die(logger, f"Config {path} must be a YAML mapping, got {type(data).__name__}", 1)
        return {_normalize_key(k): v for k, v in data.items()}

    @staticmethod
    def load_many(logger: logging.Logger, paths: List[Path]) -> Dict[str, Any]:
        """Later files override earlier ones; nested mappings merge."""
        conf: Dict[str, Any] = {}
        for p in paths:
            conf = _deep_merge_dict(conf, Config.load_one(logger, p))
        return conf

    @staticmethod
    def apply_as_defaults(logger: logging.Logger, parser: argparse.ArgumentParser, conf: Dict[str, Any]) -> None:
        """
        Push known keys into the parser as defaults so explicit CLI flags win.
        Unknown keys are reported and ignored.
        """
        dests = {a.dest for a in parser._actions if a.dest != argparse.SUPPRESS}
        defaults: Dict[str, Any] = {}
        for k, v in conf.items():
            if k in _CLI_ONLY or k not in dests:
                logger.warning("Ignoring unknown config key: %s", k)
                continue
            defaults[k] = v
        if defaults:
            logger.debug("Config defaults: %s", ", ".join(sorted(defaults)))
            parser.set_defaults(**defaults)
