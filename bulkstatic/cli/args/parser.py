# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# bulkstatic/cli/args/parser.py
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Optional, Sequence, Tuple

from ...config.config_loader import Config
from ...core.logger import Log, c
from ...core.utils import U
from .builder import HelpFormatter, _build_epilog
from .groups import (
    _add_global_config_logging,
    _add_network_intent,
    _add_resolution_knobs,
    _add_run_control,
)
from .validators import validate_args

# Settings that shape the logger; a YAML value for any of them means Log.setup runs again.
_LOGGING_KEYS = ("verbose", "log_file", "json_logs")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bulkstatic",
        description=c("bulkstatic: pin Proxmox containers and VMs to static IPs", "green", ["bold"]),
        formatter_class=HelpFormatter,
        epilog=_build_epilog(),
    )
    for add_group in (_add_global_config_logging, _add_network_intent, _add_run_control, _add_resolution_knobs):
        add_group(p)
    return p


def _build_preparser() -> argparse.ArgumentParser:
    """Only what is needed before the YAML files are read."""
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", action="append", default=[])
    pre.add_argument("-v", "--verbose", action="count", default=0)
    pre.add_argument("--log-file", dest="log_file", default=None)
    pre.add_argument("--json-logs", dest="json_logs", action="store_true")
    pre.add_argument("--dump-config", action="store_true")
    pre.add_argument("--dump-args", action="store_true")
    return pre


def _load_merged_config(logger: Any, cfgs: Sequence[str]) -> Dict[str, Any]:
    if not cfgs:
        return {}
    return Config.load_many(logger, Config.expand_configs(logger, list(cfgs)))


def _setup_logger(ns: argparse.Namespace) -> Any:
    return Log.setup(int(ns.verbose or 0), ns.log_file, json_logs=bool(ns.json_logs))


def _dump_and_exit(obj: Any) -> None:
    print(U.json_dump(obj))
    raise SystemExit(0)


def parse_args_with_config(
    argv: Optional[Sequence[str]] = None,
    logger: Any = None,
) -> Tuple[argparse.Namespace, Dict[str, Any], Any]:
    """
    Parse the command line with YAML files as a lower-priority layer.

    The pre-parser finds --config and the logging flags, the YAML mapping
    is merged and installed as parser defaults, and the full parse lets
    explicit flags win. The result is validated and normalised (netmask
    becomes a prefix length) before it is returned.

    A caller-supplied logger is used as is; otherwise one is built here.
    """
    argv = list(sys.argv[1:] if argv is None else argv)

    early, _ = _build_preparser().parse_known_args(argv)
    own_logger = logger is None
    if own_logger:
        logger = _setup_logger(early)

    conf = _load_merged_config(logger, early.config or [])
    if early.dump_config:
        _dump_and_exit(conf)

    parser = build_parser()
    Config.apply_as_defaults(logger, parser, conf)
    args = parser.parse_args(argv)

    if own_logger and any(getattr(args, k) != getattr(early, k) for k in _LOGGING_KEYS):
        logger = _setup_logger(args)

    if early.dump_args:
        _dump_and_exit(vars(args))

    validate_args(args, conf)
    return args, conf, logger
