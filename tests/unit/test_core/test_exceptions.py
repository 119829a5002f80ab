# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for the exception hierarchy and CLI formatting."""
from __future__ import annotations

import pytest

from bulkstatic.core.exceptions import (
    BulkStaticError,
    CollaboratorError,
    ConfigMalformed,
    ConfigStoreError,
    Fatal,
    LifecycleError,
    format_exception_for_cli,
    wrap_fatal,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    """Test exception class hierarchy and basic functionality."""

    def test_base_exception_creation(self):
        err = BulkStaticError(code=1, msg="Test error")

        assert err.code == 1
        assert err.msg == "Test error"
        assert err.cause is None
        assert err.context == {}

    @pytest.mark.parametrize("cls", [Fatal, ConfigMalformed, ConfigStoreError, CollaboratorError, LifecycleError])
    def test_subclasses(self, cls):
        err = cls(msg="boom")
        assert isinstance(err, BulkStaticError)
        assert str(err) == "boom"

    def test_exception_with_context(self):
        err = ConfigMalformed(msg="no ip= token").with_context(kind="lxc", vmid="101")

        assert err.context == {"kind": "lxc", "vmid": "101"}
        assert err.to_dict()["context"]["vmid"] == "101"

    def test_exception_with_cause(self):
        cause = OSError("read-only file system")
        err = ConfigStoreError(msg="cannot write /etc/pve/lxc/101.conf", cause=cause)

        assert err.cause is cause
        assert "read-only" in err.user_message(include_cause=True)
        assert err.to_dict(include_cause=True)["cause"]["type"] == "OSError"

    @pytest.mark.parametrize("code,expected", [(-1, 1), (999, 255), ("2", 2), ("junk", 1)])
    def test_exit_code_is_clamped(self, code, expected):
        assert Fatal(code=code, msg="x").code == expected

    def test_multiline_message_is_flattened(self):
        assert "\n" not in Fatal(msg="line1\nline2").msg


@pytest.mark.unit
class TestHelpers:
    def test_wrap_fatal(self):
        cause = ValueError("only octet-aligned")
        err = wrap_fatal("bad netmask", cause, prefix_length=20)

        assert isinstance(err, Fatal)
        assert err.code == 1
        assert err.cause is cause
        assert err.context == {"prefix_length": 20}

    def test_format_for_cli_verbosity(self):
        err = LifecycleError(msg="pct start 101 exited 1", cause=RuntimeError("lock")).with_context(vmid="101")

        assert format_exception_for_cli(err) == "pct start 101 exited 1"
        assert "vmid='101'" in format_exception_for_cli(err, verbose=1)
        assert "RuntimeError" in format_exception_for_cli(err, verbose=2)

    def test_format_foreign_exception(self):
        assert format_exception_for_cli(KeyError("x"), verbose=2).startswith("KeyError")
