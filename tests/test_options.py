"""Tests for option resolution."""

import io
import os
import pwd

import pytest

from graceful_shutdown.errors import UserNotFoundError
from graceful_shutdown.matcher import MatchMode
from graceful_shutdown.options import ColorMode, Options, OutputMode, find_user_by_name
from graceful_shutdown.signals import Signal


def cli_values(**overrides):
    values = {
        "wait_time": 5.0,
        "no_kill": False,
        "terminate_signal": Signal.SIGTERM,
        "kill_signal": Signal.SIGKILL,
        "whole_command": False,
        "user": None,
        "mine": False,
        "dry_run": False,
        "verbosity": OutputMode.NORMAL,
        "color": ColorMode.NEVER,
    }
    values.update(overrides)
    return values


class TestOptionsFromCli:
    """Tests for Options.from_cli."""

    def test_defaults(self):
        """Test default values resolve to the default policy."""
        options = Options.from_cli(**cli_values())

        assert options.policy.wait_duration == 5.0
        assert options.policy.force_kill_enabled
        assert not options.policy.dry_run
        assert options.match_mode is MatchMode.BASENAME
        assert options.output_mode is OutputMode.NORMAL
        assert options.user is None
        assert options.color_mode is ColorMode.NEVER

    def test_zero_wait_disables_waiting(self):
        """Test a wait time of zero becomes no wait at all."""
        options = Options.from_cli(**cli_values(wait_time=0.0))
        assert options.policy.wait_duration is None
        assert not options.policy.should_wait

    def test_no_kill(self):
        """Test --no-kill disables force killing."""
        assert not Options.from_cli(**cli_values(no_kill=True)).policy.force_kill_enabled

    def test_signals_are_independent(self):
        """Test both signals are carried as given."""
        options = Options.from_cli(**cli_values(terminate_signal=Signal.SIGINT, kill_signal=Signal.SIGQUIT))
        assert options.policy.terminate_signal is Signal.SIGINT
        assert options.policy.kill_signal is Signal.SIGQUIT

    def test_whole_command(self):
        """Test --whole-command switches to commandline matching."""
        assert Options.from_cli(**cli_values(whole_command=True)).match_mode is MatchMode.COMMANDLINE

    def test_dry_run_implies_verbose(self):
        """Test dry runs are verbose even when quiet was asked for."""
        options = Options.from_cli(**cli_values(dry_run=True, verbosity=OutputMode.QUIET))
        assert options.output_mode is OutputMode.VERBOSE
        assert options.policy.dry_run

    def test_mine_uses_current_uid(self):
        """Test --mine scopes to the current user."""
        assert Options.from_cli(**cli_values(mine=True)).user == os.getuid()

    def test_user_wins_over_mine(self):
        """Test --user takes precedence over --mine."""
        root = pwd.getpwuid(0).pw_name
        assert Options.from_cli(**cli_values(user=root, mine=True)).user == 0

    def test_unknown_user_raises(self):
        """Test an unknown user name raises UserNotFoundError."""
        with pytest.raises(UserNotFoundError, match="no-such-user-xyz"):
            Options.from_cli(**cli_values(user="no-such-user-xyz"))


class TestFindUserByName:
    """Tests for find_user_by_name."""

    def test_finds_root(self):
        """Test uid 0 is found by its account name."""
        assert find_user_by_name(pwd.getpwuid(0).pw_name) == 0


class TestModes:
    """Tests for OutputMode and ColorMode."""

    def test_output_mode_levels(self):
        """Test which output levels are shown per mode."""
        assert not OutputMode.QUIET.show_normal
        assert not OutputMode.QUIET.show_verbose
        assert OutputMode.NORMAL.show_normal
        assert not OutputMode.NORMAL.show_verbose
        assert OutputMode.VERBOSE.show_normal
        assert OutputMode.VERBOSE.show_verbose

    def test_color_mode(self):
        """Test auto follows the stream and the others are fixed."""
        not_a_tty = io.StringIO()
        assert ColorMode.ALWAYS.enabled(not_a_tty)
        assert not ColorMode.NEVER.enabled(not_a_tty)
        assert not ColorMode.AUTO.enabled(not_a_tty)
