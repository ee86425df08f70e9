"""Unit tests for command parsing and routing

Covers built-in vs external classification, the plugin lookup name,
the not-found diagnostic, and the end-to-end exit behaviour of main().
"""
import argparse
import io
import os
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

from cli.commands import BuiltinCommand, RootOptions
from cli.config import CliError
from cli.dispatch import PluginLaunchError, Termination
from cli.main import main, run
from cli.output import Terminal
from cli.router import Builtin, CommandRouter, External, parse_command


def make_router(locate=None, dispatch=None, install_dir=Path("/home/u/.streamctl/extensions"), builtins=None):
    out = io.StringIO()
    locator = Mock()
    locator.locate.return_value = locate
    dispatcher = Mock()
    dispatcher.dispatch.return_value = dispatch
    router = CommandRouter(
        out=Terminal(out=out),
        locator=locator,
        dispatcher=dispatcher,
        builtins=builtins,
        install_dir=lambda: install_dir,
    )
    return router, out


class TestParseCommand:
    """Splitting argv into root options and a Command"""

    def test_unknown_name_is_external(self):
        root, command = parse_command(["foo", "--bar"])

        assert command == External(("foo", "--bar"))
        assert root == RootOptions()

    def test_root_options_before_external(self):
        root, command = parse_command(["--cluster", "10.0.0.1:9003", "foo", "-x", "1"])

        assert root.cluster == "10.0.0.1:9003"
        assert command == External(("foo", "-x", "1"))

    def test_builtin_is_parsed_by_its_own_parser(self):
        root, command = parse_command(["-P", "dev", "profile", "switch", "staging"])

        assert root.profile == "dev"
        assert isinstance(command, Builtin)
        assert command.name == "profile"
        assert command.args.action == "switch"
        assert command.args.name == "staging"

    def test_no_command_shows_help(self):
        _, command = parse_command([])

        assert command == Builtin("help", argparse.Namespace())

    def test_custom_builtin_registry(self):
        custom = {"ping": BuiltinCommand("ping", "ping", lambda p: p.add_argument("--count", type=int),
                                         lambda ctx, args: None)}

        _, command = parse_command(["ping", "--count", "3"], builtins=custom)
        _, other = parse_command(["version"], builtins=custom)

        assert command.args.count == 3
        assert other == External(("version",))

    def test_double_dash_is_passed_to_extension(self):
        _, command = parse_command(["foo", "--", "x"])

        assert command == External(("foo", "--", "x"))

    def test_extension_args_kept_verbatim_after_root_options(self):
        root, command = parse_command(["--clu=10.0.0.1:9003", "-Pdev", "--log-level", "DEBUG",
                                       "run", "--", "ls", "-l"])

        assert root == RootOptions(cluster="10.0.0.1:9003", profile="dev", log_level="DEBUG")
        assert command == External(("run", "--", "ls", "-l"))

    def test_no_command_without_help_is_usage_error(self, capsys):
        custom = {"ping": BuiltinCommand("ping", "ping", lambda p: None, lambda ctx, args: None)}

        with pytest.raises(SystemExit) as exc_info:
            parse_command([], builtins=custom)

        assert exc_info.value.code == 2
        assert "a command is required" in capsys.readouterr().err


class TestRouteExternal:
    """Unrecognized names go through the plugin locator"""

    def test_looks_up_prefixed_name_only(self):
        router, _ = make_router()

        router.route(RootOptions(), External(("foo", "--bar")))

        router.locator.locate.assert_called_once_with("streamctl-foo")

    def test_not_found_names_install_location(self):
        router, out = make_router()

        result = router.route(RootOptions(), External(("foo", "--bar")))

        assert result == Termination(code=1)
        assert "Unable to find plugin 'streamctl-foo'" in out.getvalue()
        assert "/home/u/.streamctl/extensions" in out.getvalue()
        router.dispatcher.dispatch.assert_not_called()

    def test_not_found_without_home_mentions_path(self):
        router, out = make_router(install_dir=None)

        router.route(RootOptions(), External(("foo",)))

        assert "Make sure it is in your PATH." in out.getvalue()

    def test_found_dispatches_remaining_args(self):
        path = Path("/usr/local/bin/streamctl-foo")
        router, _ = make_router(locate=path, dispatch=Termination(code=4))

        result = router.route(RootOptions(), External(("foo", "--bar", "baz")))

        router.dispatcher.dispatch.assert_called_once_with(path, ["--bar", "baz"])
        assert result == Termination(code=4)


class TestRouteBuiltin:
    """Built-ins run in-process with the shared context"""

    def test_handler_receives_context(self):
        handler = Mock()
        builtins = {"ping": BuiltinCommand("ping", "ping", lambda p: None, handler)}
        router, _ = make_router(builtins=builtins)
        root = RootOptions(cluster="x:1")
        args = argparse.Namespace()

        assert router.route(root, Builtin("ping", args)) is None

        ctx, passed_args = handler.call_args[0]
        assert ctx.target == root
        assert ctx.out is router.out
        assert ctx.locator is router.locator
        assert passed_args is args
        router.locator.locate.assert_not_called()

    def test_handler_error_propagates(self):
        handler = Mock(side_effect=CliError("boom"))
        builtins = {"ping": BuiltinCommand("ping", "ping", lambda p: None, handler)}
        router, _ = make_router(builtins=builtins)

        with pytest.raises(CliError, match="boom"):
            router.route(RootOptions(), Builtin("ping", argparse.Namespace()))

    def test_unregistered_builtin_is_cli_error(self):
        router, _ = make_router(builtins={})

        with pytest.raises(CliError, match="unknown command help"):
            router.route(RootOptions(), Builtin("help", argparse.Namespace()))


class TestMain:
    """Process-level behaviour"""

    def test_run_reports_handler_error(self, capsys):
        router = Mock()
        router.route.side_effect = CliError("no active profile set")

        result = run(["profile", "current"], router=router)

        assert result == Termination(code=1)
        assert "Error: no active profile set" in capsys.readouterr().err

    def test_run_reports_launch_error(self, capsys):
        router = Mock()
        router.route.side_effect = PluginLaunchError(Path("streamctl-foo"), PermissionError(13, "Permission denied"))

        assert run(["foo"], router=router) == Termination(code=1)
        assert "Error: failed to launch streamctl-foo" in capsys.readouterr().err

    @pytest.mark.skipif(os.name != "posix", reason="relies on POSIX PATH semantics")
    def test_missing_plugin_exits_1(self, tmp_path, monkeypatch, streamctl_home, capsys):
        """`streamctl foo --bar` with no streamctl-foo anywhere"""
        empty = tmp_path / "empty-path"
        empty.mkdir()
        monkeypatch.setenv("PATH", str(empty))
        monkeypatch.setattr(sys, "argv", ["-c"])

        with pytest.raises(SystemExit) as exc_info:
            main(["foo", "--bar"])

        assert exc_info.value.code == 1
        assert "Unable to find plugin 'streamctl-foo'" in capsys.readouterr().out

    @pytest.mark.skipif(os.name != "posix", reason="uses shell scripts as plugins")
    def test_plugin_exit_code_becomes_ours(self, tmp_path, monkeypatch, streamctl_home, make_executable):
        make_executable(streamctl_home / "extensions", "streamctl-foo", "#!/bin/sh\nexit 5\n")
        monkeypatch.setenv("PATH", str(tmp_path / "nothing"))
        monkeypatch.setattr(sys, "argv", ["-c"])

        with pytest.raises(SystemExit) as exc_info:
            main(["foo"])

        assert exc_info.value.code == 5

    def test_builtin_success_returns_normally(self, streamctl_home, capsys):
        main(["version"])

        assert "streamctl CLI" in capsys.readouterr().out
