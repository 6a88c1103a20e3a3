"""Unit tests for CLI argument parsing."""
from __future__ import annotations

import pytest

from lp_monitor.cli import build_parser


class TestBuildParser:
    def test_run_command(self) -> None:
        args = build_parser().parse_args(["run"])
        assert args.command == "run"

    def test_portfolio_command(self) -> None:
        args = build_parser().parse_args(["portfolio", "wallet1"])
        assert args.command == "portfolio"
        assert args.wallet_id == "wallet1"
        assert not (args.summary or args.fees or args.earnings)

    def test_portfolio_view_flag(self) -> None:
        args = build_parser().parse_args(["portfolio", "wallet1", "--fees"])
        assert args.fees is True

    def test_portfolio_views_mutually_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["portfolio", "wallet1", "--fees", "--summary"])

    def test_prices_default_to_watch_list(self) -> None:
        args = build_parser().parse_args(["prices"])
        assert args.mints == []

    def test_prices_with_mints(self) -> None:
        args = build_parser().parse_args(["prices", "MintA", "MintB"])
        assert args.mints == ["MintA", "MintB"]

    def test_task_command(self) -> None:
        args = build_parser().parse_args(["task", "position-updates"])
        assert args.name == "position-updates"

    def test_unknown_task_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["task", "nope"])

    def test_config_flag(self) -> None:
        args = build_parser().parse_args(["--config", "/tmp/c.yaml", "run"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "run"])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        args = build_parser().parse_args([])
        assert args.command is None
