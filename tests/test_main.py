"""Tests for CLI argument handling."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from main import CLIArgs, main
from worldwire.config import get_default_config_path
from worldwire.data import DateUnit, MaintenanceMode, MaintenanceUnit, TopicSweepUnit


def _args(command: str, targets: list[str], **kwargs) -> CLIArgs:
    return CLIArgs(command=command, targets=targets, config=get_default_config_path(), **kwargs)


def test_date_units() -> None:
    units = _args("date", ["05-01", "12-31"]).units()
    assert units == [DateUnit(month=5, day=1), DateUnit(month=12, day=31)]


def test_leap_day_accepted() -> None:
    assert _args("date", ["02-29"]).units() == [DateUnit(month=2, day=29)]


@pytest.mark.parametrize("target", ["0501", "05-xx", "13-01", "02-30"])
def test_invalid_dates(target: str) -> None:
    with pytest.raises(ValueError):
        _args("date", [target]).units()


def test_topic_units() -> None:
    assert _args("topic", ["floods", "elections"]).units() == [
        TopicSweepUnit(topics=("floods", "elections"))
    ]


def test_topic_without_targets_sweeps_headlines() -> None:
    assert _args("topic", []).units() == [TopicSweepUnit(topics=("",))]


def test_maintenance_unit() -> None:
    units = _args("maintain", ["bias"], limit=5).units()
    assert units == [MaintenanceUnit(mode=MaintenanceMode.BIAS, limit=5)]


def test_missing_config_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValidationError, match="Config file not found"):
        CLIArgs(command="date", targets=["05-01"], config=tmp_path / "absent.yaml")


def test_main_exits_on_invalid_date(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.argv", ["main.py", "date", "99-99"])
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 1


def test_main_runs_maintenance_on_empty_store(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    config = tmp_path / "worldwire.yaml"
    config.write_text("store:\n  type: memory\n")
    monkeypatch.setattr("sys.argv", ["main.py", "--config", str(config), "maintain", "rescore"])

    main()
