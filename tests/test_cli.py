"""Command-line entry point."""
import pytest

import radio


def test_parse_command(capsys):
    assert radio.main(["parse", "rock", "uit", "de", "jaren", "90"]) == 0
    out = capsys.readouterr().out
    assert "Jaren 90 + Rock" in out


def test_script_command(capsys):
    assert radio.main(["script", "jazz", "station_id"]) == 0
    assert "Jazz" in capsys.readouterr().out


def test_stations_command(capsys):
    assert radio.main(["stations"]) == 0
    out = capsys.readouterr().out
    assert "classics" in out and "chill" in out


def test_unknown_station_rejected():
    with pytest.raises(SystemExit):
        radio.main(["script", "polka", "intro"])
