from __future__ import annotations

import pytest

from babytracker.cli import build_parser, main


def test_add_user_and_baby(capsys):
    main(["add-user", "--id", "user-7", "--email", "claire@example.com", "--first-name", "Claire", "--last-name", "Roy"])
    main(["add-baby", "--id", "baby-7", "--user-id", "user-7", "--name", "Jules", "--birth-date", "2026-02-01"])
    main(["list", "babies"])

    out = capsys.readouterr().out
    assert "User saved: user-7" in out
    assert "Baby saved: baby-7" in out
    assert "baby-7 | Jules | born 2026-02-01 | parent: claire@example.com" in out


def test_vaccine_schedule(capsys, baby):
    main(["vaccine-schedule", "--baby-id", "baby-1"])
    out = capsys.readouterr().out
    assert "20 vaccine(s) scheduled." in out
    assert "Hépatite B" in out


def test_command_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
