from pathlib import Path

import numpy as np
import pytest

from chargefield.cli import main
from chargefield.errors import InvalidInput
from chargefield.io import load_field_csv, load_field_json


def test_cli_writes_json(tmp_path: Path, capsys) -> None:
    out = tmp_path / "field.json"
    main(["--q1", "2", "--q2", "-1", "--density", "4", "--output", str(out), "--validate"])
    text = capsys.readouterr().out
    assert "[OK] Field complete: samples=64" in text
    assert len(load_field_json(out)) == 64


def test_cli_csv_and_trace(tmp_path: Path, capsys) -> None:
    out = tmp_path / "field.csv"
    main(["--density", "3", "--output", str(out), "--trace", "--verbose"])
    text = capsys.readouterr().out
    assert "[IO]" in text and "[TRACE]" in text
    assert len(load_field_csv(out)) == 27
    lines = np.load(tmp_path / "field_lines.npz")
    assert lines["trajectories"].shape[0] == 24


def test_cli_config(tmp_path: Path, capsys) -> None:
    cfg = tmp_path / "run.toml"
    cfg.write_text(
        "[charges]\ncharge1_strength = 1.0\ncharge2_strength = 0.0\n\n"
        f"[sampling]\ndensity = 3\n\n[output]\ndir = \"{tmp_path.as_posix()}\"\n"
    )
    main(["--config", str(cfg)])
    assert "[OK] Pipeline complete: samples=27" in capsys.readouterr().out
    assert (tmp_path / "summary.json").exists()


def test_cli_rejects_non_positive_density() -> None:
    with pytest.raises(InvalidInput):
        main(["--density", "0"])
