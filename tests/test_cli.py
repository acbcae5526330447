import pytest

from sudoku_anneal import main


@pytest.fixture
def puzzle_file(tmp_path, monkeypatch):
    monkeypatch.setenv("ANNEAL_LOG_DIR", str(tmp_path / "logs"))
    path = tmp_path / "grids.txt"
    path.write_text("1234341221434321\n1.3.3..2.1.3..2.\n", encoding="utf-8")
    return path


def test_solves_puzzle_from_file(puzzle_file, tmp_path, capsys):
    main(["-f", str(puzzle_file), "-d", "2x2", "--seed", "5", "--threads", "-a", "2"])
    out = capsys.readouterr().out
    assert "Original Puzzle:" in out
    assert "Solved Puzzle:" in out
    assert "Execution completed in" in out
    assert (tmp_path / "logs" / "grids" / "line-1.log").is_file()


def test_training_mode_prints_csv(puzzle_file, capsys):
    main(
        [
            "-f", str(puzzle_file), "-l", "2", "-d", "2x2", "--seed", "5", "--threads",
            "-t", "0.5", "-c", "0.5", "-i", "100", "-s", "1", "-a", "2", "--training-mode",
        ]
    )  # fmt: skip
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 1
    fields = out[0].split(",")
    assert fields[:6] == ["2", "0.5", "0.5", "100", "1", "2"]
    assert fields[6] in ("true", "false")
    assert float(fields[7]) >= 0


def test_invalid_configuration_exits(puzzle_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(puzzle_file), "-c", "1.5"])
    assert excinfo.value.code == 1
    assert "Invalid solver configuration" in capsys.readouterr().out


def test_missing_file_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(tmp_path / "missing.txt")])
    assert excinfo.value.code == 1


def test_bad_puzzle_exits(puzzle_file):
    with pytest.raises(SystemExit) as excinfo:
        # 2x2 lines are too short for 3x3 blocks
        main(["-f", str(puzzle_file), "-d", "3x3", "--threads"])
    assert excinfo.value.code == 1


def test_too_many_workers_exits(puzzle_file, monkeypatch, capsys):
    monkeypatch.setattr("os.cpu_count", lambda: 2)
    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(puzzle_file), "-d", "2x2", "--workers", "100000"])
    assert excinfo.value.code == 1
    assert "exceeds CPU count (2)" in capsys.readouterr().out


def test_unknown_input_mode_exits(puzzle_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(puzzle_file), "-d", "2x2", "-m", "grid", "--threads"])
    assert excinfo.value.code == 1
    assert "Unsupported input mode" in capsys.readouterr().out
