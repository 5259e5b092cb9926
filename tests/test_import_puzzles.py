import pytest

from chessvault.import_puzzles import import_puzzles, main
from chessvault.puzzle_store import open_puzzle_store

from test_puzzle_store import LICHESS_CSV


@pytest.fixture()
def csv_path(tmp_path):
    path = tmp_path / "lichess_db_puzzle.csv"
    path.write_text(LICHESS_CSV, encoding="utf-8")
    return str(path)


@pytest.mark.parametrize("name", ["puzzles.db3", "puzzles.duckdb"])
def test_import_puzzles(tmp_path, csv_path, name):
    output = str(tmp_path / "out" / name)

    assert import_puzzles(csv_path, output) == 3

    store = open_puzzle_store(output)
    assert store.count() == 3
    assert {p.rating for p in store.sample(0, 3000, 20)} == {1913, 1452, 1099}


def test_import_with_limit(tmp_path, csv_path):
    output = str(tmp_path / "puzzles.db3")
    assert import_puzzles(csv_path, output, limit=2) == 2


def test_main(tmp_path, csv_path, capsys):
    output = str(tmp_path / "puzzles.db3")

    assert main([csv_path, "-o", output, "--min-rating", "1400"]) == 0

    assert open_puzzle_store(output).count() == 2
    assert "Imported 2 puzzles" in capsys.readouterr().out
