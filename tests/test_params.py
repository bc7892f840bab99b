# tests/test_params.py

import pytest

from concept_approacher.scoring.params import DEFAULT_PARAMS, PARAM_KEYS, ParameterTable, param_key
from concept_approacher.scoring.params_io import load_parameters, save_parameters


def test_param_keys_cover_the_grid_in_order():
    assert len(PARAM_KEYS) == 25
    assert PARAM_KEYS[0] == "p11"
    assert PARAM_KEYS[4] == "p15"
    assert PARAM_KEYS[5] == "p21"
    assert PARAM_KEYS[-1] == "p55"
    assert param_key(3, 4) == "p34"


def test_defaults():
    params = ParameterTable.defaults()

    assert len(params) == 25
    assert params.weight(5, 5) == 2.0
    assert params.weight(1, 5) == 0.6
    assert params["p33"] == 1.5
    assert dict(params) == DEFAULT_PARAMS


def test_missing_keys_read_as_one():
    params = ParameterTable()
    assert params["p42"] == 1.0
    assert params.weight(2, 3) == 1.0
    assert "p42" not in params


def test_copy_is_independent():
    params = ParameterTable.defaults()
    clone = params.copy()
    clone["p55"] = 0.5

    assert params["p55"] == 2.0
    assert clone["p55"] == 0.5


def test_replace_overwrites_in_place():
    params = ParameterTable.defaults()
    same = params
    params.replace({"p11": 3.0})

    assert same["p11"] == 3.0
    assert "p55" not in same


def test_save_writes_header_and_sorted_lines(tmp_path):
    params = ParameterTable({"p21": 0.9, "p11": 1.0, "extra": 2.5})

    path = save_parameters(params, tmp_path / "nested" / "parameters.txt")
    lines = path.read_text(encoding="utf-8").splitlines()

    assert lines[0].startswith("#")
    body = [ln for ln in lines if ln and not ln.startswith("#")]
    assert body == ["extra=2.5", "p11=1.0", "p21=0.9"]


def test_save_then_load_preserves_values(tmp_path):
    params = ParameterTable.defaults()
    params["p34"] = 1.2345678901234567
    path = save_parameters(params, tmp_path / "parameters.txt")

    loaded = ParameterTable()
    count = load_parameters(path, loaded)

    assert count == 25
    assert dict(loaded) == dict(params)


def test_load_skips_comments_and_bad_lines(tmp_path):
    path = tmp_path / "parameters.txt"
    path.write_text(
        "# comment\n"
        "\n"
        "p 1 1 = 0.5\n"
        "p12=abc\n"
        "junk line\n"
        "foo = 3\n",
        encoding="utf-8",
    )
    params = ParameterTable.defaults()

    count = load_parameters(path, params)

    assert count == 2
    assert params["p11"] == 0.5
    assert params["p12"] == 0.9
    assert params["foo"] == 3.0


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_parameters(tmp_path / "nope.txt", ParameterTable())
