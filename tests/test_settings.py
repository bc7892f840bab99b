# tests/test_settings.py

from concept_approacher.config.settings import Settings, get_settings, reset_settings


def test_defaults():
    settings = Settings()

    assert settings.USE_FUZZY_MATCHING is False
    assert settings.FUZZY_THRESHOLD == 0.6
    assert settings.RECURSIVE_DEPTH == 2
    assert settings.OPTIMIZER_ITERATIONS == 100
    assert settings.LEARNING_RATE == 0.01
    assert settings.PARAM_MIN == 0.1
    assert settings.PARAM_MAX == 5.0


def test_data_dir_created_and_paths_derived(tmp_path, monkeypatch):
    monkeypatch.setenv("APPROACHER_DATA_DIR", str(tmp_path / "approacher"))
    reset_settings()

    settings = get_settings()

    assert settings.DATA_DIR.exists()
    assert settings.corpus_path == tmp_path / "approacher" / "corpus.txt"
    assert settings.params_path == tmp_path / "approacher" / "parameters.txt"
    assert get_settings() is settings


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("APPROACHER_USE_FUZZY_MATCHING", "true")
    monkeypatch.setenv("APPROACHER_FUZZY_THRESHOLD", "0.8")
    monkeypatch.setenv("APPROACHER_CORPUS_FILE", str(tmp_path / "my_corpus.txt"))

    settings = Settings()

    assert settings.USE_FUZZY_MATCHING is True
    assert settings.FUZZY_THRESHOLD == 0.8
    assert settings.corpus_path == tmp_path / "my_corpus.txt"
