from isimipplus import config


def test_project_root_is_closest_directory_with_criteria(tmp_path):
    (tmp_path / config.CRITERIA_FILENAME).write_text("search_criteria: {}\n")
    nested = tmp_path / "isimipplus" / "sub"
    nested.mkdir(parents=True)

    assert config.find_project_root(nested) == tmp_path.resolve()
    assert config.find_project_root(tmp_path) == tmp_path.resolve()


def test_project_root_falls_back_to_working_directory(tmp_path, monkeypatch):
    start = tmp_path / "no_config_here"
    start.mkdir()
    monkeypatch.chdir(tmp_path)

    assert config.find_project_root(start) == tmp_path.resolve()
