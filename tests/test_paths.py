from taskpulse.core import paths


def test_default_dir_under_roaming_root(tmp_path, app_data_dir):
    assert app_data_dir == tmp_path / "roaming" / "taskpulse"
    assert app_data_dir.is_dir()


def test_xdg_data_home_used_without_appdata(tmp_path, monkeypatch):
    monkeypatch.delenv("APPDATA")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    assert paths.default_app_data_dir() == tmp_path / "xdg" / "taskpulse"


def test_override_redirects_settings_and_log(tmp_path):
    target = tmp_path / "custom"
    assert paths.set_app_data_directory(target) == target
    assert target.is_dir()
    assert paths.log_path() == target / "taskpulse.log"
    assert paths.settings_path() == target / "settings.json"

    assert paths.set_app_data_directory(None) == tmp_path / "roaming" / "taskpulse"
