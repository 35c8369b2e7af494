import importlib
import sys


def test_state_dir_follows_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("VMSERVICE_MDNS_STATE_DIR", str(tmp_path / "state"))

    import vmservice_mdns.core.paths as paths_module
    paths_module = importlib.reload(paths_module)
    sys.modules['vmservice_mdns.core.paths'] = paths_module

    assert paths_module.USER_STATE_DIR == tmp_path / "state"
    assert paths_module.USER_CONFIG_OVERRIDES_DIR == tmp_path / "state" / "config_overrides"
    assert paths_module.CONFIG_PATH.name == "config.txt"
    assert set(paths_module.__all__) == {
        'PROJECT_ROOT',
        'CONFIG_PATH',
        'USER_STATE_DIR',
        'USER_CONFIG_OVERRIDES_DIR',
    }
