import json

import pytest

from worldanimator import config as config_module
from worldanimator.config import WorldAnimatorConfig, get_config, reset_config


@pytest.fixture
def clean_env(monkeypatch):
    for key in WorldAnimatorConfig.DEFAULTS:
        monkeypatch.delenv(f"WORLDANIMATOR_{key.upper()}", raising=False)
    monkeypatch.delenv("WORLDANIMATOR_CONFIG_FILE", raising=False)
    return monkeypatch


def test_defaults(config):
    assert config.interpolation_mode == 'hermite'
    assert config.tension == 0.0
    assert config.default_path_step == 1
    assert config.path_cache_max_entries == 32
    assert config.value_cache_max_entries == 4096
    assert config.abandon_stale_samples is True
    assert config.globe_radius == pytest.approx(6378137.0)
    assert config.get_all() == WorldAnimatorConfig.DEFAULTS


def test_json_file_overrides_defaults(clean_env, tmp_path):
    path = tmp_path / 'worldanimator_config.json'
    path.write_text(json.dumps({
        '_comment': 'ignored',
        'worldanimator': {'interpolation_mode': 'LINEAR', 'default_path_step': 5, '_note': 'ignored'},
    }))

    config = WorldAnimatorConfig(path)
    assert config.interpolation_mode == 'linear'
    assert config.default_path_step == 5
    assert config.get('_note') is None


def test_environment_overrides_json(clean_env, tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'tension': 0.2, 'abandon_stale_samples': True}))
    clean_env.setenv('WORLDANIMATOR_CONFIG_FILE', str(path))
    clean_env.setenv('WORLDANIMATOR_TENSION', '0.5')
    clean_env.setenv('WORLDANIMATOR_ABANDON_STALE_SAMPLES', 'no')
    clean_env.setenv('WORLDANIMATOR_PATH_CACHE_MAX_ENTRIES', '8')

    config = WorldAnimatorConfig()
    assert config.tension == 0.5
    assert config.abandon_stale_samples is False
    assert config.path_cache_max_entries == 8


def test_unparseable_environment_value_keeps_default(clean_env):
    clean_env.setenv('WORLDANIMATOR_DEFAULT_PATH_STEP', 'often')
    assert WorldAnimatorConfig().default_path_step == 1


@pytest.mark.parametrize("key, value", [
    ('interpolation_mode', 'bezier'),
    ('tension', 2.0),
    ('default_path_step', 0),
    ('path_cache_max_entries', -1),
    ('globe_radius', 0),
])
def test_invalid_values_reset_to_defaults(clean_env, tmp_path, caplog, key, value):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({key: value}))

    config = WorldAnimatorConfig(path)
    assert config.get(key) == WorldAnimatorConfig.DEFAULTS[key]
    assert f"Invalid {key}" in caplog.text


def test_broken_json_is_ignored(clean_env, tmp_path, caplog):
    path = tmp_path / 'config.json'
    path.write_text('{not json')

    config = WorldAnimatorConfig(path)
    assert config.get_all() == WorldAnimatorConfig.DEFAULTS
    assert "Failed to load JSON config" in caplog.text


def test_set_and_reload(config):
    config.set('default_path_step', 4)
    assert config.default_path_step == 4
    config.reload()
    assert config.default_path_step == 1


def test_global_instance(clean_env):
    reset_config()
    try:
        assert get_config() is get_config()
        first = get_config()
        reset_config()
        assert get_config() is not first
    finally:
        config_module._global_config_instance = None
