import yaml

from waktu_dashboard.core.config import DEFAULT_ZONE, Config


def test_default_config_is_written(tmp_path):
    config_file = tmp_path / "config.yaml"
    config = Config(config_path=str(config_file), watch=False)

    assert config_file.exists()
    assert config.data["timezone"] == "Asia/Kuala_Lumpur"
    assert config.get_component_config("Prayer Times")["zone"] == DEFAULT_ZONE
    assert config.get_component_config("Nope") is None


def test_save_component_config(tmp_path):
    config_file = tmp_path / "config.yaml"
    config = Config(config_path=str(config_file), watch=False)
    prayer = dict(config.get_component_config("Prayer Times"), zone="SGR01")
    config.save_component_config("Prayer Times", prayer)

    reloaded = Config(config_path=str(config_file), watch=False)
    assert reloaded.get_component_config("Prayer Times")["zone"] == "SGR01"


def test_env_substitution(tmp_path, monkeypatch):
    monkeypatch.setenv("WAKTU_TEST_HOST", "0.0.0.0")
    monkeypatch.setenv("WAKTU_TEST_MIRROR", "https://solat.example.my")
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.dump({
        "api": {"host": "$WAKTU_TEST_HOST"},
        "components": {"Prayer Times": {"api_base": "${WAKTU_TEST_MIRROR}/api", "zone": "${UNSET_WAKTU_VAR}"}},
    }))

    config = Config(config_path=str(config_file), watch=False)
    assert config.data["api"]["host"] == "0.0.0.0"
    prayer = config.get_component_config("Prayer Times")
    assert prayer["api_base"] == "https://solat.example.my/api"
    assert prayer["zone"] == "${UNSET_WAKTU_VAR}"
    assert config.data["timezone"] == "Asia/Kuala_Lumpur"


def test_invalid_file_keeps_previous_data(tmp_path):
    config_file = tmp_path / "config.yaml"
    config = Config(config_path=str(config_file), watch=False)
    config_file.write_text("- just\n- a list\n")
    config.reload()
    assert config.get_component_config("Prayer Times")["zone"] == DEFAULT_ZONE
