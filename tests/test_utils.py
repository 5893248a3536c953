import json
import logging

import pytest

from utils import DEFAULT_CONFIG, hsla_color, load_config, setup_logging, with_defaults


def test_hsla_primaries():
    assert hsla_color(0, 100, 50, 100) == (255, 0, 0, 255)
    assert hsla_color(120, 100, 50, 100)[:3] == (0, 255, 0)
    assert hsla_color(360, 100, 50, 100)[:3] == (255, 0, 0)
    assert hsla_color(0, 100, 100, 30)[:3] == (255, 255, 255)
    assert hsla_color(0, 100, 50, 30)[3] in (76, 77)


def test_with_defaults_fills_missing_keys():
    merged = with_defaults({"simulation_parameters": {"mode": "vortex"}})
    assert merged["simulation_parameters"]["mode"] == "vortex"
    assert merged["simulation_parameters"]["particle_count"] == 500
    assert merged["run_control"]["max_steps"] == 0
    assert DEFAULT_CONFIG["simulation_parameters"]["mode"] == "gravity"


def test_load_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"audio": {"source": "simulated"}}))
    config = load_config(str(path))
    assert config["audio"]["source"] == "simulated"
    assert config["visualization"]["fps"] == 60


def test_load_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(bad))


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
    try:
        logging.getLogger().info("hello from test")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello from test" in log_file.read_text()
        assert logging.getLogger().level == logging.DEBUG
    finally:
        for handler in list(logging.getLogger().handlers):
            handler.close()
        logging.getLogger().handlers.clear()


def test_load_config_rejects_non_object_documents(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError, match="JSON object"):
        load_config(str(path))


def test_sections_must_be_objects():
    with pytest.raises(ValueError, match="run_control"):
        with_defaults({"run_control": 5})
    assert with_defaults({"extra": [1]})["extra"] == [1]


def test_setup_logging_without_file_and_with_defaults():
    setup_logging({"logging": {"log_file": None}})
    try:
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], logging.FileHandler)
        assert logging.getLogger().level == logging.INFO
    finally:
        logging.getLogger().handlers.clear()


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError, match="loud"):
        setup_logging({"logging": {"level": "loud", "log_file": None}})
