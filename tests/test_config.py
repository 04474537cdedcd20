# tests/test_config.py
import os

import pytest

from srcds_rcon.config import (
    RconConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)
from srcds_rcon.exceptions import ConfigError


@pytest.fixture
def clean_env(monkeypatch):
    """隔离 os.environ，去掉所有 RCON_ 前缀的变量 (python-dotenv 写入的值也会被还原)"""
    env = {k: v for k, v in os.environ.items() if not k.startswith("RCON_")}
    monkeypatch.setattr(os, "environ", env)
    return env


def test_create_config_defaults():
    config = create_config_from_dict({"host": "10.0.0.1"})

    assert config == RconConfig(host="10.0.0.1")
    assert config.port == 27015
    assert config.password == ""
    assert config.max_packet_size == 4096
    assert config.timeout == 10.0
    assert config.multi_packet_threshold == 3700


def test_create_config_converts_strings():
    config = create_config_from_dict(
        {
            "host": "play.example.com",
            "port": "25575",
            "password": 12345,
            "max_packet_size": "0",
            "timeout": "2.5",
            "connect_timeout": "none",
        }
    )

    assert config.port == 25575
    assert config.password == "12345"
    assert config.max_packet_size == 0
    assert config.timeout == 2.5
    assert config.connect_timeout is None


def test_zero_timeout_disables():
    assert create_config_from_dict({"host": "h", "timeout": 0}).timeout is None


@pytest.mark.parametrize(
    "raw, message",
    [
        ({}, "host"),
        ({"host": ""}, "host"),
        ({"host": "h", "port": "abc"}, "port"),
        ({"host": "h", "port": 70000}, "端口"),
        ({"host": "h", "timeout": "soon"}, "timeout"),
        ({"host": "h", "timeout": -1}, "负数"),
    ],
)
def test_create_config_invalid(raw, message):
    with pytest.raises(ConfigError, match=message):
        create_config_from_dict(raw)


def test_repr_hides_password():
    config = RconConfig(host="h", password="hunter2")
    assert "hunter2" not in repr(config)
    assert "******" in repr(config)


# --- TOML ---


def test_load_toml_profile(tmp_path):
    path = tmp_path / "rcon.toml"
    path.write_text(
        """
[profile.default]
host = "1.1.1.1"

[profile.tf2]
host = "2.2.2.2"
port = 27016
password = "pw"
""",
        encoding="utf-8",
    )

    assert load_config_from_toml(path).host == "1.1.1.1"

    tf2 = load_config_from_toml(path, "tf2")
    assert (tf2.host, tf2.port, tf2.password) == ("2.2.2.2", 27016, "pw")


def test_load_toml_missing_profile(tmp_path):
    path = tmp_path / "rcon.toml"
    path.write_text('[profile.default]\nhost = "1.1.1.1"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="csgo"):
        load_config_from_toml(path, "csgo")


def test_load_toml_rcon_section_and_root(tmp_path):
    section = tmp_path / "section.toml"
    section.write_text('[rcon]\nhost = "3.3.3.3"\n', encoding="utf-8")
    root = tmp_path / "root.toml"
    root.write_text('host = "4.4.4.4"\ntimeout = 1\n', encoding="utf-8")

    assert load_config_from_toml(section).host == "3.3.3.3"
    assert load_config_from_toml(root).timeout == 1.0


def test_load_toml_errors(tmp_path):
    with pytest.raises(ConfigError, match="未找到"):
        load_config_from_toml(tmp_path / "missing.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("host = ", encoding="utf-8")
    with pytest.raises(ConfigError, match="TOML"):
        load_config_from_toml(broken)


# --- 环境变量 ---


def test_load_env(clean_env):
    clean_env.update({"RCON_HOST": "5.5.5.5", "RCON_PORT": "27020", "RCON_PASSWORD": "pw"})

    config = load_config_from_env()

    assert (config.host, config.port, config.password) == ("5.5.5.5", 27020, "pw")


def test_load_env_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("RCON_HOST=6.6.6.6\nRCON_TIMEOUT=3\n", encoding="utf-8")
    # 已存在的环境变量优先于 .env 文件
    clean_env["RCON_TIMEOUT"] = "7"

    config = load_config_from_env(env_file)

    assert config.host == "6.6.6.6"
    assert config.timeout == 7.0


def test_load_env_missing(clean_env, tmp_path):
    with pytest.raises(ConfigError, match="RCON_"):
        load_config_from_env(tmp_path / "missing.env")
