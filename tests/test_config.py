import pytest

from methodrpc.cli import build_parser, config_env, gunicorn_command, load_config
from methodrpc.config import ServerConfig


def test_defaults():
    config = ServerConfig()
    assert config.port == 5000
    assert config.workers == 1
    assert config.mount_path == "/jobs"
    assert config.include_traceback is False


def test_from_env():
    config = ServerConfig.from_env({
        "METHODRPC_PORT": "8080",
        "METHODRPC_HOST": "0.0.0.0",
        "METHODRPC_INCLUDE_TRACEBACK": "yes",
        "UNRELATED": "x",
    })
    assert config.port == 8080
    assert config.host == "0.0.0.0"
    assert config.include_traceback is True
    assert config.workers == 1


def test_from_env_bad_int():
    with pytest.raises(ValueError):
        ServerConfig.from_env({"METHODRPC_PORT": "eighty"})


def test_from_yaml(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("port: 7000\nworkers: 3\nmount_path: /v1/jobs\n")
    config = ServerConfig.from_yaml(str(path))
    assert config == ServerConfig(port=7000, workers=3, mount_path="/v1/jobs")


def test_from_yaml_unknown_key(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("colour: blue\n")
    with pytest.raises(TypeError):
        ServerConfig.from_yaml(str(path))


def test_empty_yaml(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("")
    assert ServerConfig.from_yaml(str(path)) == ServerConfig()


def test_cli_flags_override_file(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("port: 7000\nworkers: 3\n")
    args = build_parser().parse_args(["--config", str(path), "-p", "7100", "-m", "/j"])
    config = load_config(args)
    assert config.port == 7100
    assert config.workers == 3
    assert config.mount_path == "/j"


def test_gunicorn_command():
    config = ServerConfig(host="0.0.0.0", port=9000, workers=4, timeout=30, log_level="DEBUG")
    cmd = gunicorn_command(config, "methodrpc.jobs:create_app()")
    assert cmd == [
        "gunicorn",
        "-k", "gthread",
        "-w", "1",
        "--threads", "4",
        "-b", "0.0.0.0:9000",
        "-t", "30",
        "--log-level", "debug",
        "methodrpc.jobs:create_app()",
    ]


def test_config_env_round_trips():
    config = ServerConfig(port=9000, mount_path="/j", include_traceback=True)
    env = config_env(config)
    restored = ServerConfig.from_env(env)
    assert restored.mount_path == "/j"
    assert restored.include_traceback is True
    assert restored.host == config.host


@pytest.mark.parametrize("workers", [2, 8])
def test_gunicorn_runs_one_process(workers):
    cmd = gunicorn_command(ServerConfig(workers=workers), "methodrpc.jobs:create_app()")
    assert cmd[cmd.index("-w") + 1] == "1"
    assert cmd[cmd.index("--threads") + 1] == str(workers)
    assert cmd[cmd.index("-k") + 1] == "gthread"
