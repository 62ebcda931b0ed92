from __future__ import annotations

import argparse
import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

from .config import ServerConfig
from .server import setup_logging

DEFAULT_APP = "methodrpc.jobs:create_app()"

logger = logging.getLogger("methodrpc.cli")


def popen_detached(cmd, env, pidfile: str | None = None):
    with open(os.devnull, "rb") as devnull_in, open(os.devnull, "wb") as devnull_out:
        proc = subprocess.Popen(
            cmd,
            env=env,
            stdin=devnull_in,
            stdout=devnull_out,
            stderr=devnull_out,
            start_new_session=True
        )

    if pidfile:
        Path(pidfile).write_text(str(proc.pid))

    return proc


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="methodrpc-jobs", description="Serve the example job store.")
    p.add_argument("-c", "--config", default=None, help="YAML file with server settings.")
    p.add_argument("-H", "--host", default=None)
    p.add_argument("-p", "--port", type=int, default=None)
    p.add_argument("-w", "--workers", type=int, default=None, help="More than one runs gunicorn with that many threads.")
    p.add_argument("-t", "--timeout", type=int, default=None)
    p.add_argument("-l", "--log-level", default=None)
    p.add_argument("-m", "--mount-path", default=None)
    p.add_argument("-d", "--detached", action="store_true", help="Run gunicorn in background (detach from terminal).")
    p.add_argument("--pidfile", default="methodrpc-jobs.pid", help="PID file (with --detached).")
    p.add_argument("--app", default=DEFAULT_APP)
    return p


def load_config(args: argparse.Namespace) -> ServerConfig:
    base = ServerConfig.from_yaml(args.config) if args.config else ServerConfig.from_env()
    return base.merge(
        host=args.host,
        port=args.port,
        workers=args.workers,
        timeout=args.timeout,
        log_level=args.log_level,
        mount_path=args.mount_path,
    )


def gunicorn_command(config: ServerConfig, app: str) -> List[str]:
    """
    One gunicorn process with `config.workers` threads, so every request
    reaches the single receiver built by the app factory.
    """
    return [
        "gunicorn",
        "-k", "gthread",
        "-w", "1",
        "--threads", str(config.workers),
        "-b", f"{config.host}:{config.port}",
        "-t", str(config.timeout),
        "--log-level", config.log_level.lower(),
        app,
    ]


def config_env(config: ServerConfig) -> dict:
    env = os.environ.copy()
    env["METHODRPC_HOST"] = config.host
    env["METHODRPC_PORT"] = str(config.port)
    env["METHODRPC_MOUNT_PATH"] = config.mount_path
    env["METHODRPC_LOG_LEVEL"] = config.log_level
    env["METHODRPC_INCLUDE_TRACEBACK"] = "true" if config.include_traceback else "false"
    return env


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config = load_config(args)
    setup_logging(config.log_level)

    if config.workers <= 1 and not args.detached:
        from .jobs import create_app

        logger.info("Launching jobs api server on http://%s:%d", config.host, config.port)
        create_app(config).run(host=config.host, port=config.port)
        return

    cmd = gunicorn_command(config, args.app)
    env = config_env(config)
    logger.info("Starting gunicorn: %s", " ".join(cmd))
    if args.detached:
        popen_detached(cmd, env=env, pidfile=args.pidfile)
        return
    try:
        subprocess.run(cmd, env=env, check=True)
    except KeyboardInterrupt:
        logger.info("Stopping server...")


if __name__ == "__main__":
    main()
