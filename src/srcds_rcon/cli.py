# src/srcds_rcon/cli.py
"""
srcds-rcon 命令行入口。

配置优先级: 命令行参数 > TOML 配置文件 (--config) > 环境变量 / .env 文件。

示例:
    srcds-rcon --host 127.0.0.1 --password secret status "sv_cheats 0"
    echo status | srcds-rcon --config servers.toml --profile tf2
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from . import __version__
from .config import (
    RconConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)
from .exceptions import AuthError, ConfigError, RconError
from .session import Rcon

logger = logging.getLogger("RconCLI")

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_AUTH_ERROR = 2
EXIT_RCON_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="srcds-rcon",
        description="Source RCON 命令行客户端",
    )
    parser.add_argument("commands", nargs="*", help="要执行的命令；省略时从标准输入逐行读取")
    parser.add_argument("--host", help="服务器地址")
    parser.add_argument("--port", type=int, help="RCON 端口 (默认 27015)")
    parser.add_argument("--password", help="RCON 密码")
    parser.add_argument("--timeout", type=float, help="单次请求超时秒数，0 表示不限制")
    parser.add_argument("--config", type=Path, help="TOML 配置文件路径")
    parser.add_argument("--profile", default="default", help="配置文件中的预设名")
    parser.add_argument(
        "--env-file", type=Path, default=Path(".env"), help="环境变量文件 (默认 ./.env)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_cli_config(args: argparse.Namespace) -> RconConfig:
    """合并配置文件、环境变量与命令行参数。

    Raises:
        ConfigError: 合并后的配置仍不完整或格式错误。
    """
    raw: dict[str, Any] = {}

    if args.config is not None:
        raw = dataclasses.asdict(load_config_from_toml(args.config, args.profile))
    else:
        try:
            env_file = args.env_file if args.env_file.exists() else None
            raw = dataclasses.asdict(load_config_from_env(env_file))
        except ConfigError as e:
            # 没有环境配置时完全依赖命令行参数
            logger.debug(f"未使用环境变量配置: {e}")

    overrides = {
        "host": args.host,
        "port": args.port,
        "password": args.password,
        "timeout": args.timeout,
    }
    raw.update({k: v for k, v in overrides.items() if v is not None})

    return create_config_from_dict(raw)


def read_commands(stream: Iterable[str]) -> list[str]:
    """从文本流中读取命令，忽略空行。"""
    return [line.strip() for line in stream if line.strip()]


async def run(config: RconConfig, commands: list[str]) -> None:
    """认证并依次执行命令，把结果输出到标准输出。"""
    async with Rcon.from_config(config) as rcon:
        await rcon.authenticate(config.password)
        for command in commands:
            logger.debug(f"执行命令: {command}")
            print(await rcon.execute(command))


def main(argv: list[str] | None = None) -> int:
    """程序主入口点，返回进程退出码。"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_cli_config(args)
    except ConfigError as ce:
        logger.error(f"配置错误: {ce}")
        return EXIT_CONFIG_ERROR

    commands = args.commands or read_commands(sys.stdin)
    if not commands:
        logger.warning("没有需要执行的命令")

    try:
        asyncio.run(run(config, commands))
    except AuthError as ae:
        logger.error(f"认证失败: {ae}")
        return EXIT_AUTH_ERROR
    except RconError as e:
        logger.error(f"RCON 错误: {e}")
        return EXIT_RCON_ERROR
    except KeyboardInterrupt:
        logger.info("收到用户中断信号 (Ctrl+C)，退出。")
        return EXIT_RCON_ERROR

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
