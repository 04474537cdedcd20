# example.py
"""
这是一个 srcds-rcon API 的最小示例。

它演示了如何将 srcds-rcon 作为一个库导入到你自己的项目中，
完成 "连接-认证-执行命令-自动断开" 的完整流程。

运行此示例：
1. 在根目录创建 .env 文件，至少包含 RCON_HOST 和 RCON_PASSWORD。
2. 确保已安装： pip install -e .
3. 从项目根目录运行： python example.py [命令...]
"""

import asyncio
import logging
import sys
from pathlib import Path

from srcds_rcon import AuthError, ConfigError, Rcon, RconError, load_config_from_env

# 日志配置
logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("RconExample")


async def main(commands: list[str]) -> int:
    """
    程序主入口点。
    """
    try:
        config = load_config_from_env(Path(__file__).resolve().parent / ".env")
    except ConfigError as ce:
        logger.critical(f"配置错误: {ce}")
        return 1

    logger.info(f"使用配置: {config}")

    # async with 退出时会自动 disconnect
    async with Rcon.from_config(config) as rcon:
        try:
            await rcon.authenticate(config.password)
            logger.info("认证成功。")

            for command in commands:
                output = await rcon.execute(command)
                logger.info(f"[{command}] 返回 {len(output)} 个字符")
                print(output)

        except AuthError as ae:
            logger.error(f"认证被拒绝: {ae}")
            return 2
        except RconError as e:
            logger.exception(f"RCON 异常: {e}")
            return 3

    logger.info(f"会话已结束 (connected={rcon.is_connected})")
    return 0


# 程序入口
if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:] or ["status"])))
