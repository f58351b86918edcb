#!/usr/bin/env python3
"""
对冲经纪主程序
周期性检查负债、空头敞口和保证金，并执行再平衡
"""

import asyncio
import logging
import traceback
from datetime import datetime

from pydantic import ValidationError

from hedge_broker.broker_bot import BrokerBot
from hedge_broker.core.engine import ExposureEngine
from hedge_broker.core.exceptions import ConfigError
from hedge_broker.exchanges import StaticLiabilitySource, create_exchange
from hedge_broker.plugins import AlertPlugin, AuditLog
from hedge_broker.utils.config import BrokerConfig, load_config
from hedge_broker.utils.logger import get_logger, setup_structlog
from hedge_broker.utils.notifier import Notifier

logger = logging.getLogger(__name__)


def build_bot(config: BrokerConfig) -> BrokerBot:
    """组装所有组件"""
    config_dict = config.to_dict()

    exchange = create_exchange(config_dict["exchange"])
    liability_source = StaticLiabilitySource(config.paper_usd_liability)

    audit_log = AuditLog(log_file=config.audit_log_file)
    alerts = AlertPlugin(Notifier(config_dict["pushover"]))

    def on_action(**kwargs):
        audit_log.log_action(**kwargs)
        return alerts.on_action(**kwargs)

    def on_error(**kwargs):
        audit_log.log_error(**kwargs)
        return alerts.on_error(**kwargs)

    return BrokerBot(
        config=config_dict,
        exchange=exchange,
        liability_source=liability_source,
        engine=ExposureEngine(config.get_bands()),
        on_decision=audit_log.log_decision,
        on_action=on_action,
        on_error=on_error,
        on_report=lambda summary: logger.debug(f"📊 Summary: {summary}")
    )


async def run(config: BrokerConfig):
    """主循环"""
    bot = build_bot(config)

    # DRY RUN 模式醒目提示
    logger.info("=" * 70)
    if config.dry_run:
        logger.warning("⚠️  DRY RUN MODE ENABLED - no orders or transfers will be executed")
    else:
        logger.warning("🔴 LIVE MODE - orders and collateral transfers will be executed")
    logger.info("=" * 70)

    interval = config.check_interval_seconds
    max_errors = config.max_consecutive_errors
    error_count = 0

    logger.info(f"对冲经纪启动: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    while True:
        try:
            await bot.run_once()
            error_count = 0
        except Exception as e:
            error_count += 1
            logger.error(f"引擎错误 ({error_count}/{max_errors}): {e}")
            logger.error(f"Traceback: {traceback.format_exc()}")

            if error_count >= max_errors:
                logger.critical(f"连续错误 {max_errors} 次，系统停止")
                break

        logger.info(f"等待 {interval} 秒...")
        await asyncio.sleep(interval)

    logger.info("对冲经纪已停止")


def main():
    """命令行入口"""
    try:
        config = load_config()
    except ValidationError as e:
        # 日志系统尚未配置，直接输出到 stderr
        raise SystemExit(f"配置错误: {e}") from e

    setup_structlog(
        log_level=config.log_level,
        log_file=config.log_file,
        use_json=config.log_json,
        rotation_type="time",
        retention_days=config.log_retention_days,
        enable_console=True
    )
    get_logger(__name__).info("config_loaded", summary=config.get_summary())

    try:
        asyncio.run(run(config))
    except ConfigError as e:
        logger.critical(f"配置错误: {e}")
        raise SystemExit(1)
    except KeyboardInterrupt:
        logger.info("收到中断信号，退出")


if __name__ == "__main__":
    main()
