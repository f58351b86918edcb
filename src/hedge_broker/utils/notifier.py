#!/usr/bin/env python3
"""
运维通知器 - 使用 Apprise 发送 Pushover 推送

只通知运维人员关心的事件：下单、保证金划转、输入异常、系统错误
"""

import logging
import time
from typing import Optional
from apprise import Apprise, NotifyType

logger = logging.getLogger(__name__)


class Notifier:
    """
    运维通知器

    三个优先级各用一个 Apprise 对象（Pushover 的 priority 写在 URL 里）
    告警类通知在冷却时间内只发送一次；已执行的下单和划转每笔都通知
    """

    # 不同优先级的冷却时间（秒）
    COOLDOWN_BY_PRIORITY = {
        0: 300,   # priority=0 (普通): 5 分钟
        1: 120,   # priority=1 (输入异常): 2 分钟
        2: 30     # priority=2 (系统错误): 30 秒
    }

    def __init__(self, config: dict):
        """
        Args:
            config: Pushover 配置
                {
                    "user_key": "...",
                    "api_token": "...",
                    "enabled": true
                }
        """
        self.config = config
        self.apobjs = {priority: Apprise() for priority in self.COOLDOWN_BY_PRIORITY}
        self.enabled = False

        # 通知冷却：记录上次发送时间 {alert_key: timestamp}
        self._last_sent = {}

        self._load_services()

    def _load_services(self):
        """加载 Pushover 服务"""
        if not self.config.get("enabled", False):
            logger.info("No notification services enabled")
            return

        user_key = self.config.get("user_key", "")
        api_token = self.config.get("api_token", "")
        if not (user_key and api_token):
            logger.warning("Pushover enabled but credentials not provided")
            return

        # Apprise Pushover URL 格式: pover://user@token?priority=X
        added = [
            apobj.add(f'pover://{user_key}@{api_token}?priority={priority}')
            for priority, apobj in self.apobjs.items()
        ]

        if all(added):
            self.enabled = True
            logger.info("✅ Pushover notification enabled (3 priority levels)")
        else:
            logger.error("❌ Failed to add Pushover service")

    async def send(
        self,
        message: str,
        title: Optional[str] = None,
        priority: int = 0
    ) -> bool:
        """
        发送通知

        Args:
            message: 消息内容
            title: 标题（可选）
            priority: 优先级 (0=正常, 1=高, 2=紧急)

        Returns:
            是否发送成功（失败不抛异常）
        """
        if not self.enabled:
            logger.debug(f"Notifications disabled, skipping: {title or message[:50]}")
            return False

        apobj = self.apobjs[min(max(priority, 0), 2)]

        try:
            success = await apobj.async_notify(
                title=title or 'Hedge Broker',
                body=message,
                notify_type=NotifyType.INFO
            )
        except Exception as e:
            logger.error(f"❌ Error sending notification: {e}", exc_info=True)
            return False

        if success:
            logger.info(f"✅ Notification sent (priority={priority}): {title}")
        else:
            logger.error(f"❌ Notification failed: {title}")
        return success

    def _should_send(self, alert_key: str, priority: int = 0) -> bool:
        """冷却检查"""
        cooldown_seconds = self.COOLDOWN_BY_PRIORITY.get(priority, 60)

        now = time.monotonic()
        last_sent = self._last_sent.get(alert_key)

        if last_sent is None or now - last_sent >= cooldown_seconds:
            self._last_sent[alert_key] = now
            return True
        return False

    # ==================== 通知方法 ====================

    async def alert_order_placed(self, side: str, btc_amount: float, btc_price: float):
        """对冲下单通知（每笔都发，不冷却）"""
        await self.send(
            message=f"{side} {btc_amount:.8f} BTC @ ${btc_price:,.2f} (${btc_amount * btc_price:,.2f})",
            title=f"📈 Hedge order: {side}",
            priority=0
        )

    async def alert_collateral_transfer(self, direction: str, btc_amount: float, btc_price: float):
        """保证金划转通知（每笔都发，不冷却）"""
        await self.send(
            message=f"{direction} {btc_amount:.8f} BTC (${btc_amount * btc_price:,.2f})",
            title=f"🏦 Collateral {direction}",
            priority=0
        )

    async def alert_invalid_input(self, message: str):
        """输入快照违反前置条件（2分钟冷却）"""
        if not self._should_send("invalid_input", priority=1):
            logger.debug("Skipping invalid input alert (cooling down)")
            return

        await self.send(
            message=message,
            title="⚠️ Invalid snapshot",
            priority=1
        )

    async def alert_system_error(self, message: str):
        """系统错误通知（30秒冷却）"""
        if not self._should_send("system_error", priority=2):
            logger.debug("Skipping system error alert (cooling down)")
            return

        await self.send(
            message=message,
            title="🚨 System Error",
            priority=2
        )
