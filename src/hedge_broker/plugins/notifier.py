#!/usr/bin/env python3
"""
通知插件 - 把 BrokerBot 回调转换成运维通知

特点：
- 异步发送
- 失败不影响主流程（由 Notifier 负责吞掉发送失败）
"""

import logging
from typing import Optional

from hedge_broker.utils.notifier import Notifier

logger = logging.getLogger(__name__)


class AlertPlugin:
    """BrokerBot 回调 → Notifier"""

    def __init__(self, notifier: Optional[Notifier], enabled: bool = True):
        self.notifier = notifier
        self.enabled = enabled and notifier is not None

    async def on_action(self, kind: str, result: dict, **kwargs):
        """下单/划转成功后通知；失败由 on_error 负责"""
        if not self.enabled or not result.get("success"):
            return

        if kind == "hedge":
            await self.notifier.alert_order_placed(result["action"], result["btc_amount"], result["btc_price"])
        elif kind == "rebalance":
            await self.notifier.alert_collateral_transfer(result["action"], result["btc_amount"], result["btc_price"])

    async def on_error(self, error: str, stage: str = "", error_kind: Optional[str] = None, **kwargs):
        """错误通知：前置条件错误为高优先级，其余为紧急"""
        if not self.enabled:
            return

        if error_kind:
            await self.notifier.alert_invalid_input(f"[{stage}] {error}")
        else:
            await self.notifier.alert_system_error(f"[{stage}] {error}" if stage else error)
