#!/usr/bin/env python3
"""
审计日志 - 记录所有决策和操作

职责：
- 记录每一轮的对冲/保证金决策
- 记录执行结果
- 可选的 JSON Lines 文件输出

通过回调注入到 BrokerBot
"""

import json
import threading
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Any

from hedge_broker.core.logging_utils import format_decision

logger = logging.getLogger(__name__)


class AuditLog:
    """审计日志（同步写入，线程安全）"""

    def __init__(
        self,
        log_file: Optional[str] = None,
        enabled: bool = True
    ):
        """
        Args:
            log_file: 日志文件路径（如果为None则只输出到logger）
            enabled: 是否启用
        """
        self.enabled = enabled
        self.log_file = Path(log_file) if log_file else None
        self.lock = threading.Lock()

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Audit log enabled: {self.log_file}")

    def log_decision(self, kind: str, decision: Any, **kwargs):
        """
        记录决策

        Args:
            kind: "hedge" 或 "rebalance"
            decision: HedgeDecision / RebalanceDecision
            **kwargs: 输入快照等额外信息
        """
        if not self.enabled:
            return

        self._write_entry({
            "timestamp": datetime.now().isoformat(),
            "type": "decision",
            "kind": kind,
            "summary": format_decision(decision),
            "btc_amount": decision.btc_amount,
            "metadata": decision.metadata,
            **kwargs
        })

    def log_action(self, kind: str, result: dict, **kwargs):
        """记录执行结果"""
        if not self.enabled:
            return

        self._write_entry({
            "timestamp": datetime.now().isoformat(),
            "type": "action",
            "kind": kind,
            "success": result.get("success", False),
            "result": result,
            **kwargs
        })

    def log_error(self, error: str, **kwargs):
        """记录错误"""
        if not self.enabled:
            return

        self._write_entry({
            "timestamp": datetime.now().isoformat(),
            "type": "error",
            "error": error,
            **kwargs
        })

    def _write_entry(self, entry: dict):
        """写入日志条目"""
        line = json.dumps(entry, ensure_ascii=False, default=str)

        with self.lock:
            logger.info(f"[AUDIT] {entry['type']}: {line}")

            if self.log_file:
                try:
                    with open(self.log_file, "a", encoding="utf-8") as f:
                        f.write(line + "\n")
                except OSError as e:
                    logger.error(f"Failed to write audit log: {e}")
