#!/usr/bin/env python3
"""
日志工具模块 - 处理日志安全和格式化
"""
import copy
from typing import Any, Dict

# 需要遮蔽的敏感字段
SENSITIVE_FIELDS = frozenset({
    'api_key',
    'api_token',
    'user_key',
    'secret',
    'password',
    'token',
})


def mask_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    遮蔽字典中的敏感信息（防止 Pushover 凭据进入日志）

    Args:
        data: 原始字典（会被深拷贝，不修改原数据）

    Returns:
        遮蔽后的字典副本
    """
    masked = copy.deepcopy(data)
    _mask_dict(masked)
    return masked


def _mask_dict(d: dict):
    """递归遮蔽字典"""
    for key, value in d.items():
        if isinstance(value, dict):
            _mask_dict(value)
        elif key.lower() in SENSITIVE_FIELDS and isinstance(value, str) and value:
            # 只显示前4位和后4位
            d[key] = f"{value[:4]}...{value[-4:]}" if len(value) > 8 else "***"


def format_decision(decision: Any) -> str:
    """决策的单行描述，用于日志和通知"""
    action = getattr(decision, "buy_or_sell", None) or getattr(decision, "deposit_or_withdraw", None)
    if action is None:
        return "no action"
    return f"{action.value} {decision.btc_amount:.8f} BTC"
