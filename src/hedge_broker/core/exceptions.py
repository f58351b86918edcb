#!/usr/bin/env python3
"""
对冲经纪异常定义

只保留实际使用的异常类，保持简洁
"""

from enum import Enum
from typing import Optional, Dict, Any


class BrokerError(Exception):
    """对冲经纪基础异常"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ErrorKind(Enum):
    """前置条件错误类别"""
    NON_POSITIVE_PRICE = "non_positive_price"
    NEGATIVE_LIABILITY = "negative_liability"
    NEGATIVE_COLLATERAL = "negative_collateral"
    NON_FINITE_INPUT = "non_finite_input"


class DomainError(BrokerError):
    """输入违反前置条件 - 编程错误，拒绝给出决策"""

    def __init__(self, kind: ErrorKind, field: str, value: Any):
        super().__init__(
            f"Precondition violated: {kind.value}",
            {"field": field, "value": value}
        )
        self.kind = kind
        self.field = field
        self.value = value


class ConfigError(BrokerError):
    """配置错误 - 严重，不可恢复"""
    pass


class InvalidConfigError(ConfigError):
    """配置值无效"""

    def __init__(self, field: str, value: Any, expected: str):
        super().__init__(
            f"Invalid config: {field}",
            {"field": field, "value": value, "expected": expected}
        )


class ExecutionError(BrokerError):
    """下单或保证金划转失败"""
    pass
