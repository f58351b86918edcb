#!/usr/bin/env python3
"""
基于 Pydantic 的配置管理系统
- 自动类型验证和转换
- 自动从环境变量读取
- 清晰的错误信息
"""

import logging
from typing import Dict, Any, Optional
from pathlib import Path
from enum import Enum

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hedge_broker.core.exceptions import InvalidConfigError
from hedge_broker.core.types import BandConfig
from hedge_broker.core.logging_utils import mask_sensitive_data

logger = logging.getLogger(__name__)


class ExchangeName(str, Enum):
    """支持的交易所"""
    MOCK = "mock"


class PushoverConfig(BaseModel):
    """Pushover 通知配置"""
    user_key: str = ""
    api_token: str = ""
    enabled: bool = True

    @model_validator(mode='after')
    def validate_credentials(self):
        if self.enabled and (not self.user_key or not self.api_token):
            logger.warning("Pushover enabled but credentials missing")
        return self


class BrokerConfig(BaseSettings):
    """
    对冲经纪完整配置

    自动从环境变量和 .env 文件读取配置
    环境变量优先级高于配置文件
    """

    # 安全区间
    shorting_low_bound: float = Field(default=0.98, gt=0)
    shorting_high_bound: float = Field(default=1.00, gt=0)
    leverage_low_bound: float = Field(default=1.8, gt=0)
    leverage_high_bound: float = Field(default=2.25, gt=0)

    # 主循环
    check_interval_seconds: int = Field(default=60, ge=1)
    max_consecutive_errors: int = Field(default=10, ge=1)

    # Dry run 模式
    dry_run: bool = Field(default=False, alias="DRY_RUN")

    # Exchange
    exchange_name: ExchangeName = Field(default=ExchangeName.MOCK, alias="EXCHANGE_NAME")

    # 模拟盘快照（仅 mock 交易所）
    paper_btc_price: float = Field(default=10000.0, gt=0)
    paper_short_btc: float = Field(default=0.0)
    paper_collateral_btc: float = Field(default=0.0, ge=0)
    paper_usd_liability: float = Field(default=0.0, ge=0)

    # Pushover
    pushover_user_key: str = Field(default="", alias="PUSHOVER_USER_KEY")
    pushover_api_token: str = Field(default="", alias="PUSHOVER_API_TOKEN")
    pushover_enabled: bool = Field(default=False, alias="PUSHOVER_ENABLED")

    # 审计日志
    audit_log_file: Optional[str] = Field(default=None, alias="AUDIT_LOG_FILE")

    # 日志
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default="logs/hedge_broker.log", alias="LOG_FILE")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    log_retention_days: int = Field(default=7, ge=1, alias="LOG_RETENTION_DAYS")

    # Pydantic 配置
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',  # 忽略额外的环境变量
        populate_by_name=True,  # 允许使用字段名或 alias
    )

    @model_validator(mode='after')
    def validate_config(self):
        """验证配置"""
        # 区间规则只在 BandConfig 中定义一次
        try:
            self.get_bands()
        except InvalidConfigError as e:
            raise ValueError(str(e)) from e

        if self.shorting_high_bound > 1.0:
            logger.warning(f"shorting_high_bound {self.shorting_high_bound} allows over-hedging")
        if self.leverage_high_bound > 5.0:
            logger.warning(f"High leverage bound: {self.leverage_high_bound}x")

        return self

    def get_bands(self) -> BandConfig:
        """获取安全区间配置"""
        return BandConfig(
            shorting_low_bound=self.shorting_low_bound,
            shorting_high_bound=self.shorting_high_bound,
            leverage_low_bound=self.leverage_low_bound,
            leverage_high_bound=self.leverage_high_bound,
        )

    def get_pushover_config(self) -> PushoverConfig:
        """获取 Pushover 配置"""
        return PushoverConfig(
            user_key=self.pushover_user_key,
            api_token=self.pushover_api_token,
            enabled=self.pushover_enabled,
        )

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（供各组件使用）"""
        return {
            "bands": {
                "shorting_low_bound": self.shorting_low_bound,
                "shorting_high_bound": self.shorting_high_bound,
                "leverage_low_bound": self.leverage_low_bound,
                "leverage_high_bound": self.leverage_high_bound,
            },
            "check_interval_seconds": self.check_interval_seconds,
            "max_consecutive_errors": self.max_consecutive_errors,
            "dry_run": self.dry_run,
            "exchange": {
                "name": self.exchange_name.value,
                "btc_price": self.paper_btc_price,
                "short_btc": self.paper_short_btc,
                "collateral_btc": self.paper_collateral_btc,
            },
            "paper_usd_liability": self.paper_usd_liability,
            "pushover": {
                "user_key": self.pushover_user_key,
                "api_token": self.pushover_api_token,
                "enabled": self.pushover_enabled,
            },
            "audit_log_file": self.audit_log_file,
        }

    def get_summary(self) -> str:
        """获取配置摘要（敏感字段已遮蔽）"""
        masked = mask_sensitive_data(self.to_dict())
        lines = [
            "=" * 60,
            "Configuration Summary (Pydantic)",
            "=" * 60,
            f"Exchange: {self.exchange_name.value}",
            f"Shorting Band: {self.shorting_low_bound} - {self.shorting_high_bound}",
            f"Leverage Band: {self.leverage_low_bound}x - {self.leverage_high_bound}x",
            f"Check Interval: {self.check_interval_seconds}s",
            f"Dry Run: {self.dry_run}",
            f"Pushover: {'Enabled' if self.pushover_enabled else 'Disabled'}"
            f" (user_key={masked['pushover']['user_key'] or '-'})",
            "=" * 60,
        ]
        return "\n".join(lines)


# 便捷函数
def load_config(env_file: Optional[Path] = None) -> BrokerConfig:
    """
    加载配置

    Args:
        env_file: .env 文件路径（可选，默认当前目录 .env）

    Returns:
        验证后的配置对象
    """
    if env_file:
        return BrokerConfig(_env_file=env_file)
    return BrokerConfig()
