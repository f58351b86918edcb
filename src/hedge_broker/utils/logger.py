#!/usr/bin/env python3
"""
日志系统配置
使用 structlog 增强标准 logging，支持彩色输出、JSON 格式和日志轮转

各模块仍然使用 logging.getLogger(__name__)，输出统一由 structlog 格式化
"""

import sys
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler

import structlog

# 统一的预处理链（structlog 与标准 logging 共用）
SHARED_PROCESSORS = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.format_exc_info,
    structlog.processors.StackInfoRenderer(),
]


def _build_file_handler(
    log_file: str,
    rotation_type: str,
    retention_days: int,
    max_bytes: int,
    backup_count: int
) -> logging.Handler:
    """创建带轮转的文件 handler"""
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    if rotation_type == "time":
        return TimedRotatingFileHandler(
            filename=log_file,
            when='midnight',
            interval=1,
            backupCount=retention_days,
            encoding='utf-8',
            utc=True
        )
    return RotatingFileHandler(
        filename=log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )


def setup_structlog(
    log_level: str = "INFO",
    log_file: str = None,
    use_json: bool = False,
    rotation_type: str = "time",
    retention_days: int = 7,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    enable_console: bool = True
):
    """
    配置 Structlog 结构化日志系统

    Args:
        log_level: 日志级别
        log_file: 日志文件路径（可选）
        use_json: 是否使用 JSON 格式输出
        rotation_type: 轮转类型 ("time" 或 "size")
        retention_days: 时间轮转模式下保留天数
        max_bytes: 大小轮转模式下的最大字节数
        backup_count: 备份文件数量
        enable_console: 是否输出到控制台
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.root.handlers.clear()
    logging.root.setLevel(level)

    handlers = []
    if enable_console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        handlers.append(_build_file_handler(
            log_file, rotation_type, retention_days, max_bytes, backup_count
        ))

    # JSON 适合日志聚合系统，ConsoleRenderer 适合开发和调试
    if use_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=enable_console and not log_file)

    structlog.configure(
        processors=SHARED_PROCESSORS + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logging.root.addHandler(handler)

    # 禁用第三方库的 DEBUG 日志
    for lib in ["httpcore", "httpx", "urllib3", "apprise"]:
        logging.getLogger(lib).setLevel(logging.WARNING)

    logger = structlog.get_logger()
    logger.info(
        "structlog_configured",
        log_level=log_level,
        use_json=use_json,
        log_file=log_file
    )

    return logger


def get_logger(name: str = None):
    """
    获取 Structlog logger

    Example:
        logger = get_logger(__name__)
        logger.info("order_placed", side="sell", btc_amount=0.0098)
    """
    return structlog.get_logger(name)
