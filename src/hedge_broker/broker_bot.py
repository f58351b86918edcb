#!/usr/bin/env python3
"""
对冲经纪机器人 - 主协调层

职责：
- 获取负债、敞口、保证金、价格快照
- 调用纯函数引擎做对冲和保证金决策
- 执行决策（下单 / 划转）
- 调用 plugin callbacks

特点：
- 纯函数 + 适配器组合
- 插件通过回调注入
- 同一时间只允许一轮执行（cycle lock）
"""

import asyncio
import inspect
import logging
from typing import Dict, Optional, Callable, Any
from datetime import datetime

from hedge_broker.core.engine import ExposureEngine
from hedge_broker.core.logging_utils import format_decision
from hedge_broker.core.types import (
    HedgeDecision,
    HedgeInput,
    RebalanceDecision,
    RebalanceInput,
)
from hedge_broker.exchanges.interface import BrokerExchange, LiabilitySource

logger = logging.getLogger(__name__)


class BrokerBot:
    """
    对冲经纪机器人

    一轮循环：快照 → 对冲决策 → 下单 → 重新读取 → 保证金决策 → 划转
    """

    def __init__(
        self,
        config: dict,
        exchange: BrokerExchange,
        liability_source: LiabilitySource,
        engine: Optional[ExposureEngine] = None,
        # 可选插件（通过回调注入，同步或异步均可）
        on_decision: Optional[Callable] = None,
        on_action: Optional[Callable] = None,
        on_error: Optional[Callable] = None,
        on_report: Optional[Callable] = None
    ):
        """
        初始化对冲经纪机器人

        Args:
            config: 配置字典（BrokerConfig.to_dict()）
            exchange: 交易所实例
            liability_source: 负债来源
            engine: 决策引擎（默认使用默认安全区间）
            on_decision: 决策回调（用于audit log）
            on_action: 执行回调（用于通知）
            on_error: 错误回调（用于通知）
            on_report: 报告回调（用于监控）
        """
        self.config = config
        self.exchange = exchange
        self.liabilities = liability_source
        self.engine = engine or ExposureEngine()
        self.dry_run = config.get("dry_run", False)

        self.on_decision = on_decision
        self.on_action = on_action
        self.on_error = on_error
        self.on_report = on_report

        self._cycle_lock = asyncio.Lock()

        bands = self.engine.bands
        logger.info(
            f"BrokerBot initialized: shorting {bands.shorting_low_bound}-{bands.shorting_high_bound}, "
            f"leverage {bands.leverage_low_bound}x-{bands.leverage_high_bound}x"
        )

    async def run_once(self) -> Dict[str, Any]:
        """
        执行一次完整的对冲检查循环

        如果上一轮仍在执行，本轮直接跳过（不会基于过期快照重复执行）

        Returns:
            执行结果摘要
        """
        if self._cycle_lock.locked():
            logger.warning("⏭️  Previous cycle still in flight, skipping this tick")
            return {"timestamp": datetime.now().isoformat(), "skipped": True}

        async with self._cycle_lock:
            return await self._run_cycle()

    async def _run_cycle(self) -> Dict[str, Any]:
        start_time = datetime.now()
        logger.info(f"{'='*70}")
        logger.info(f"🚀 BROKER RUN - {start_time.strftime('%Y-%m-%d %H:%M:%S')}")
        logger.info(f"{'='*70}")

        summary = {
            "timestamp": start_time.isoformat(),
            "skipped": False,
            "dry_run": self.dry_run,
            "hedge": None,
            "rebalance": None,
            "results": [],
            "errors": []
        }

        try:
            # 步骤1: 获取快照
            usd_liability = await self.liabilities.get_usd_liability()
            btc_price = await self.exchange.get_btc_price()
            usd_exposure = await self.exchange.get_usd_exposure()
            usd_collateral = await self.exchange.get_usd_collateral()
            logger.info(
                f"📊 liability=${usd_liability:,.2f} exposure=${usd_exposure:,.2f} "
                f"collateral=${usd_collateral:,.2f} price=${btc_price:,.2f}"
            )

            # 步骤2: 对冲决策
            hedge_result = self.engine.is_order_needed(HedgeInput(
                usd_liability=usd_liability,
                usd_exposure=usd_exposure,
                btc_price=btc_price
            ))
            if not hedge_result.is_ok:
                await self._reject("hedge", hedge_result.error, summary)
                return await self._finish(summary, start_time)

            hedge = hedge_result.value
            summary["hedge"] = format_decision(hedge)
            await self._emit(self.on_decision, kind="hedge", decision=hedge)

            # 步骤3: 下单，成交后敞口和保证金都会变化，需要重新读取
            if hedge.is_needed:
                result = await self._execute_order(hedge, btc_price)
                summary["results"].append(result)
                if result["success"] and not self.dry_run:
                    usd_exposure = await self.exchange.get_usd_exposure()
                    usd_collateral = await self.exchange.get_usd_collateral()
                    logger.debug(f"Post-order exposure=${usd_exposure:,.2f} collateral=${usd_collateral:,.2f}")

            # 步骤4: 保证金决策
            rebalance_result = self.engine.is_rebalance_needed(RebalanceInput(
                usd_liability=usd_liability,
                usd_collateral=usd_collateral,
                btc_price=btc_price
            ))
            if not rebalance_result.is_ok:
                await self._reject("rebalance", rebalance_result.error, summary)
                return await self._finish(summary, start_time)

            rebalance = rebalance_result.value
            summary["rebalance"] = format_decision(rebalance)
            await self._emit(self.on_decision, kind="rebalance", decision=rebalance)

            # 步骤5: 划转
            if rebalance.is_needed:
                result = await self._execute_transfer(rebalance, btc_price)
                summary["results"].append(result)

            return await self._finish(summary, start_time)

        except Exception as e:
            logger.error(f"Run failed: {e}")
            await self._emit(self.on_error, error=str(e), stage="cycle")
            raise

    async def _finish(self, summary: Dict[str, Any], start_time: datetime) -> Dict[str, Any]:
        """生成摘要报告"""
        duration = (datetime.now() - start_time).total_seconds()
        summary["duration"] = duration
        logger.info(
            f"✅ Run complete: hedge={summary['hedge']} rebalance={summary['rebalance']} "
            f"actions={len(summary['results'])} in {duration:.2f}s"
        )
        await self._emit(self.on_report, summary=summary)
        return summary

    async def _reject(self, kind: str, error, summary: Dict[str, Any]):
        """输入快照不满足前置条件：不执行，只报告"""
        logger.error(f"❌ {kind} evaluation refused: {error}")
        summary["errors"].append({"stage": kind, "error": str(error), "kind": error.kind.value})
        await self._emit(self.on_error, error=str(error), stage=kind, error_kind=error.kind.value)

    async def _execute_order(self, decision: HedgeDecision, btc_price: float) -> Dict[str, Any]:
        """执行对冲订单"""
        side = decision.buy_or_sell
        result = {
            "kind": "hedge",
            "action": side.value,
            "btc_amount": decision.btc_amount,
            "btc_price": btc_price,
            "success": False
        }

        logger.info(f"⚡ Executing hedge order: {format_decision(decision)} @ ${btc_price:,.2f}")

        try:
            if self.dry_run:
                logger.info(f"[DRY RUN] Would place market order: {side.value} {decision.btc_amount:.8f} BTC")
                result["order_id"] = "DRY_RUN_ORDER"
            else:
                result["order_id"] = await self.exchange.place_market_order(side, decision.btc_amount)
            result["success"] = True
        except Exception as e:
            logger.error(f"Hedge order failed: {e}")
            result["error"] = str(e)
            await self._emit(self.on_error, error=str(e), stage="hedge_execution")

        await self._emit(self.on_action, kind="hedge", result=result)
        return result

    async def _execute_transfer(self, decision: RebalanceDecision, btc_price: float) -> Dict[str, Any]:
        """执行保证金划转"""
        direction = decision.deposit_or_withdraw
        result = {
            "kind": "rebalance",
            "action": direction.value,
            "btc_amount": decision.btc_amount,
            "btc_price": btc_price,
            "success": False
        }

        logger.info(f"⚡ Executing collateral transfer: {format_decision(decision)} @ ${btc_price:,.2f}")

        try:
            if self.dry_run:
                logger.info(f"[DRY RUN] Would {direction.value} {decision.btc_amount:.8f} BTC")
                result["transfer_id"] = "DRY_RUN_TRANSFER"
            else:
                result["transfer_id"] = await self.exchange.transfer_collateral(direction, decision.btc_amount)
            result["success"] = True
        except Exception as e:
            logger.error(f"Collateral transfer failed: {e}")
            result["error"] = str(e)
            await self._emit(self.on_error, error=str(e), stage="rebalance_execution")

        await self._emit(self.on_action, kind="rebalance", result=result)
        return result

    async def _emit(self, callback: Optional[Callable], **kwargs):
        """调用插件回调（失败只记录日志，不影响主流程）"""
        if callback is None:
            return
        try:
            outcome = callback(**kwargs)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(f"Plugin callback {getattr(callback, '__name__', callback)} failed: {e}")
