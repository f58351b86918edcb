#!/usr/bin/env python3
"""
BrokerBot集成测试

测试完整的协调流程：
- 快照 → 对冲决策 → 下单 → 保证金决策 → 划转
- Plugin callbacks
- Error handling
- 同一时间只允许一轮执行
"""

import asyncio

import pytest

from tests.integration.mock_adapters import (
    MockExchangeClient,
    MockLiabilitySource,
    MockPlugin,
)

from hedge_broker.broker_bot import BrokerBot
from hedge_broker.core.engine import ExposureEngine
from hedge_broker.core.types import BandConfig, OrderSide, TransferDirection
from hedge_broker.exchanges import MockExchange, StaticLiabilitySource


@pytest.fixture
def mock_exchange():
    """Mock交易所（无仓位、无保证金）"""
    return MockExchangeClient(btc_price=10000.0)


@pytest.fixture
def mock_liabilities():
    return MockLiabilitySource(usd_liability=1000.0)


@pytest.fixture
def mock_plugin():
    return MockPlugin()


@pytest.fixture
def config():
    """测试配置"""
    return {"dry_run": False}


@pytest.fixture
def broker_bot(config, mock_exchange, mock_liabilities, mock_plugin):
    """创建BrokerBot实例"""
    return BrokerBot(
        config=config,
        exchange=mock_exchange,
        liability_source=mock_liabilities,
        on_decision=mock_plugin.on_decision,
        on_action=mock_plugin.on_action,
        on_error=mock_plugin.on_error,
        on_report=mock_plugin.on_report
    )


class TestBrokerBotBasicFlow:
    """测试基本流程"""

    @pytest.mark.asyncio
    async def test_first_cycle_sells_then_deposits(self, broker_bot, mock_exchange, mock_plugin):
        """场景：新账户 → 卖出 $980，然后追加 $444 保证金"""
        summary = await broker_bot.run_once()

        assert mock_exchange.orders == [(OrderSide.SELL, pytest.approx(0.098, abs=1e-12))]
        assert len(mock_exchange.transfers) == 1
        direction, btc_amount = mock_exchange.transfers[0]
        assert direction == TransferDirection.DEPOSIT
        assert btc_amount == pytest.approx(0.04444444, abs=1e-12)

        assert summary["skipped"] is False
        assert len(summary["results"]) == 2
        assert all(r["success"] for r in summary["results"])
        assert [d["kind"] for d in mock_plugin.decisions] == ["hedge", "rebalance"]
        assert len(mock_plugin.actions) == 2
        assert mock_plugin.errors == []
        assert mock_plugin.reports[0]["summary"] is summary

    @pytest.mark.asyncio
    async def test_balanced_position_no_actions(self, broker_bot, mock_exchange, mock_plugin):
        """场景：敞口 $1000、保证金 $500 → 什么都不做"""
        mock_exchange.usd_exposure = 1000.0
        mock_exchange.usd_collateral = 500.0

        summary = await broker_bot.run_once()

        assert mock_exchange.orders == []
        assert mock_exchange.transfers == []
        assert summary["hedge"] == "no action"
        assert summary["rebalance"] == "no action"
        assert len(mock_plugin.decisions) == 2
        assert mock_plugin.actions == []

    @pytest.mark.asyncio
    async def test_over_hedged_buys_back(self, broker_bot, mock_exchange):
        mock_exchange.usd_exposure = 2000.0
        mock_exchange.usd_collateral = 500.0

        await broker_bot.run_once()

        assert mock_exchange.orders == [(OrderSide.BUY, 0.1)]
        assert mock_exchange.usd_exposure == pytest.approx(1000.0)

    @pytest.mark.asyncio
    async def test_rebalance_uses_post_order_collateral(self, mock_liabilities, mock_plugin):
        """下单后重新读取保证金"""

        class FeeExchange(MockExchangeClient):
            async def place_market_order(self, side, btc_amount):
                order_id = await super().place_market_order(side, btc_amount)
                self.usd_collateral = 500.0  # 下单后保证金变化
                return order_id

        exchange = FeeExchange(usd_exposure=0.0, usd_collateral=2000.0)
        bot = BrokerBot(config={}, exchange=exchange, liability_source=mock_liabilities)

        await bot.run_once()

        assert len(exchange.orders) == 1
        assert exchange.transfers == []

    @pytest.mark.asyncio
    async def test_injected_engine_bands(self, mock_exchange, mock_liabilities):
        mock_exchange.usd_exposure = 800.0
        mock_exchange.usd_collateral = 500.0
        engine = ExposureEngine(BandConfig(shorting_low_bound=0.75, shorting_high_bound=1.25))
        bot = BrokerBot(config={}, exchange=mock_exchange, liability_source=mock_liabilities, engine=engine)

        await bot.run_once()

        assert mock_exchange.orders == []


class TestDryRun:
    """测试 dry run 模式"""

    @pytest.mark.asyncio
    async def test_dry_run_executes_nothing(self, mock_exchange, mock_liabilities, mock_plugin):
        bot = BrokerBot(
            config={"dry_run": True},
            exchange=mock_exchange,
            liability_source=mock_liabilities,
            on_action=mock_plugin.on_action
        )

        summary = await bot.run_once()

        assert mock_exchange.orders == []
        assert mock_exchange.transfers == []
        assert summary["dry_run"] is True
        assert [r["action"] for r in summary["results"]] == ["sell", "deposit"]
        assert summary["results"][0]["order_id"] == "DRY_RUN_ORDER"
        assert summary["results"][1]["transfer_id"] == "DRY_RUN_TRANSFER"
        assert len(mock_plugin.actions) == 2


class TestErrorHandling:
    """测试错误处理"""

    @pytest.mark.asyncio
    async def test_invalid_price_refuses_to_act(self, broker_bot, mock_exchange, mock_plugin):
        """价格为 0 → 不给出决策，不执行"""
        mock_exchange.btc_price = 0.0

        summary = await broker_bot.run_once()

        assert mock_exchange.orders == []
        assert mock_exchange.transfers == []
        assert summary["hedge"] is None
        assert summary["errors"][0]["kind"] == "non_positive_price"
        assert mock_plugin.errors[0]["stage"] == "hedge"
        assert mock_plugin.errors[0]["error_kind"] == "non_positive_price"
        assert mock_plugin.decisions == []

    @pytest.mark.asyncio
    async def test_negative_collateral_refuses_rebalance(self, broker_bot, mock_exchange, mock_plugin):
        mock_exchange.usd_exposure = 1000.0
        mock_exchange.usd_collateral = -5.0

        summary = await broker_bot.run_once()

        assert mock_exchange.transfers == []
        assert summary["rebalance"] is None
        assert mock_plugin.errors[0]["error_kind"] == "negative_collateral"

    @pytest.mark.asyncio
    async def test_order_failure_is_reported(self, broker_bot, mock_exchange, mock_plugin):
        """下单失败 → 记录失败结果，继续保证金决策"""
        mock_exchange.fail_orders = True

        summary = await broker_bot.run_once()

        order_result = summary["results"][0]
        assert order_result["success"] is False
        assert "order rejected" in order_result["error"]
        assert mock_plugin.errors[0]["stage"] == "hedge_execution"

        # 保证金仍按原始快照（$0）补足
        assert mock_exchange.transfers[0][0] == TransferDirection.DEPOSIT

    @pytest.mark.asyncio
    async def test_transfer_failure_is_reported(self, broker_bot, mock_exchange, mock_plugin):
        mock_exchange.usd_exposure = 1000.0
        mock_exchange.fail_transfers = True

        summary = await broker_bot.run_once()

        assert summary["results"][0]["success"] is False
        assert mock_plugin.errors[0]["stage"] == "rebalance_execution"

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, broker_bot, mock_liabilities, mock_plugin):
        """快照获取失败 → on_error 后抛出（由主循环计数）"""
        mock_liabilities.fail = True

        with pytest.raises(ConnectionError):
            await broker_bot.run_once()

        assert mock_plugin.errors[0]["stage"] == "cycle"

    @pytest.mark.asyncio
    async def test_callback_failure_does_not_break_cycle(self, mock_exchange, mock_liabilities):
        def broken_callback(**kwargs):
            raise RuntimeError("plugin crashed")

        bot = BrokerBot(
            config={},
            exchange=mock_exchange,
            liability_source=mock_liabilities,
            on_decision=broken_callback,
            on_report=broken_callback
        )

        summary = await bot.run_once()

        assert len(mock_exchange.orders) == 1
        assert len(summary["results"]) == 2

    @pytest.mark.asyncio
    async def test_sync_callbacks_are_supported(self, mock_exchange, mock_liabilities):
        seen = []
        bot = BrokerBot(
            config={},
            exchange=mock_exchange,
            liability_source=mock_liabilities,
            on_decision=lambda **kwargs: seen.append(kwargs["kind"])
        )

        await bot.run_once()

        assert seen == ["hedge", "rebalance"]


class TestConcurrency:
    """同一时间最多一轮执行"""

    @pytest.mark.asyncio
    async def test_overlapping_tick_is_skipped(self, broker_bot, mock_exchange):
        mock_exchange.price_gate = asyncio.Event()

        first = asyncio.create_task(broker_bot.run_once())
        await mock_exchange.price_requested.wait()

        second = await broker_bot.run_once()
        assert second["skipped"] is True

        mock_exchange.price_gate.set()
        first_summary = await first

        assert first_summary["skipped"] is False
        assert len(mock_exchange.orders) == 1

    @pytest.mark.asyncio
    async def test_sequential_runs_are_not_skipped(self, broker_bot):
        first = await broker_bot.run_once()
        second = await broker_bot.run_once()
        assert first["skipped"] is False
        assert second["skipped"] is False


class TestPaperExchange:
    """使用模拟盘交易所的端到端测试"""

    @pytest.mark.asyncio
    async def test_converges_then_idles(self):
        exchange = MockExchange({"name": "mock", "btc_price": 10000.0})
        bot = BrokerBot(config={}, exchange=exchange, liability_source=StaticLiabilitySource(1000.0))

        first = await bot.run_once()
        assert first["hedge"] == "sell 0.09800000 BTC"
        assert first["rebalance"] == "deposit 0.04444444 BTC"

        second = await bot.run_once()
        assert second["hedge"] == "no action"
        assert second["rebalance"] == "no action"
        assert len(exchange.orders) == 1
        assert len(exchange.transfers) == 1

    @pytest.mark.asyncio
    async def test_price_move_triggers_withdraw(self):
        """价格上涨 → 保证金美元价值上升 → 提取"""
        exchange = MockExchange({
            "name": "mock",
            "btc_price": 10000.0,
            "short_btc": 0.1,
            "collateral_btc": 0.05
        })
        bot = BrokerBot(config={}, exchange=exchange, liability_source=StaticLiabilitySource(1000.0))

        exchange.set_price(12000.0)
        summary = await bot.run_once()

        # 空头名义价值 $1200 → 回补到 $1000
        assert summary["hedge"].startswith("buy")
        # 保证金 $600 → 杠杆 1.67 < 1.8 → 提取到 $555.56
        assert summary["rebalance"].startswith("withdraw")
