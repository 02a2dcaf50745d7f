"""
Tests for the polling loop, the per-brand queue processor and worker startup.

These tests verify:
- A failing cycle is logged, backed off and followed by a reconnect
- The loop reconnects before polling when the store check fails
- The queue processor drives its adapter and keeps running totals
- Startup exits with code 1 when the store or adapter is unavailable
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from lightcommand import cli
from lightcommand.commands.adapters import HueAdapter
from lightcommand.core.exceptions import StoreConnectivityError
from lightcommand.services.polling import PollingService
from lightcommand.services.queue_processor import QueueProcessor

from conftest import HUE_OK, add_command, fetch_command, http_response


class ScriptedPoller(PollingService):
    """Runs a list of steps, one per cycle, then stops."""

    name = "scripted poller"

    def __init__(self, steps, **kwargs):
        self.reconnects = 0
        kwargs.setdefault("check", lambda: None)
        kwargs.setdefault("reconnect", self._count_reconnect)
        super().__init__(poll_interval=0, error_backoff=0, backoff_jitter=0, **kwargs)
        self.steps = list(steps)
        self.polls = 0

    def _count_reconnect(self):
        self.reconnects += 1

    def poll_once(self):
        self.polls += 1
        step = self.steps.pop(0)
        if not self.steps:
            self.running = False
        if isinstance(step, Exception):
            raise step
        return step


class TestPollingService:

    def test_error_backs_off_and_reconnects(self):
        poller = ScriptedPoller([RuntimeError("database is locked"), 1, 0])

        asyncio.run(poller.run_forever())

        assert poller.polls == 3
        assert poller.errors == 1
        assert poller.cycles == 2
        assert poller.reconnects == 1

    def test_failed_reconnect_does_not_stop_the_loop(self):
        def broken_reconnect():
            raise StoreConnectivityError("still down")

        poller = ScriptedPoller([RuntimeError("lost connection"), 0], reconnect=broken_reconnect)

        asyncio.run(poller.run_forever())

        assert poller.polls == 2
        assert poller.errors == 1

    def test_reconnects_before_polling_when_check_fails(self):
        def down():
            raise StoreConnectivityError("server has gone away")

        poller = ScriptedPoller([0], check=down)

        asyncio.run(poller.run_forever())

        assert poller.reconnects == 1
        assert poller.polls == 1
        assert poller.errors == 0

    def test_sleeps_after_every_cycle_and_backs_off_before_reconnect(self):
        events = []

        async def record_sleep(seconds):
            events.append(("sleep", seconds))

        poller = ScriptedPoller(
            [1, RuntimeError("deadlock"), 0],
            reconnect=lambda: events.append(("reconnect", None))
        )
        poller.poll_interval = 0.25
        poller.error_backoff = 5.0
        poller.backoff_jitter = 1.0

        with patch("lightcommand.services.polling.asyncio.sleep", new=AsyncMock(side_effect=record_sleep)):
            asyncio.run(poller.run_forever())

        assert [kind for kind, _ in events] == ["sleep", "sleep", "reconnect", "sleep"]
        assert events[0][1] == 0.25
        assert 5.0 <= events[1][1] <= 6.0
        assert events[3][1] == 0.25

    def test_start_and_stop(self):
        class Idle(PollingService):
            def poll_once(self):
                return 0

        async def scenario():
            poller = Idle(poll_interval=0.01, check=lambda: None, reconnect=lambda: None)
            await poller.start()
            await asyncio.sleep(0.05)
            await poller.stop()
            return poller

        poller = asyncio.run(scenario())

        assert poller.running is False
        assert poller.cycles >= 1


class TestQueueProcessor:

    def test_poll_once_processes_a_batch(self, session_factory, db):
        first = add_command(db, device="light-1", command={"name": "brightness", "value": 50})
        second = add_command(db, device="light-2", command={"name": "turn", "value": "bogus"})
        adapter = HueAdapter(session_factory, bridge_ip="bridge", api_key="k")
        processor = QueueProcessor(adapter, batch_size=10, check=lambda: None, reconnect=lambda: None)

        with patch("lightcommand.commands.adapters.hue.requests.put", return_value=http_response(200, HUE_OK)):
            assert processor.poll_once() == 2

        assert processor.processed_total == 2
        assert processor.failed_total == 1
        assert fetch_command(db, first).status == "completed"
        assert fetch_command(db, second).status == "failed"

    def test_batch_size_is_capped(self, session_factory):
        adapter = HueAdapter(session_factory, bridge_ip="bridge", api_key="k")

        assert QueueProcessor(adapter, batch_size=50).batch_size == 10
        assert QueueProcessor(adapter, batch_size=0).batch_size == 1
        assert QueueProcessor(adapter).name == "hue queue processor"


class TestWorkerStartup:

    def test_unreachable_store_exits_with_1(self):
        with patch.object(cli, "check_connection", side_effect=StoreConnectivityError("refused")):
            assert cli.worker_main(["--brand", "hue"]) == 1

    def test_unknown_brand_exits_with_1(self):
        with patch.object(cli, "check_connection", return_value=None):
            assert cli.worker_main(["--brand", "x10"]) == 1

    def test_resolver_with_missing_config_exits_with_1(self, tmp_path):
        assert cli.resolver_main(["--config", str(tmp_path / "nope.json")]) == 1

    def test_resolver_unreachable_store_exits_with_1(self, tmp_path):
        path = tmp_path / "buttons.json"
        path.write_text("{}")

        with patch.object(cli, "check_connection", side_effect=StoreConnectivityError("refused")):
            assert cli.resolver_main(["--config", str(path)]) == 1

    @pytest.mark.parametrize("argv", [[], ["--batch-size", "3"]])
    def test_brand_is_required(self, argv):
        with pytest.raises(SystemExit):
            cli.worker_main(argv)
