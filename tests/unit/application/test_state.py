"""Tests for StateCell, the Controller lifetime base and Debouncer."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace

import pytest

from moviestudio.application.debounce import Debouncer
from moviestudio.application.state import Controller, StateCell
from moviestudio.domain.entities.subscription import Subscription


@dataclass(frozen=True)
class _Counter:
    value: int = 0


# ---------------------------------------------------------------------------
# StateCell
# ---------------------------------------------------------------------------


class TestStateCell:
    def test_subscribe_emits_current_value(self) -> None:
        cell = StateCell(_Counter(3))
        seen: list[_Counter] = []

        cell.subscribe(seen.append)

        assert seen == [_Counter(3)]

    def test_update_publishes_new_value(self) -> None:
        cell = StateCell(_Counter())
        seen: list[int] = []
        cell.subscribe(lambda s: seen.append(s.value))

        cell.update(lambda s: replace(s, value=s.value + 1))
        cell.update(lambda s: replace(s, value=s.value + 1))

        assert cell.value == _Counter(2)
        assert seen == [0, 1, 2]

    def test_returning_same_object_does_not_notify(self) -> None:
        cell = StateCell(_Counter())
        seen: list[_Counter] = []
        cell.subscribe(seen.append)

        cell.update(lambda s: s)

        assert len(seen) == 1

    def test_disposed_listener_stops_receiving(self) -> None:
        cell = StateCell(_Counter())
        seen: list[_Counter] = []
        sub = cell.subscribe(seen.append)

        sub.dispose()
        sub.dispose()
        cell.set(_Counter(9))

        assert seen == [_Counter()]
        assert sub.disposed


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class TestController:
    @pytest.mark.asyncio()
    async def test_join_waits_for_launched_tasks(self) -> None:
        controller = Controller()
        done: list[str] = []

        async def work() -> None:
            await asyncio.sleep(0)
            done.append("x")

        controller.launch(work())
        await controller.join()

        assert done == ["x"]

    @pytest.mark.asyncio()
    async def test_close_cancels_tasks_and_disposes_subscriptions(self) -> None:
        controller = Controller()
        gate = asyncio.Event()
        released: list[bool] = []
        controller.own(Subscription(lambda: released.append(True)))
        task = controller.launch(gate.wait())
        assert task is not None

        controller.close()
        await controller.join()

        assert task.cancelled()
        assert released == [True]
        assert controller.closed

    @pytest.mark.asyncio()
    async def test_launch_after_close_is_ignored(self) -> None:
        controller = Controller()
        controller.close()

        async def work() -> None:  # pragma: no cover - never awaited
            raise AssertionError("should not run")

        assert controller.launch(work()) is None

    def test_own_after_close_disposes_immediately(self) -> None:
        controller = Controller()
        controller.close()
        released: list[bool] = []

        controller.own(Subscription(lambda: released.append(True)))

        assert released == [True]

    @pytest.mark.asyncio()
    async def test_failing_task_does_not_break_join(self) -> None:
        controller = Controller()

        async def boom() -> None:
            raise RuntimeError("boom")

        controller.launch(boom())
        await controller.join()


# ---------------------------------------------------------------------------
# Debouncer
# ---------------------------------------------------------------------------


class TestDebouncer:
    @pytest.mark.asyncio()
    async def test_only_settled_value_is_delivered(self) -> None:
        delivered: list[str] = []
        debouncer: Debouncer[str] = Debouncer(0.1, delivered.append)

        debouncer.submit("a")
        await asyncio.sleep(0.02)
        debouncer.submit("ab")
        await asyncio.sleep(0.02)
        debouncer.submit("abc")

        await asyncio.sleep(0.05)
        assert delivered == []
        assert debouncer.pending

        await asyncio.sleep(0.15)
        assert delivered == ["abc"]
        assert not debouncer.pending

    @pytest.mark.asyncio()
    async def test_duplicate_settled_value_is_dropped(self) -> None:
        delivered: list[str] = []
        debouncer: Debouncer[str] = Debouncer(0.01, delivered.append)

        debouncer.submit("abc")
        await asyncio.sleep(0.05)
        debouncer.submit("abc")
        await asyncio.sleep(0.05)
        debouncer.submit("abd")
        await asyncio.sleep(0.05)

        assert delivered == ["abc", "abd"]

    @pytest.mark.asyncio()
    async def test_cancel_drops_pending_value(self) -> None:
        delivered: list[str] = []
        debouncer: Debouncer[str] = Debouncer(0.01, delivered.append)

        debouncer.submit("abc")
        debouncer.cancel()
        await asyncio.sleep(0.05)

        assert delivered == []
