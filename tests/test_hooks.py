"""Tests for before/after hook sequencing."""

import asyncio

import pytest

from reduxmini import HookQueue, RuntimeFailure, Store, run_deferred


def recorder(calls, name, advance=True):
    def hook(state, action, next):
        calls.append((name, dict(state), action.get("type")))
        if advance:
            next()

    return hook


class TestOrdering:
    def test_before_and_after_snapshots(self):
        calls = []
        Store.register_reducer("n", "INC", lambda s, a: (s or 0) + 1)
        Store.on_before("INC", recorder(calls, "before"))
        Store.on_after("INC", recorder(calls, "after"))
        store = Store({"n": 0})

        store.dispatch({"type": "INC"})

        assert calls == [
            ("before", {"n": 0}, "INC"),
            ("after", {"n": 1}, "INC"),
        ]

    def test_batch_queue_order(self):
        calls = []
        Store.register_reducer("n", "X", lambda s, a: (s or 0) + 1)
        Store.register_reducer("n", "Y", lambda s, a: s * 10)
        Store.on_before("X", recorder(calls, "before-x"))
        Store.on_after("X", recorder(calls, "after-x"))
        Store.on_before("Y", recorder(calls, "before-y"))
        Store.on_after("Y", recorder(calls, "after-y"))
        store = Store({"n": 1})

        store.dispatch([{"type": "X"}, {"type": "Y"}])

        assert calls == [
            ("before-x", {"n": 1}, "X"),
            ("after-x", {"n": 2}, "X"),
            ("before-y", {"n": 2}, "Y"),
            ("after-y", {"n": 20}, "Y"),
        ]

    def test_registration_order_within_phase(self):
        calls = []
        Store.on_after("X", recorder(calls, "one"))
        Store.on_after("X", recorder(calls, "two"))
        Store().dispatch({"type": "X"})
        assert [c[0] for c in calls] == ["one", "two"]

    def test_hooks_run_after_subscribers(self):
        calls = []
        Store.on_before("X", lambda s, a, n: calls.append("hook") or n())
        store = Store()
        store.subscribe(lambda s: calls.append("subscriber"))
        calls.clear()
        store.dispatch({"type": "X"})
        assert calls == ["subscriber", "hook"]

    def test_hook_state_is_read_only(self):
        seen = []
        Store.on_after("X", lambda s, a, n: seen.append(s))
        Store({"a": 1}).dispatch({"type": "X"})
        with pytest.raises(TypeError):
            seen[0]["a"] = 2


class TestContinuation:
    def test_stalled_hook_blocks_rest(self):
        calls = []
        Store.on_after("X", recorder(calls, "stall", advance=False))
        Store.on_after("X", recorder(calls, "blocked"))
        store = Store()
        store.dispatch({"type": "X"})
        assert [c[0] for c in calls] == ["stall"]
        assert store.get_executed_actions()[-1] == {"type": "X"}

    def test_deferred_next_resumes_queue(self):
        calls = []
        pending = []

        def later(state, action, next):
            calls.append("later")
            pending.append(next)

        Store.on_after("X", later)
        Store.on_after("X", lambda s, a, n: calls.append("after") or n())
        Store().dispatch({"type": "X"})
        assert calls == ["later"]

        pending.pop()()
        assert calls == ["later", "after"]

    def test_next_is_not_reentrant(self):
        calls = []

        def first(state, action, next):
            next()
            calls.append("first returned")

        Store.on_after("X", first)
        Store.on_after("X", lambda s, a, n: calls.append("second") or n())
        Store().dispatch({"type": "X"})
        assert calls == ["first returned", "second"]

    def test_next_twice_runs_following_hook_once(self):
        calls = []

        def twice(state, action, next):
            next()
            next()

        Store.on_after("X", twice)
        Store.on_after("X", lambda s, a, n: calls.append("second") or n())
        Store.on_after("X", lambda s, a, n: calls.append("third") or n())
        Store().dispatch({"type": "X"})
        assert calls == ["second", "third"]

    def test_dispatch_from_hook_runs_after_hook(self):
        calls = []
        Store.register_reducer("n", "INC", lambda s, a: (s or 0) + 1)
        store = Store()

        def chain(state, action, next):
            if state["n"] < 3:
                store.dispatch({"type": "INC"})
            calls.append(state["n"])
            next()

        Store.on_after("INC", chain)
        store.dispatch({"type": "INC"})
        assert calls == [1, 2, 3]
        assert store.get_state()["n"] == 3

    def test_long_chain_does_not_grow_stack(self):
        count = 0

        def hook(state, action, next):
            nonlocal count
            count += 1
            next()

        for _ in range(3000):
            Store.on_after("X", hook)

        Store().dispatch({"type": "X"})
        assert count == 3000


class TestFailures:
    def test_hook_failure_after_commit(self):
        def boom(state, action, next):
            raise ValueError("hook")

        Store.register_reducer("a", "X", lambda s, a: 1)
        Store.on_after("X", boom)
        store = Store()

        with pytest.raises(RuntimeFailure) as info:
            store.dispatch({"type": "X"})

        assert isinstance(info.value.__cause__, ValueError)
        assert store.get_state() == {"a": 1}
        assert store.get_executed_actions()[-1] == {"type": "X"}


    def test_failed_hook_drops_rest_of_its_queue(self):
        calls = []

        def advance_then_fail(state, action, next):
            next()
            raise ValueError("hook")

        Store.on_after("X", advance_then_fail)
        Store.on_after("X", recorder(calls, "stale"))
        Store.on_after("Y", recorder(calls, "fresh"))
        store = Store()

        with pytest.raises(RuntimeFailure):
            store.dispatch({"type": "X"})
        assert calls == []

        store.dispatch({"type": "Y"})
        assert [c[0] for c in calls] == ["fresh"]


class TestScheduler:
    def test_custom_scheduler(self):
        scheduled = []
        calls = []
        Store.on_after("X", recorder(calls, "one"))
        Store.on_after("X", recorder(calls, "two"))
        store = Store(scheduler=scheduled.append)

        store.dispatch({"type": "X"})
        assert [c[0] for c in calls] == ["one"]
        assert len(scheduled) == 1

        scheduled.pop()()
        assert [c[0] for c in calls] == ["one", "two"]

    def test_asyncio_loop_defers_next(self):
        calls = []
        Store.on_after("X", recorder(calls, "one"))
        Store.on_after("X", recorder(calls, "two"))

        async def main():
            store = Store()
            store.dispatch({"type": "X"})
            dispatched = [c[0] for c in calls]
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            return dispatched

        assert asyncio.run(main()) == ["one"]
        assert [c[0] for c in calls] == ["one", "two"]

    def test_empty_queue_step_is_noop(self):
        queue = HookQueue()
        queue.step()
        assert len(queue) == 0

    def test_run_deferred_nested_is_queued(self):
        order = []

        def outer():
            run_deferred(lambda: order.append("inner"))
            order.append("outer")

        run_deferred(outer)
        assert order == ["outer", "inner"]
