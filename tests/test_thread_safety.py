"""Tests for thread safety of Resolver."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from rewire.resolver import Resolver
from tests.fixtures import Car, EngineInterface, V8Engine


class SlowEngine(V8Engine):
    def __init__(self) -> None:
        time.sleep(0.01)


class TestConcurrentResolution:
    def test_concurrent_shared_resolution_same_instance(self) -> None:
        """Concurrent resolution of a shared key returns one instance."""
        resolver = Resolver(aliases={EngineInterface: SlowEngine})
        results: list[Car] = []
        errors: list[Exception] = []
        barrier = threading.Barrier(10)

        def resolve_car() -> None:
            barrier.wait()
            try:
                results.append(resolver.resolve(Car))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=resolve_car) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(results) == 10
        assert all(r is results[0] for r in results)
        assert all(r.engine is results[0].engine for r in results)

    def test_concurrent_unshared_resolution_different_instances(self) -> None:
        """Concurrent resolution with sharing disabled creates different instances."""
        resolver = Resolver(should_share=lambda _key: False)
        results: list[V8Engine] = []

        def resolve_engine() -> None:
            results.append(resolver.resolve(V8Engine))

        threads = [threading.Thread(target=resolve_engine) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(r) for r in results}) == 10

    def test_same_key_in_two_threads_is_not_a_cycle(self) -> None:
        """A key being built in one thread is not a cycle for another thread."""
        resolver = Resolver()
        started = threading.Event()
        release = threading.Event()
        errors: list[Exception] = []

        def slow_factory() -> V8Engine:
            started.set()
            release.wait(timeout=5)
            return V8Engine()

        resolver.add_factory("engine", slow_factory)

        def first() -> None:
            try:
                resolver.resolve("engine")
            except Exception as e:
                errors.append(e)

        thread = threading.Thread(target=first)
        thread.start()
        started.wait(timeout=5)
        release.set()
        second_result = resolver.resolve("engine")
        thread.join()

        assert not errors
        assert second_result is resolver.resolve("engine")


class TestScalarMemoization:
    def test_producer_runs_once_under_contention(self) -> None:
        calls: list[int] = []

        def produce() -> int:
            calls.append(1)
            time.sleep(0.01)
            return 100

        resolver = Resolver(scalars={"speed": produce})
        results: list[int] = []

        def lookup() -> None:
            results.append(resolver.scalar("speed"))

        threads = [threading.Thread(target=lookup) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == [100] * 10
        assert calls == [1]

    def test_running_producer_does_not_block_unrelated_resolution(self) -> None:
        resolver = Resolver()
        started = threading.Event()
        release = threading.Event()
        resolved = threading.Event()

        def produce() -> int:
            started.set()
            release.wait(timeout=5)
            return 100

        def resolve_engine() -> None:
            resolver.resolve(V8Engine)
            resolved.set()

        resolver.add_scalar("speed", produce)
        producer_thread = threading.Thread(target=resolver.scalar, args=("speed",))
        producer_thread.start()
        started.wait(timeout=5)

        threading.Thread(target=resolve_engine).start()
        finished_while_producing = resolved.wait(timeout=1)
        release.set()
        producer_thread.join()

        assert finished_while_producing
        assert resolver.scalar("speed") == 100

    def test_producer_can_resolve_in_another_thread(self) -> None:
        resolver = Resolver()

        def produce_engine_name() -> str:
            with ThreadPoolExecutor(max_workers=1) as executor:
                engine = executor.submit(resolver.resolve, V8Engine).result(timeout=5)
            return type(engine).__name__

        resolver.add_scalar("engine_name", produce_engine_name)

        assert resolver.scalar("engine_name") == "V8Engine"
        assert V8Engine in resolver._shared


def test_unlocked_resolver_single_thread(resolver_unlocked: Resolver) -> None:
    resolver_unlocked.add_alias(EngineInterface, V8Engine)
    resolver_unlocked.add_scalar("speed", lambda: 100)

    assert resolver_unlocked.resolve(Car) is resolver_unlocked.resolve(Car)
    assert resolver_unlocked.scalar("speed") == 100
