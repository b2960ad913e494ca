"""Tests for the batching optimizers."""

from __future__ import annotations

import pytest

from segseq.domain.counter import CounterValue, IdentifierType
from segseq.domain.optimizers import (
    HiLoOptimizer,
    NoOptimizer,
    OptimizerKind,
    PooledLoOptimizer,
    PooledOptimizer,
    applies_increment_to_source,
    build_optimizer,
    check_source_value,
    generate,
    implicit_optimizer_kind,
    optimizer_kind,
)
from segseq.errors import IdentifierOverflowError


class FakeSource:
    """Stands in for the segment table: each fetch advances by *step*."""

    def __init__(self, start: int = 1, step: int = 1) -> None:
        self.next = start
        self.step = step
        self.calls = 0

    def __call__(self) -> CounterValue:
        self.calls += 1
        value = CounterValue(self.next)
        self.next += self.step
        return value


def _take(optimizer: object, source: FakeSource, n: int) -> list[int]:
    return [int(generate(optimizer, source)) for _ in range(n)]  # type: ignore[arg-type]


class TestImplicitKind:
    @pytest.mark.parametrize("size", [-5, 0, 1])
    def test_small_increment_means_none(self, size: int) -> None:
        kind = implicit_optimizer_kind(size, preferred_pooled=OptimizerKind.HILO)
        assert kind is OptimizerKind.NONE

    def test_default_is_pooled(self) -> None:
        assert implicit_optimizer_kind(10) is OptimizerKind.POOLED

    def test_prefer_pooled_lo(self) -> None:
        assert implicit_optimizer_kind(10, prefer_pooled_lo=True) is OptimizerKind.POOLED_LO

    def test_preferred_optimizer_wins(self) -> None:
        kind = implicit_optimizer_kind(
            10, preferred_pooled=OptimizerKind.HILO, prefer_pooled_lo=True
        )
        assert kind is OptimizerKind.HILO


class TestBuildOptimizer:
    @pytest.mark.parametrize(
        ("kind", "cls"),
        [
            ("none", NoOptimizer),
            ("hilo", HiLoOptimizer),
            ("pooled", PooledOptimizer),
            ("pooled-lo", PooledLoOptimizer),
        ],
    )
    def test_builds_each_kind(self, kind: str, cls: type) -> None:
        optimizer = build_optimizer(kind, 5)  # type: ignore[arg-type]
        assert isinstance(optimizer, cls)
        assert optimizer_kind(optimizer) == OptimizerKind(kind)

    def test_non_positive_increment_falls_back_to_none(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("WARNING", logger="segseq.domain.optimizers"):
            optimizer = build_optimizer(OptimizerKind.HILO, 0)
        assert isinstance(optimizer, NoOptimizer)
        assert "not usable" in caplog.text

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError):
            build_optimizer("segmented", 5)  # type: ignore[arg-type]

    def test_applies_increment_to_source(self) -> None:
        assert applies_increment_to_source(NoOptimizer()) is False
        assert applies_increment_to_source(HiLoOptimizer(5)) is False
        assert applies_increment_to_source(PooledOptimizer(5)) is True
        assert applies_increment_to_source(PooledLoOptimizer(5)) is True


class TestNoOptimizer:
    def test_every_call_fetches(self) -> None:
        source = FakeSource(start=1)
        optimizer = NoOptimizer()
        assert _take(optimizer, source, 3) == [1, 2, 3]
        assert source.calls == 3
        assert optimizer.last_source_value == CounterValue(3)


class TestHiLoOptimizer:
    def test_block_is_hi_times_k(self) -> None:
        source = FakeSource(start=1)
        optimizer = HiLoOptimizer(increment_size=5)
        assert _take(optimizer, source, 10) == list(range(5, 15))
        assert source.calls == 2

    def test_each_fetched_hi_yields_its_block(self) -> None:
        k = 4
        source = FakeSource(start=3)
        optimizer = HiLoOptimizer(increment_size=k)
        for hi in (3, 4, 5):
            assert _take(optimizer, source, k) == list(range(hi * k, hi * k + k))
            assert optimizer.last_source_value == CounterValue(hi)

    def test_fetches_only_when_block_exhausted(self) -> None:
        source = FakeSource(start=1)
        optimizer = HiLoOptimizer(increment_size=5)
        _take(optimizer, source, 5)
        assert source.calls == 1
        _take(optimizer, source, 1)
        assert source.calls == 2


class TestPooledOptimizer:
    def test_fresh_segment_serves_from_initial_value(self) -> None:
        # The table advances by k per access in pooled mode.
        source = FakeSource(start=1, step=5)
        optimizer = PooledOptimizer(increment_size=5)
        assert _take(optimizer, source, 16) == list(range(1, 17))

    def test_first_value_costs_two_fetches(self) -> None:
        source = FakeSource(start=1, step=5)
        optimizer = PooledOptimizer(increment_size=5)
        _take(optimizer, source, 6)
        assert source.calls == 2
        assert optimizer.last_source_value == CounterValue(6)

    def test_kth_plus_one_call_fetches_once(self) -> None:
        source = FakeSource(start=1, step=5)
        optimizer = PooledOptimizer(increment_size=5)
        _take(optimizer, source, 6)
        before = source.calls

        _take(optimizer, source, 5)
        assert source.calls == before + 1

        _take(optimizer, source, 1)
        assert source.calls == before + 2

    def test_fetched_value_is_block_upper_bound(self) -> None:
        # Another process already moved the segment past the initial value.
        source = FakeSource(start=11, step=5)
        optimizer = PooledOptimizer(increment_size=5)
        assert _take(optimizer, source, 5) == [7, 8, 9, 10, 11]
        assert source.calls == 1
        assert _take(optimizer, source, 1) == [12]

    def test_fresh_segment_raced_by_another_instance(self) -> None:
        source = FakeSource(start=1, step=5)
        rival = PooledOptimizer(increment_size=5)
        rival_ids: list[int] = []

        def fetch() -> CounterValue:
            value = source()
            if source.calls == 1:
                # The rival takes a block between our two startup fetches.
                rival_ids.append(int(generate(rival, source)))
            return value

        mine = PooledOptimizer(increment_size=5)
        my_ids = [int(generate(mine, fetch)) for _ in range(6)]
        rival_ids += _take(rival, source, 4)

        assert my_ids == [1, 7, 8, 9, 10, 11]
        assert rival_ids == [2, 3, 4, 5, 6]
        assert not set(my_ids) & set(rival_ids)

    def test_explicit_initial_value(self) -> None:
        source = FakeSource(start=100, step=10)
        optimizer = PooledOptimizer(increment_size=10, initial_value=100)
        assert _take(optimizer, source, 12) == list(range(100, 112))


class TestPooledLoOptimizer:
    def test_fetched_value_is_block_lower_bound(self) -> None:
        source = FakeSource(start=1, step=5)
        optimizer = PooledLoOptimizer(increment_size=5)
        assert _take(optimizer, source, 5) == [1, 2, 3, 4, 5]
        assert source.calls == 1
        assert _take(optimizer, source, 5) == [6, 7, 8, 9, 10]
        assert source.calls == 2

    def test_values_below_one_are_skipped(self) -> None:
        source = FakeSource(start=0, step=5)
        optimizer = PooledLoOptimizer(increment_size=5)
        assert _take(optimizer, source, 5) == [1, 2, 3, 4, 5]
        assert source.calls == 2

    def test_blocks_below_one_are_dropped(self) -> None:
        # Blocks [-20, -10) and [-10, 0) hold no usable identifier.
        source = FakeSource(start=-20, step=10)
        optimizer = PooledLoOptimizer(increment_size=10)
        ids = _take(optimizer, source, 12)
        assert ids == list(range(1, 13))
        assert source.calls == 4


class TestCheckSourceValue:
    def test_hilo_block_must_fit(self) -> None:
        optimizer = HiLoOptimizer(increment_size=1000)
        check_source_value(optimizer, CounterValue(31, IdentifierType.SHORT))
        with pytest.raises(IdentifierOverflowError):
            check_source_value(optimizer, CounterValue(33, IdentifierType.SHORT))

    def test_pooled_block_must_fit(self) -> None:
        low = IdentifierType.SHORT.bounds[0]  # type: ignore[index]
        with pytest.raises(IdentifierOverflowError):
            check_source_value(PooledOptimizer(10), CounterValue(low + 5, IdentifierType.SHORT))

    def test_none_accepts_any_value(self) -> None:
        check_source_value(NoOptimizer(), CounterValue(2**31 - 1, IdentifierType.INTEGER))

    def test_rejection_leaves_state_alone(self) -> None:
        optimizer = HiLoOptimizer(increment_size=1000)

        def fetch() -> CounterValue:
            value = CounterValue(40, IdentifierType.SHORT)
            check_source_value(optimizer, value)
            return value

        with pytest.raises(IdentifierOverflowError):
            generate(optimizer, fetch)
        assert optimizer.value is None
        assert optimizer.last_source_value is None
