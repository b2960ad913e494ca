"""Batching optimizers between identifier requests and the segment table.

Four strategies trade storage round trips against local block size:

- ``none``: every identifier costs one table access.
- ``hilo``: the table holds a block index *hi*; identifiers are
  ``hi * k + lo`` for ``lo`` in ``[0, k)``.
- ``pooled``: the table is advanced by *k* per access; the fetched value
  is the inclusive upper bound of the block being served.
- ``pooled-lo``: like pooled, but the fetched value is the block's lower
  bound.

Optimizers are plain dataclasses holding only their own state, dispatched
by :func:`generate`. They are NOT thread-safe: the owning generator
serializes calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import assert_never

from segseq.domain.counter import CounterValue

logger = logging.getLogger(__name__)

Fetch = Callable[[], CounterValue]

# Marker for "no explicit initial value configured".
UNSET_INITIAL_VALUE = -1


class OptimizerKind(StrEnum):
    """Names accepted by the ``optimizer`` option."""

    NONE = "none"
    HILO = "hilo"
    POOLED = "pooled"
    POOLED_LO = "pooled-lo"


@dataclass
class NoOptimizer:
    increment_size: int = 1
    last_source_value: CounterValue | None = None


@dataclass
class HiLoOptimizer:
    increment_size: int
    last_source_value: CounterValue | None = None
    value: CounterValue | None = None
    upper_limit: CounterValue | None = None  # exclusive


@dataclass
class PooledOptimizer:
    increment_size: int
    initial_value: int = UNSET_INITIAL_VALUE
    last_source_value: CounterValue | None = None  # inclusive upper bound
    value: CounterValue | None = None


@dataclass
class PooledLoOptimizer:
    increment_size: int
    last_source_value: CounterValue | None = None  # inclusive lower bound
    value: CounterValue | None = None
    upper_limit: CounterValue | None = None  # exclusive


Optimizer = NoOptimizer | HiLoOptimizer | PooledOptimizer | PooledLoOptimizer


def implicit_optimizer_kind(
    increment_size: int,
    *,
    preferred_pooled: OptimizerKind | None = None,
    prefer_pooled_lo: bool = False,
) -> OptimizerKind:
    """Choose an optimizer when none is configured explicitly."""
    if increment_size <= 1:
        return OptimizerKind.NONE
    if preferred_pooled is not None:
        return preferred_pooled
    if prefer_pooled_lo:
        return OptimizerKind.POOLED_LO
    return OptimizerKind.POOLED


def build_optimizer(
    kind: OptimizerKind,
    increment_size: int,
    initial_value: int = UNSET_INITIAL_VALUE,
) -> Optimizer:
    """Create fresh optimizer state for *kind*.

    Batching optimizers need a positive increment size; anything smaller
    falls back to :class:`NoOptimizer`.
    """
    kind = OptimizerKind(kind)
    if kind is not OptimizerKind.NONE and increment_size < 1:
        logger.warning(
            "Increment size %d is not usable with the %s optimizer; using none",
            increment_size,
            kind.value,
        )
        return NoOptimizer(increment_size=increment_size)

    match kind:
        case OptimizerKind.NONE:
            return NoOptimizer(increment_size=increment_size)
        case OptimizerKind.HILO:
            return HiLoOptimizer(increment_size=increment_size)
        case OptimizerKind.POOLED:
            return PooledOptimizer(increment_size=increment_size, initial_value=initial_value)
        case OptimizerKind.POOLED_LO:
            return PooledLoOptimizer(increment_size=increment_size)
        case _:
            assert_never(kind)


def optimizer_kind(optimizer: Optimizer) -> OptimizerKind:
    match optimizer:
        case NoOptimizer():
            return OptimizerKind.NONE
        case HiLoOptimizer():
            return OptimizerKind.HILO
        case PooledOptimizer():
            return OptimizerKind.POOLED
        case PooledLoOptimizer():
            return OptimizerKind.POOLED_LO
        case _:
            assert_never(optimizer)


def applies_increment_to_source(optimizer: Optimizer) -> bool:
    """Whether the storage layer must advance the row by the increment size.

    When False the row is advanced by exactly one per access.
    """
    match optimizer:
        case NoOptimizer() | HiLoOptimizer():
            return False
        case PooledOptimizer() | PooledLoOptimizer():
            return True
        case _:
            assert_never(optimizer)


def check_source_value(optimizer: Optimizer, value: CounterValue) -> None:
    """Fail if *value*, once fetched, would yield a block outside the range.

    Performs the arithmetic :func:`generate` applies to a fresh source
    value, so the failure happens before the table access commits.

    Raises:
        IdentifierOverflowError: The block leaves the identifier type's range.
    """
    match optimizer:
        case NoOptimizer():
            pass
        case HiLoOptimizer(increment_size=size):
            value.multiply(size).add(size)
        case PooledOptimizer(increment_size=size):
            value.subtract(size - 1)
        case PooledLoOptimizer(increment_size=size):
            value.add(size)
        case _:
            assert_never(optimizer)


def generate(optimizer: Optimizer, fetch: Fetch) -> CounterValue:
    """Produce the next identifier, calling *fetch* only when a block runs out."""
    match optimizer:
        case NoOptimizer():
            return _generate_none(optimizer, fetch)
        case HiLoOptimizer():
            return _generate_hilo(optimizer, fetch)
        case PooledOptimizer():
            return _generate_pooled(optimizer, fetch)
        case PooledLoOptimizer():
            return _generate_pooled_lo(optimizer, fetch)
        case _:
            assert_never(optimizer)


def _generate_none(state: NoOptimizer, fetch: Fetch) -> CounterValue:
    value = fetch()
    state.last_source_value = value
    return value


def _generate_hilo(state: HiLoOptimizer, fetch: Fetch) -> CounterValue:
    if state.value is None or state.upper_limit is None or state.value >= state.upper_limit:
        hi = fetch()
        state.last_source_value = hi
        state.value = hi.multiply(state.increment_size)
        state.upper_limit = state.value.add(state.increment_size)
    result = state.value
    state.value = result.increment()
    return result


def _generate_pooled(state: PooledOptimizer, fetch: Fetch) -> CounterValue:
    size = state.increment_size
    if state.last_source_value is None or state.value is None:
        value = fetch()
        if value < 1:
            logger.info("Pooled optimizer source reported initial value %d", int(value))
        unset = state.initial_value == UNSET_INITIAL_VALUE
        if (unset and value < size) or int(value) == state.initial_value:
            # The first value of a fresh segment is served on its own; the
            # block bounded by a second table access follows it.
            state.last_source_value = fetch()
            state.value = state.last_source_value.subtract(size - 1)
            return value
        state.last_source_value = value
        state.value = value.subtract(size - 1)
    elif state.value > state.last_source_value:
        state.last_source_value = fetch()
        state.value = state.last_source_value.subtract(size - 1)
    result = state.value
    state.value = result.increment()
    return result


def _generate_pooled_lo(state: PooledLoOptimizer, fetch: Fetch) -> CounterValue:
    # Values below 1 are skipped, never past the end of the reserved block;
    # a block lying entirely below 1 is dropped and the next one fetched.
    while state.value is None or state.upper_limit is None or state.value >= state.upper_limit:
        lo = fetch()
        state.last_source_value = lo
        state.upper_limit = lo.add(state.increment_size)
        value = lo
        while value < 1 and value < state.upper_limit:
            value = value.increment()
        state.value = value
    result = state.value
    state.value = result.increment()
    return result
