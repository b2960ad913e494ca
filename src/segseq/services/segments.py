"""The segment storage protocol: read, lock, increment, write.

One call to :meth:`SegmentAccessor.fetch_next_raw_value` runs a single
isolated transaction against the segment table:

1. read the segment row with write intent;
2. insert it from the initial value if it does not exist yet;
3. compute the advanced counter (by the increment size when the
   optimizer batches at the storage layer, by one otherwise);
4. compare-and-swap the row from the value read to the advanced value.

If the swap matches no row, another transaction advanced the counter
between steps 1 and 4, and the cycle restarts from step 1. The retry is
unbounded: under sustained contention on one segment a caller can spin
for as long as the contention lasts. Storage errors are never retried.

INVARIANT: the returned value is always the next value to hand out,
whatever ``stores_last_used_value`` says about the row's meaning.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from segseq.domain.counter import CounterValue
from segseq.errors import StorageAccessError

if TYPE_CHECKING:
    from segseq.config.models import GeneratorConfig
    from segseq.infrastructure.database.store import SegmentStore, SegmentTransaction

logger = logging.getLogger(__name__)


class SegmentAccessor:
    """Runs the storage protocol for one generator's segment."""

    def __init__(self, config: GeneratorConfig, *, applies_increment: bool) -> None:
        self._config = config
        self._applies_increment = applies_increment
        self.access_count = 0

    @property
    def step(self) -> int:
        """Amount the stored counter advances per access."""
        return self._config.increment_size if self._applies_increment else 1

    def fetch_next_raw_value(
        self,
        store: SegmentStore,
        check: Callable[[CounterValue], None] | None = None,
    ) -> CounterValue:
        """Advance the segment row once and return the raw counter value.

        *check* sees the value before the transaction commits; if it raises,
        the row is left as it was.

        Raises:
            StorageAccessError: The row could not be read, created or updated.
            IdentifierOverflowError: The value leaves the identifier range.
        """
        segment = self._config.segment_value
        attempts = 0
        with store.transaction() as txn:
            while True:
                attempts += 1
                value, expected = self._read_or_initialize(txn)
                if self._advance(txn, expected, value.add(self.step)):
                    break
                logger.debug(
                    "Segment %r changed concurrently (attempt %d); retrying",
                    segment,
                    attempts,
                )
            result = value.increment() if self._config.stores_last_used_value else value
            if check is not None:
                check(result)

        self.access_count += 1
        return result

    def _read_or_initialize(self, txn: SegmentTransaction) -> tuple[CounterValue, int | None]:
        """Return the current counter and the stored value to compare against."""
        config = self._config
        try:
            row = txn.read_for_update(config.segment_value)
            if row is None:
                value = CounterValue.initialize(config.identifier_type, config.seed_value)
                txn.insert(config.segment_value, value.to_parameter())
                return value, value.to_parameter()
        except StorageAccessError:
            logger.error(
                "Could not read or initialize segment %r in %s",
                config.segment_value,
                config.table,
                exc_info=True,
            )
            raise

        default = 0 if config.stores_last_used_value else 1
        value = CounterValue.from_stored(config.identifier_type, row.counter, default)
        return value, row.counter

    def _advance(
        self, txn: SegmentTransaction, expected: int | None, updated: CounterValue
    ) -> bool:
        config = self._config
        try:
            return txn.compare_and_swap(config.segment_value, expected, updated.to_parameter())
        except StorageAccessError:
            logger.error(
                "Could not update segment %r in %s",
                config.segment_value,
                config.table,
                exc_info=True,
            )
            raise
