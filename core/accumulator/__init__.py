"""Cross-frame card field accumulation module."""

from core.accumulator.card_accumulator import (
    AccumulatorState,
    AccumulatorUpdate,
    ExpiryAccumulation,
    FieldAccumulator,
    accumulateExpiry,
    formatExpiryProgress,
    updateAccumulator,
)

__all__ = [
    'AccumulatorState',
    'AccumulatorUpdate',
    'ExpiryAccumulation',
    'FieldAccumulator',
    'accumulateExpiry',
    'formatExpiryProgress',
    'updateAccumulator',
]
