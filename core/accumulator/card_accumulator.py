"""
Card Field Accumulator.

Turns repeated noisy single-frame observations into locked card fields:
- Bank name, card number and holder name lock after a number of
  consecutive identical observations.
- Expiry is accumulated digit by digit into MM/YY slots; a slot keeps
  the first digit seen for it.

All functions are pure: inputs are never modified, new objects are returned.
"""

import logging
import string
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from core.interfaces.card_parser_interface import ParsedCardFields
from core.processor.card_constants import DEFAULT_REQUIRED_TICKS


logger = logging.getLogger(__name__)


# [month-tens, month-ones, year-tens, year-ones]
ExpiryDigits = Tuple[Optional[str], Optional[str], Optional[str], Optional[str]]

EMPTY_EXPIRY_DIGITS: ExpiryDigits = (None, None, None, None)

# Fields locked by consecutive identical observations
STANDARD_FIELDS = ('bankName', 'cardNumber', 'holderName')

# Fields that must all be locked for a complete scan
ALL_FIELDS = ('bankName', 'cardNumber', 'expiry', 'holderName')

# Fields a card form cannot do without
ESSENTIAL_FIELDS = ('cardNumber', 'expiry', 'holderName')


@dataclass(frozen=True)
class FieldAccumulator:
    """Last observed value of a field and how many ticks in a row it was seen."""
    value: str
    count: int


@dataclass(frozen=True)
class AccumulatorState:
    """
    Cross-frame accumulation state for one scan session.

    Attributes:
        bankName: Running observation for the bank name
        cardNumber: Running observation for the card number
        holderName: Running observation for the holder name
        expiryDigits: Four expiry slots, None where no digit was seen yet
    """
    bankName: Optional[FieldAccumulator] = None
    cardNumber: Optional[FieldAccumulator] = None
    holderName: Optional[FieldAccumulator] = None
    expiryDigits: ExpiryDigits = EMPTY_EXPIRY_DIGITS


@dataclass(frozen=True)
class ExpiryAccumulation:
    """Result of merging one expiry observation into the digit slots."""
    digits: ExpiryDigits
    complete: Optional[str] = None


@dataclass(frozen=True)
class AccumulatorUpdate:
    """
    Result of one accumulator tick.

    Attributes:
        state: Updated accumulation state
        locked: Updated locked fields
        allLocked: True when bank name, card number, expiry and holder name are locked
        essentialsLocked: True when card number, expiry and holder name are locked
    """
    state: AccumulatorState
    locked: ParsedCardFields
    allLocked: bool
    essentialsLocked: bool = False


def _fillSlot(digits: list, slot: int, char: str) -> None:
    """Set a slot once; later observations never overwrite it."""
    if digits[slot] is None and char in string.digits:
        digits[slot] = char


def accumulateExpiry(current: ExpiryDigits, partial: Optional[str]) -> ExpiryAccumulation:
    """
    Merge a partial expiry observation into the MM/YY digit slots.

    The two rightmost characters before "/" fill the month slots; a single
    character fills only the month-ones slot. The first two characters
    after "/" fill the year slots. A date is complete only when all four
    slots hold digits and the month is within 1-12.

    Args:
        current: Current four digit slots
        partial: Expiry observation such as "12/25", "1/25" or "412/2",
                 None when the frame had no expiry

    Returns:
        ExpiryAccumulation with the merged slots and the MM/YY date if complete

    Raises:
        ValueError: If current does not have exactly four slots
    """
    if len(current) != 4:
        raise ValueError(f"Expected 4 expiry digit slots, got {len(current)}")

    digits = list(current)

    if partial:
        parts = partial.split('/')
        before = parts[0]
        after = parts[1] if len(parts) > 1 else ''

        if len(before) >= 2:
            _fillSlot(digits, 0, before[-2])
            _fillSlot(digits, 1, before[-1])
        elif len(before) == 1:
            _fillSlot(digits, 1, before[0])

        year = after[:2]
        if len(year) >= 1:
            _fillSlot(digits, 2, year[0])
        if len(year) >= 2:
            _fillSlot(digits, 3, year[1])

    merged: ExpiryDigits = tuple(digits)

    if all(d is not None for d in merged):
        month = int(merged[0] + merged[1])
        if 1 <= month <= 12:
            return ExpiryAccumulation(
                digits=merged,
                complete=f"{merged[0]}{merged[1]}/{merged[2]}{merged[3]}"
            )

    return ExpiryAccumulation(digits=merged, complete=None)


def formatExpiryProgress(digits: ExpiryDigits) -> Optional[str]:
    """
    Render expiry slots for display, e.g. "_1/25".

    Returns:
        Progress string, or None when no slot is filled yet
    """
    if all(d is None for d in digits):
        return None
    rendered = [d if d is not None else '_' for d in digits]
    return f"{rendered[0]}{rendered[1]}/{rendered[2]}{rendered[3]}"


def updateAccumulator(
    state: AccumulatorState,
    locked: ParsedCardFields,
    parsed: ParsedCardFields,
    requiredTicks: int = DEFAULT_REQUIRED_TICKS
) -> AccumulatorUpdate:
    """
    Feed one frame's parsed fields into the accumulators.

    A locked field is never changed again. A field missing from this frame
    leaves its accumulator untouched; a differing value restarts its count.

    Args:
        state: Current accumulation state
        locked: Fields locked so far
        parsed: Fields parsed from this frame
        requiredTicks: Consecutive identical observations needed to lock

    Returns:
        AccumulatorUpdate with new state, new locked fields and completion flags

    Raises:
        ValueError: If requiredTicks is less than 1
    """
    if requiredTicks < 1:
        raise ValueError(f"requiredTicks must be at least 1, got {requiredTicks}")

    stateChanges = {}
    lockedChanges = {}

    for fieldName in STANDARD_FIELDS:
        if getattr(locked, fieldName):
            continue

        value = getattr(parsed, fieldName)
        if not value:
            continue

        current: Optional[FieldAccumulator] = getattr(state, fieldName)
        if current is not None and current.value == value:
            accumulator = FieldAccumulator(value=value, count=current.count + 1)
        else:
            accumulator = FieldAccumulator(value=value, count=1)

        stateChanges[fieldName] = accumulator

        if accumulator.count >= requiredTicks:
            lockedChanges[fieldName] = value
            logger.debug(f"Locked {fieldName}={value} after {accumulator.count} ticks")

    if not locked.expiry:
        expiry = accumulateExpiry(state.expiryDigits, parsed.expiry)
        stateChanges['expiryDigits'] = expiry.digits
        if expiry.complete:
            lockedChanges['expiry'] = expiry.complete
            logger.debug(f"Locked expiry={expiry.complete}")

    newState = replace(state, **stateChanges)
    newLocked = replace(locked, **lockedChanges)

    return AccumulatorUpdate(
        state=newState,
        locked=newLocked,
        allLocked=all(getattr(newLocked, f) for f in ALL_FIELDS),
        essentialsLocked=all(getattr(newLocked, f) for f in ESSENTIAL_FIELDS)
    )
