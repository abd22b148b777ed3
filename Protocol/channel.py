"""
Protocol/channel.py
Shared channel between the BB84 communicators.

The channel is a plain blackboard: each field is overwritten by whichever
party posts last. Every successful post is also appended to the channel's
transcript as an immutable Envelope, so the exchange can be inspected
after the run without being affected by later writes.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np

from config.logging_config import get_logger
from Protocol.errors import ValidationError

log = get_logger("qkd.channel")

CHANNEL_FIELDS: tuple[str, ...] = ("basis_used", "photons", "decision")


@dataclass(frozen=True)
class Envelope:
    """One post on the channel: which field, what was written, and by whom."""
    field: str
    payload: Any
    origin: str


class QuantumChannel:
    """Blackboard holding the basis announcement, the photons and the decision."""

    def __init__(self) -> None:
        self.basis_used: list = []
        self.photons:    list = []
        self.decision:   bool | None = None
        self.transcript: list[Envelope] = []

    def latest(self, field_name: str) -> Envelope | None:
        """Most recent envelope posted to *field_name*, or None."""
        for envelope in reversed(self.transcript):
            if envelope.field == field_name:
                return envelope
        return None

    def __repr__(self) -> str:
        return (
            f"QuantumChannel(basis_used={len(self.basis_used)}, "
            f"photons={len(self.photons)}, decision={self.decision}, "
            f"posts={len(self.transcript)})"
        )


def validate_channel(channel: Any) -> None:
    """
    Structural check shared by every channel-consuming operation.

    A channel is valid when it carries all of CHANNEL_FIELDS as its own
    instance attributes. Field names are snake_case (basis_used, photons,
    decision); an object exposing BasisUsed / Photons / Decision is
    rejected. The values themselves are not inspected here; see
    read_sequence for the read side.

    Raises:
        ValidationError: if any field is missing, or the object has no
                         instance attributes at all.
    """
    try:
        own = vars(channel)
    except TypeError:
        raise ValidationError(
            f"Invalid channel: {type(channel).__name__} has no attributes"
        ) from None

    missing = [name for name in CHANNEL_FIELDS if name not in own]
    if missing:
        raise ValidationError(f"Invalid channel: missing {', '.join(missing)}")


def post(channel: Any, field_name: str, value: Any, origin: str) -> None:
    """
    Overwrite *field_name* on an already validated channel.

    Sequences are stored as a fresh list so the poster keeps sole ownership
    of its own state; the transcript keeps a tuple snapshot.
    """
    if isinstance(value, np.ndarray) and value.ndim > 0:
        stored: Any = value.tolist()
        snapshot: Any = tuple(stored)
    elif isinstance(value, (list, tuple)):
        stored = list(value)
        snapshot = tuple(value)
    else:
        stored = snapshot = value

    setattr(channel, field_name, stored)

    if isinstance(channel, QuantumChannel):
        channel.transcript.append(Envelope(field_name, snapshot, origin))

    size = len(stored) if isinstance(stored, list) else stored
    log.debug(f"{origin} -> {field_name} ({size})")


def read_sequence(channel: Any, field_name: str) -> list:
    """
    Copy of a sequence field from an already validated channel.

    Raises:
        ValidationError: if the field holds something that cannot be
                         iterated (e.g. None before any party has posted).
    """
    value = getattr(channel, field_name)
    try:
        return list(value)
    except TypeError:
        raise ValidationError(
            f"Invalid channel: {field_name} is {type(value).__name__}, not a sequence"
        ) from None
