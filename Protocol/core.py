"""
Protocol/core.py
BB84 communicators.
Symbolic basis / polarisation model of the protocol: the Sender encodes
random bits into polarisation labels, the Receiver measures them in its own
random basis, and both sift a shared key from the positions where their
announced bases agree.
"""

import numpy as np

from config import app_config
from config.logging_config import get_logger
from Protocol.channel import post, read_sequence, validate_channel
from Protocol.errors import ValidationError

log = get_logger("qkd.protocol")

# ---------------------------------------------------------------------------
# Basis alphabet and polarisation encoding
# ---------------------------------------------------------------------------
RECTILINEAR: int = 0
DIAGONAL:    int = 1
BASES: tuple[int, int] = (RECTILINEAR, DIAGONAL)

LABEL_MAP: dict[tuple[int, int], str] = {
    (0, RECTILINEAR): 'H',  # horizontal
    (1, RECTILINEAR): 'V',  # vertical
    (0, DIAGONAL):    'D',  # +45°
    (1, DIAGONAL):    'A',  # -45°
}
DECODE_MAP: dict[str, tuple[int, int]] = {label: key for key, label in LABEL_MAP.items()}


def encode(bit: int, basis: int) -> str:
    """Polarisation label carrying *bit* in *basis*."""
    return LABEL_MAP[(int(bit), int(basis))]


def measure(label: str, basis: int) -> int:
    """
    Read a polarisation label in *basis*.

    Matching basis returns the encoded bit; a mismatched basis gives a
    uniform coin flip.

    Raises:
        ValidationError: if *label* is not one of 'H', 'V', 'D', 'A'.
    """
    if label not in DECODE_MAP:
        raise ValidationError(f"Unknown polarisation label {label!r}")
    bit, encoded_basis = DECODE_MAP[label]
    if encoded_basis == basis:
        return bit
    return int(np.random.randint(0, 2))


class Communicator:
    """
    Protocol behaviour shared by both parties.

    Owns its basis choice, the peer's announced basis, its own bit sequence
    and the sifted key. The channel is the only surface the two parties
    share. Steps are not checked for order: each one works on whatever
    state the instance currently holds.
    """

    role: str = "communicator"

    def __init__(
        self,
        photons_size: int | None = None,
        min_shared_key_length: int | None = None,
    ) -> None:
        self.photons_size: int = (
            app_config.PHOTONS_SIZE if photons_size is None else photons_size
        )
        self.min_shared_key_length: int = (
            app_config.MIN_SHARED_KEY_LENGTH
            if min_shared_key_length is None else min_shared_key_length
        )

        self.random_basis: list = []
        self.other_basis:  list = []
        self.bits:         list = []
        self.photons:      list = []
        self.shared_key:   list = []

        self.decision:       bool | None = None
        self.other_decision: bool | None = None

    # ------------------------------------------------------------------
    # Channel guard
    # ------------------------------------------------------------------

    def is_valid_channel(self, channel) -> None:
        """Raise ValidationError unless *channel* has all three shared fields."""
        validate_channel(channel)

    # ------------------------------------------------------------------
    # Basis
    # ------------------------------------------------------------------

    def generate_random_basis(self) -> None:
        self.random_basis = np.random.randint(0, len(BASES), self.photons_size).tolist()
        log.debug(f"{self.role}: generated {len(self.random_basis)} bases")

    def read_basis_from_channel(self, channel) -> None:
        """Copy the basis announced on the channel into other_basis."""
        self.is_valid_channel(channel)
        self.other_basis = read_sequence(channel, "basis_used")
        log.debug(f"{self.role}: read {len(self.other_basis)} peer bases")

    def send_basis_to_channel(self, channel) -> None:
        """Announce random_basis on the channel."""
        self.is_valid_channel(channel)
        post(channel, "basis_used", self.random_basis, self.role)

    # ------------------------------------------------------------------
    # Sifting and decision
    # ------------------------------------------------------------------

    def generate_shared_key(self) -> None:
        """
        Keep own bits at the indices where both bases agree.

        Sequences of unequal length are compared up to the shorter one.
        """
        if len(self.random_basis) != len(self.other_basis):
            log.warning(
                f"{self.role}: basis length mismatch "
                f"(own={len(self.random_basis)}, other={len(self.other_basis)}), "
                f"sifting the common prefix"
            )
        self.shared_key = [
            bit
            for own, other, bit in zip(self.random_basis, self.other_basis, self.bits)
            if own == other
        ]
        log.debug(f"{self.role}: sifted key of {len(self.shared_key)} bits")

    def get_shared_key(self) -> list:
        return list(self.shared_key)

    def decide(self) -> None:
        """
        Accept the run when the sifted key reaches min_shared_key_length.

        Raises:
            ValidationError: if shared_key is not a sequence.
        """
        if not isinstance(self.shared_key, (list, tuple, np.ndarray)):
            raise ValidationError(
                f"Invalid shared key: expected a sequence, got "
                f"{type(self.shared_key).__name__}"
            )
        self.decision = len(self.shared_key) >= self.min_shared_key_length
        log.info(
            f"{self.role}: key length {len(self.shared_key)} "
            f"(min {self.min_shared_key_length}) -> "
            f"{'ACCEPT' if self.decision else 'REJECT'}"
        )

    def send_decision_to_channel(self, channel) -> None:
        self.is_valid_channel(channel)
        post(channel, "decision", self.decision, self.role)

    def read_decision_from_channel(self, channel) -> None:
        self.is_valid_channel(channel)
        self.other_decision = channel.decision
        log.debug(f"{self.role}: peer decision {self.other_decision}")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n={self.photons_size}, "
            f"key={len(self.shared_key)}, decision={self.decision})"
        )


class Sender(Communicator):
    """
    Sending side: draws random bits, encodes them in its random basis and
    puts the resulting polarisation labels on the channel.
    """

    role = "sender"

    def __init__(
        self,
        photons_size: int | None = None,
        min_shared_key_length: int | None = None,
    ) -> None:
        super().__init__(photons_size, min_shared_key_length)
        self.polarizations: list[str] = []

    def generate_random_bits(self) -> None:
        self.bits = np.random.randint(0, 2, self.photons_size).tolist()
        log.debug(f"{self.role}: generated {len(self.bits)} bits")

    def calculate_polarizations(self) -> None:
        """
        Encode every (bit, basis) pair through LABEL_MAP.

        Raises:
            ValidationError: if bits and random_basis differ in length.
        """
        if len(self.bits) != len(self.random_basis):
            raise ValidationError(
                f"Cannot encode {len(self.bits)} bits with "
                f"{len(self.random_basis)} bases"
            )
        self.polarizations = [encode(b, s) for b, s in zip(self.bits, self.random_basis)]
        self.photons = list(self.polarizations)

    def send_photons_to_channel(self, channel) -> None:
        self.is_valid_channel(channel)
        post(channel, "photons", self.polarizations, self.role)


class Receiver(Communicator):
    """
    Receiving side: measures each photon on the channel in its own random
    basis. Measurement results become the bits it sifts from.
    """

    role = "receiver"

    def measure_photons_from_channel(self, channel) -> None:
        """
        Measure channel.photons position by position with random_basis.

        Photons beyond the length of random_basis are not measured.
        """
        self.is_valid_channel(channel)
        received = read_sequence(channel, "photons")[:len(self.random_basis)]
        results = [measure(label, basis) for label, basis in zip(received, self.random_basis)]

        self.photons = received
        self.bits = results
        log.debug(f"{self.role}: measured {len(self.bits)} photons")
