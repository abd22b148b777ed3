"""
tests/test_roles.py
Pytest unit tests for the Sender / Receiver specialisations and the
intercept-resend Attacker.

Tests verify the polarisation encoding table, measurement semantics in
matching and mismatched bases, and that the attacker only touches the
channel where it is meant to.

Run with:
    pytest tests/test_roles.py -v
"""
import sys
import os
from types import SimpleNamespace

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from Protocol import core as bb
from Protocol.attacker import Attacker
from Protocol.channel import QuantumChannel
from Protocol.core import Receiver, Sender
from Protocol.errors import ValidationError


class TestEncodingTable:
    """Two bases x two bits map onto four distinct labels."""

    def test_rectilinear_labels(self) -> None:
        """Bit 0 / 1 in the rectilinear basis encode as H / V."""
        assert bb.encode(0, bb.RECTILINEAR) == 'H'
        assert bb.encode(1, bb.RECTILINEAR) == 'V'

    def test_diagonal_labels(self) -> None:
        """Bit 0 / 1 in the diagonal basis encode as D / A."""
        assert bb.encode(0, bb.DIAGONAL) == 'D'
        assert bb.encode(1, bb.DIAGONAL) == 'A'

    def test_labels_are_distinct(self) -> None:
        """Each (bit, basis) pair has its own label."""
        assert len(set(bb.LABEL_MAP.values())) == 4

    def test_matching_basis_recovers_bit(self) -> None:
        """Measuring in the encoding basis is exact."""
        for (bit, basis), label in bb.LABEL_MAP.items():
            assert bb.measure(label, basis) == bit

    def test_mismatched_basis_is_a_coin_flip(self) -> None:
        """The wrong basis gives 0 and 1 about equally often."""
        np.random.seed(7)
        outcomes = [bb.measure('H', bb.DIAGONAL) for _ in range(2000)]
        assert set(outcomes) == {0, 1}
        assert 0.4 < np.mean(outcomes) < 0.6

    def test_unknown_label_raises(self) -> None:
        """Labels outside H/V/D/A are rejected."""
        with pytest.raises(ValidationError, match="Unknown polarisation"):
            bb.measure('X', bb.RECTILINEAR)


class TestSender:

    def test_bits_length_and_values(self) -> None:
        """One uniform bit per configured photon."""
        sender = Sender(photons_size=300)
        sender.generate_random_bits()
        assert len(sender.bits) == 300
        assert set(sender.bits) <= {0, 1}

    def test_polarizations_follow_table(self) -> None:
        """Each (bit, basis) pair goes through LABEL_MAP."""
        sender = Sender(photons_size=4)
        sender.bits = [0, 1, 0, 1]
        sender.random_basis = [0, 0, 1, 1]
        sender.calculate_polarizations()
        assert sender.polarizations == ['H', 'V', 'D', 'A']
        assert sender.photons == ['H', 'V', 'D', 'A']

    def test_polarizations_need_equal_lengths(self) -> None:
        """Mismatched bits and bases raise before anything is set."""
        sender = Sender(photons_size=4)
        sender.bits = [0, 1, 0]
        sender.random_basis = [0, 0, 1, 1]
        with pytest.raises(ValidationError):
            sender.calculate_polarizations()
        assert sender.polarizations == []

    def test_send_photons_writes_channel(self) -> None:
        """The polarisation labels land on channel.photons."""
        sender = Sender(photons_size=4)
        sender.bits = [1, 1, 0, 0]
        sender.random_basis = [1, 0, 1, 0]
        sender.calculate_polarizations()
        channel = QuantumChannel()
        sender.send_photons_to_channel(channel)
        assert channel.photons == ['A', 'V', 'D', 'H']

    def test_send_photons_invalid_channel(self) -> None:
        """A partial channel keeps its photons."""
        sender = Sender(photons_size=2)
        sender.polarizations = ['H', 'V']
        bad = SimpleNamespace(photons=[])
        with pytest.raises(ValidationError):
            sender.send_photons_to_channel(bad)
        assert bad.photons == []


class TestReceiver:

    def _channel(self, photons) -> QuantumChannel:
        channel = QuantumChannel()
        channel.photons = list(photons)
        return channel

    def test_matching_bases_recover_every_bit(self) -> None:
        """With the sender's bases the receiver reads every bit back."""
        receiver = Receiver(photons_size=4)
        receiver.random_basis = [0, 0, 1, 1]
        receiver.measure_photons_from_channel(self._channel(['H', 'V', 'D', 'A']))
        assert receiver.bits == [0, 1, 0, 1]
        assert receiver.photons == ['H', 'V', 'D', 'A']

    def test_mismatched_bases_still_yield_bits(self) -> None:
        """Wrong bases still produce one binary result per photon."""
        receiver = Receiver(photons_size=4)
        receiver.random_basis = [1, 1, 0, 0]
        receiver.measure_photons_from_channel(self._channel(['H', 'V', 'D', 'A']))
        assert len(receiver.bits) == 4
        assert set(receiver.bits) <= {0, 1}

    def test_photons_beyond_basis_are_ignored(self) -> None:
        """Only as many photons as the receiver has bases are measured."""
        receiver = Receiver(photons_size=3)
        receiver.random_basis = [0, 0, 0]
        receiver.measure_photons_from_channel(self._channel(['H'] * 5))
        assert receiver.bits == [0, 0, 0]

    def test_invalid_channel_leaves_bits_untouched(self) -> None:
        """A rejected channel leaves earlier measurements in place."""
        receiver = Receiver(photons_size=2)
        receiver.random_basis = [0, 0]
        receiver.bits = [1, 1]
        with pytest.raises(ValidationError):
            receiver.measure_photons_from_channel({})
        assert receiver.bits == [1, 1]

    def test_unknown_label_leaves_bits_untouched(self) -> None:
        """A bad label aborts the whole measurement."""
        receiver = Receiver(photons_size=2)
        receiver.random_basis = [0, 0]
        with pytest.raises(ValidationError):
            receiver.measure_photons_from_channel(self._channel(['H', '?']))
        assert receiver.bits == []
        assert receiver.photons == []

    def test_non_sequence_photons_raise(self) -> None:
        """A present but non-iterable photons field raises ValidationError."""
        receiver = Receiver(photons_size=2)
        receiver.random_basis = [0, 0]
        receiver.bits = [1, 0]
        channel = SimpleNamespace(basis_used=[], photons=None, decision=None)
        with pytest.raises(ValidationError, match="photons"):
            receiver.measure_photons_from_channel(channel)
        assert receiver.bits == [1, 0]


class TestAttacker:

    def _loaded_channel(self, n: int = 200) -> tuple[Sender, QuantumChannel]:
        sender = Sender(photons_size=n)
        sender.generate_random_bits()
        sender.generate_random_basis()
        sender.calculate_polarizations()
        channel = QuantumChannel()
        sender.send_photons_to_channel(channel)
        return sender, channel

    def test_intercept_replaces_photons(self) -> None:
        """Eve puts her own re-encoded photons on the channel."""
        np.random.seed(11)
        sender, channel = self._loaded_channel()
        eve = Attacker(photons_size=200)
        eve.intercept_photons_from_channel(channel)

        assert eve.intercepted_photons == sender.polarizations
        assert len(channel.photons) == 200
        assert channel.photons == [
            bb.encode(bit, basis) for bit, basis in zip(eve.bits, eve.random_basis)
        ]
        # Roughly half her bases are wrong, so some photons must change
        assert channel.photons != sender.polarizations

    def test_intercept_records_transcript(self) -> None:
        """The re-emitted photons are posted under the attacker's name."""
        _, channel = self._loaded_channel(20)
        Attacker(photons_size=20).intercept_photons_from_channel(channel)
        assert channel.latest("photons").origin == "attacker"

    def test_intercept_invalid_channel(self) -> None:
        """A rejected channel leaves Eve's state empty."""
        eve = Attacker()
        with pytest.raises(ValidationError):
            eve.intercept_photons_from_channel(SimpleNamespace(photons=['H']))
        assert eve.intercepted_photons == []

    def test_basis_intercepts_copy_announcements(self) -> None:
        """Each intercept copies the basis currently on the channel."""
        eve = Attacker()
        channel = QuantumChannel()
        channel.basis_used = [0, 1, 1]
        eve.intercept_sender_basis_from_channel(channel)
        channel.basis_used = [1, 1, 0]
        eve.intercept_receiver_basis_from_channel(channel)
        assert eve.sender_basis == [0, 1, 1]
        assert eve.receiver_basis == [1, 1, 0]

    def test_basis_intercept_invalid_channel(self) -> None:
        """Rejected channels leave both copied bases empty."""
        eve = Attacker()
        with pytest.raises(ValidationError):
            eve.intercept_sender_basis_from_channel({})
        with pytest.raises(ValidationError):
            eve.intercept_receiver_basis_from_channel({})
        assert eve.sender_basis == []
        assert eve.receiver_basis == []

    def test_guess_key_sifts_on_public_bases(self) -> None:
        """Eve keeps her bits where the announced bases agree."""
        eve = Attacker()
        eve.bits = [1, 0, 1, 1]
        eve.sender_basis = [0, 1, 0, 1]
        eve.receiver_basis = [0, 0, 0, 1]
        assert eve.guess_key() == [1, 1, 1]

    def test_basis_intercept_non_sequence_field(self) -> None:
        """A None basis on an otherwise valid channel is a ValidationError."""
        eve = Attacker()
        channel = SimpleNamespace(basis_used=None, photons=[], decision=None)
        with pytest.raises(ValidationError, match="basis_used"):
            eve.intercept_sender_basis_from_channel(channel)
        assert eve.sender_basis == []
