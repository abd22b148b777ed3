# -*- coding: utf-8 -*-
"""
Experiment Manager (Orchestrator)
---------------------------------
File: Protocol/manager.py
"""

from dataclasses import dataclass

from config.logging_config import get_logger
from Protocol import core as bb
from Protocol.attacker import Attacker
from Protocol.channel import QuantumChannel

log = get_logger("qkd.experiment")


@dataclass
class SessionSummary:
    """Outcome of one run, as seen by both parties."""
    photons_size: int
    sender_key_length: int
    receiver_key_length: int
    keys_match: bool
    sender_decision: bool | None
    receiver_decision: bool | None
    eve_active: bool = False


class BB84Experiment:
    def __init__(self, photons_size=None, min_shared_key_length=None):
        self.photons_size = photons_size
        self.min_shared_key_length = min_shared_key_length
        self.sender = None
        self.receiver = None
        self.channel = None

    def build_phase(self):
        """Initialize the entities."""
        self.sender = bb.Sender(self.photons_size, self.min_shared_key_length)
        self.receiver = bb.Receiver(self.photons_size, self.min_shared_key_length)
        self.channel = QuantumChannel()

    def transmission_phase(self):
        """
        The Quantum Transmission Phase.
        1. Sender draws bits and bases and encodes photons.
        2. Photons go onto the channel.
        3. Receiver picks its bases and measures.
        """
        self.sender.generate_random_bits()
        self.sender.generate_random_basis()
        self.sender.calculate_polarizations()
        self.sender.send_photons_to_channel(self.channel)

        self.intercept_photons()

        self.receiver.generate_random_basis()
        self.receiver.measure_photons_from_channel(self.channel)

    def basis_exchange_phase(self):
        """Each side announces its bases and reads the other's."""
        self.sender.send_basis_to_channel(self.channel)
        self.intercept_sender_basis()
        self.receiver.read_basis_from_channel(self.channel)

        self.receiver.send_basis_to_channel(self.channel)
        self.intercept_receiver_basis()
        self.sender.read_basis_from_channel(self.channel)

    def key_generation_phase(self):
        """Sifting: both sides discard mismatched positions."""
        self.receiver.generate_shared_key()
        self.sender.generate_shared_key()

    def decision_phase(self):
        """Both sides decide independently, then exchange decisions."""
        self.sender.decide()
        self.receiver.decide()

        self.sender.send_decision_to_channel(self.channel)
        self.receiver.read_decision_from_channel(self.channel)

        self.receiver.send_decision_to_channel(self.channel)
        self.sender.read_decision_from_channel(self.channel)

    # Hooks for an eavesdropper; the honest run leaves the channel alone.
    def intercept_photons(self):
        pass

    def intercept_sender_basis(self):
        pass

    def intercept_receiver_basis(self):
        pass

    def summarise(self):
        sender_key = self.sender.get_shared_key()
        receiver_key = self.receiver.get_shared_key()
        return SessionSummary(
            photons_size=self.sender.photons_size,
            sender_key_length=len(sender_key),
            receiver_key_length=len(receiver_key),
            keys_match=sender_key == receiver_key,
            sender_decision=self.sender.decision,
            receiver_decision=self.receiver.decision,
            eve_active=False,
        )

    def execute(self):
        """Runs the full protocol in order."""
        self.build_phase()
        self.transmission_phase()
        self.basis_exchange_phase()
        self.key_generation_phase()
        self.decision_phase()
        summary = self.summarise()
        log.info(
            f"Session complete | photons={summary.photons_size} | "
            f"keys={summary.sender_key_length}/{summary.receiver_key_length} | "
            f"match={summary.keys_match}"
        )
        return summary


class EveBB84Experiment(BB84Experiment):
    def build_phase(self):
        super().build_phase()
        self.eve = Attacker(self.photons_size)

    def intercept_photons(self):
        self.eve.intercept_photons_from_channel(self.channel)

    def intercept_sender_basis(self):
        self.eve.intercept_sender_basis_from_channel(self.channel)

    def intercept_receiver_basis(self):
        self.eve.intercept_receiver_basis_from_channel(self.channel)

    def summarise(self):
        summary = super().summarise()
        summary.eve_active = True
        return summary
