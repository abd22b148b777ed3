# -*- coding: utf-8 -*-
"""
Attacker (Eve: Intercept-Resend)
--------------------------------
File: Protocol/attacker.py
"""

import numpy as np

from config.logging_config import get_logger
from Protocol import core as bb
from Protocol.channel import post, read_sequence

log = get_logger("qkd.attacker")


class Attacker(bb.Receiver):
    """
    Eve is technically a Receiver who also acts as a Sender.
    She measures every photon on the channel in her own random basis and
    puts freshly encoded photons back in their place. Both basis
    announcements are copied as they pass so she can sift a guess of the key.
    """

    role = "attacker"

    def __init__(self, photons_size=None):
        super().__init__(photons_size)
        self.intercepted_photons = []
        self.sender_basis = []
        self.receiver_basis = []

    def intercept_photons_from_channel(self, channel):
        self.is_valid_channel(channel)
        photons = read_sequence(channel, "photons")

        # Her basis has to cover every photon actually sent
        basis = np.random.randint(0, len(bb.BASES), len(photons)).tolist()
        measured = [bb.measure(label, b) for label, b in zip(photons, basis)]

        self.intercepted_photons = photons
        self.photons = list(photons)
        self.random_basis = basis
        self.bits = measured

        # Re-emit in HER basis: a wrong guess leaves the receiver a coin flip
        resent = [bb.encode(bit, b) for bit, b in zip(measured, basis)]
        post(channel, "photons", resent, self.role)

        altered = sum(1 for a, b in zip(photons, resent) if a != b)
        log.info(f"Intercepted {len(resent)} photons, {altered} re-emitted in a different state")

    def intercept_sender_basis_from_channel(self, channel):
        self.is_valid_channel(channel)
        self.sender_basis = read_sequence(channel, "basis_used")

    def intercept_receiver_basis_from_channel(self, channel):
        self.is_valid_channel(channel)
        self.receiver_basis = read_sequence(channel, "basis_used")

    def guess_key(self):
        """Eve's bits at the positions the two parties will keep."""
        return [
            bit
            for s, r, bit in zip(self.sender_basis, self.receiver_basis, self.bits)
            if s == r
        ]
