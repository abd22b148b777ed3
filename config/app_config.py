"""
config/app_config.py
Protocol constants shared by every communicator.

Default values can be overridden per run from the command line
(see run_protocol.py) or per instance via constructor arguments.
"""

PHOTONS_SIZE: int = 100            # basis / bit / photon positions per run
MIN_SHARED_KEY_LENGTH: int = 40    # sifted key length required to accept a run
