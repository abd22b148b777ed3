# -*- coding: utf-8 -*-
"""
BB84 Session Runner
-------------------
File: run_protocol.py

    python run_protocol.py --photons 200 --min-key-length 80
    python run_protocol.py --eve
"""

import argparse

from config import app_config
from config.logging_config import configure_logging, get_logger
from Protocol.manager import BB84Experiment, EveBB84Experiment

log = get_logger("qkd.experiment")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="BB84 key distribution session")
    parser.add_argument(
        "--photons",
        type=_positive_int,
        default=app_config.PHOTONS_SIZE,
        help="photons sent per run (default: %(default)s)",
    )
    parser.add_argument(
        "--min-key-length",
        type=_positive_int,
        default=app_config.MIN_SHARED_KEY_LENGTH,
        help="sifted key length required to accept (default: %(default)s)",
    )
    parser.add_argument(
        "--eve",
        action="store_true",
        help="put an intercept-resend eavesdropper on the channel",
    )
    parser.add_argument("--verbose", action="store_true", help="log every protocol step")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    log.debug(f"Arguments: {vars(args)}")

    experiment_cls = EveBB84Experiment if args.eve else BB84Experiment
    print(f"--- Running BB84 Session (N={args.photons}, eve={'on' if args.eve else 'off'}) ---")

    experiment = experiment_cls(args.photons, args.min_key_length)
    summary = experiment.execute()

    print(f"Sender key length:   {summary.sender_key_length}")
    print(f"Receiver key length: {summary.receiver_key_length}")
    print(f"Keys identical:      {summary.keys_match}")
    print(f"Sender decision:     {'ACCEPT' if summary.sender_decision else 'REJECT'}")
    print(f"Receiver decision:   {'ACCEPT' if summary.receiver_decision else 'REJECT'}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
