from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from loralink_compost.codecs.numeric import (
    decode16s,
    decode16u,
    decode_temp,
    decode_volts,
    encode16s,
    encode16u,
    encode_temp,
    encode_volts,
    f2sflt16,
    f2uflt16,
    sflt16_to_float,
    uflt16_to_float,
)
from loralink_compost.config import DriverSpec, LoggingSpec, load_driverspec
from loralink_compost.protocol import Measurements, create_format
from loralink_compost.protocol.measurement import FIELDS_BY_KEY
from loralink_compost.runtime.clock import RealClock
from loralink_compost.runtime.logging import JsonlLogger
from loralink_compost.vectors import VectorDriver, check_fixtures, format_hex, format_measurement

_NUMERIC_CODECS = {
    "uflt16": f2uflt16,
    "sflt16": f2sflt16,
    "s16": encode16s,
    "u16": encode16u,
    "volts": encode_volts,
    "temp": encode_temp,
}

_NUMERIC_DECODERS = {
    "uflt16": uflt16_to_float,
    "sflt16": sflt16_to_float,
    "s16": decode16s,
    "u16": decode16u,
    "volts": decode_volts,
    "temp": decode_temp,
}


def _load_spec(args: argparse.Namespace) -> DriverSpec:
    spec = load_driverspec(args.config) if args.config else DriverSpec()
    if args.run_id:
        spec = replace(spec, run_id=args.run_id)
    if args.log_dir:
        spec = replace(spec, logging=LoggingSpec(out_dir=args.log_dir))
    if args.banner:
        spec = replace(spec, banner=True)
    spec.validate()
    return spec


def _run_vectors(args: argparse.Namespace) -> int:
    spec = _load_spec(args)
    message_format = create_format(spec.format)

    logger = None
    if spec.logging.out_dir:
        logger = JsonlLogger(
            spec.logging.out_dir,
            spec.run_id,
            message_format.format_id,
            clock=RealClock(),
        )
        logger.log_run_start(spec, message_format)

    driver = VectorDriver(
        message_format,
        out=sys.stdout,
        err=sys.stderr,
        logger=logger,
        banner=spec.banner,
    )
    try:
        if args.input:
            with Path(args.input).open("r", encoding="utf-8") as fh:
                status = driver.run(fh)
        else:
            status = driver.run(sys.stdin)
    finally:
        if logger:
            logger.close()
    return status


def _run_encode(args: argparse.Namespace) -> int:
    record = Measurements()
    values = {
        "Vbat": args.vbat,
        "Vbus": args.vbus,
        "Boot": args.boot,
        "CompostTemp": args.compost_temp,
    }
    for key, value in values.items():
        if value is not None:
            record.set(FIELDS_BY_KEY[key], value)
    message_format = create_format(DriverSpec().format)
    payload = message_format.encode(record)
    print(format_measurement(record))
    print(format_hex(payload))
    return 0


def _run_decode(args: argparse.Namespace) -> int:
    payload = bytes.fromhex(" ".join(args.payload))
    message_format = create_format(DriverSpec().format)
    record = message_format.decode(payload)
    print(format_measurement(record))
    return 0


def _run_check(args: argparse.Namespace) -> int:
    text = Path(args.fixtures).read_text(encoding="utf-8")
    message_format = create_format(DriverSpec().format)
    mismatches = check_fixtures(text, message_format)
    for mismatch in mismatches:
        print(
            f"{args.fixtures}:{mismatch.line_no}: {mismatch.reason}: "
            f"expected {mismatch.expected!r}, got {mismatch.actual!r}",
            file=sys.stderr,
        )
    return 1 if mismatches else 0


def _run_numeric(args: argparse.Namespace) -> int:
    if args.decode:
        print(_NUMERIC_DECODERS[args.codec](int(args.value, 0)))
        return 0
    encoded = _NUMERIC_CODECS[args.codec](float(args.value))
    print(f"0x{encoded:04x}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="loralink_compost")
    sub = parser.add_subparsers(dest="cmd", required=True)

    vectors = sub.add_parser("vectors", help="generate test vectors from name/value tuples")
    vectors.add_argument("--input", help="read tuples from a file instead of stdin")
    vectors.add_argument("--config", help="driver spec (.json/.yaml)")
    vectors.add_argument("--log-dir", help="write a JSONL event log to this directory")
    vectors.add_argument("--run-id")
    vectors.add_argument("--banner", action="store_true", help="print the input prompt first")
    vectors.set_defaults(func=_run_vectors)

    encode = sub.add_parser("encode", help="encode one record")
    encode.add_argument("--vbat", type=float)
    encode.add_argument("--vbus", type=float)
    encode.add_argument("--boot", type=int)
    encode.add_argument("--compost-temp", type=float)
    encode.set_defaults(func=_run_encode)

    decode = sub.add_parser("decode", help="decode a hex payload")
    decode.add_argument("payload", nargs="+", help="payload bytes as hex")
    decode.set_defaults(func=_run_decode)

    check = sub.add_parser("check", help="verify a test vector transcript")
    check.add_argument("--fixtures", required=True)
    check.set_defaults(func=_run_check)

    numeric = sub.add_parser("numeric", help="show a single 16-bit numeric encoding")
    numeric.add_argument("codec", choices=sorted(_NUMERIC_CODECS))
    numeric.add_argument("value", help="value to encode, or the raw 16-bit word with --decode")
    numeric.add_argument(
        "--decode", action="store_true", help="decode a raw word (e.g. 0xf800) instead"
    )
    numeric.set_defaults(func=_run_numeric)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
