#!/usr/bin/env python3

# RS(255,223) stream tool: reads data or codewords, encodes or decodes them
# and writes the resulting 255-byte blocks

# examples:
#   python -m ccsds_rs.model.rs_cli -e -i data.bin -o codewords.bin
#   python -m ccsds_rs.model.rs_cli -d -t -c < received.hex > corrected.hex
#   python -m ccsds_rs.model.rs_cli -d -x -E 3,17,200 -i frame.bin

# Notes:
# - encode consumes 223 bytes per block, decode consumes 255 bytes per block
# - in text mode every pair of alphanumeric characters is one hex byte,
#   anything else is skipped; Ctrl-D ends the input
# - decode results always go to stderr, progress messages only with -v

import argparse
import io
import sys
from contextlib import ExitStack
from enum import IntEnum
from typing import BinaryIO, List, Optional, TextIO

from ccsds_rs.model.helpers import format_hex_lines, hex_dump, pad_to_block
from ccsds_rs.model.reed_solomon import (
    UNCORRECTABLE,
    k as RS_K,
    n as RS_N,
    rs_decode_block,
    rs_encode_block,
    t as RS_T,
)

CTRL_D = "\x04"


class ExitCode(IntEnum):
    # sysexits.h
    OK = 0
    USAGE = 64          # command line usage error
    DATAERR = 65        # data format error
    NOINPUT = 66        # cannot open input
    CANTCREAT = 73      # can't create (user) output file
    IOERR = 74          # input/output error


class BinaryBlockReader:
    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def read(self, count: int, skipping: bool = False) -> bytes:
        # read up to count bytes, short only at end of stream
        out = bytearray()
        while len(out) < count:
            chunk = self.stream.read(count - len(out))
            if not chunk:
                break
            out += chunk
        return bytes(out)


class HexTextBlockReader:
    def __init__(self, stream: TextIO, verbose: bool = False):
        self.stream = stream
        self.verbose = verbose

    def read(self, count: int, skipping: bool = False) -> bytes:
        # read up to count hex-encoded bytes, short at end of stream or Ctrl-D
        out = bytearray()
        pair = ""
        while len(out) < count:
            ch = self.stream.read(1)
            if not ch or ch == CTRL_D:
                break
            if not ch.isalnum():
                continue
            pair += ch
            if len(pair) < 2:
                continue
            try:
                value = int(pair, 16)
            except ValueError:
                print(f'Unrecognised sequence "{pair}"', file=sys.stderr)
            else:
                if self.verbose and skipping:
                    print(f"Skipping byte {len(out) + 1}/{count}: {value}", file=sys.stderr)
                elif self.verbose:
                    print(f"Decoded {len(out) + 1}/{count}:{value}", file=sys.stderr)
                out.append(value)
            pair = ""
        return bytes(out)


def _write_block(stream: BinaryIO, data: bytes, text_mode: bool) -> None:
    if text_mode:
        stream.write(format_hex_lines(data).encode("ascii"))
    else:
        stream.write(data)
    stream.flush()


def _parse_erasures(spec: Optional[str]) -> List[int]:
    if not spec:
        return []
    # range, count and duplicate checks are left to the decoder
    return [int(token, 0) for token in spec.split(",") if token.strip()]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Encode or decode CCSDS RS(255,223) blocks.")
    mode = p.add_mutually_exclusive_group(required=True)
    mode.add_argument("-e", "--encode", action="store_true",
                      help=f"Read {RS_K}-byte data blocks and write {RS_N}-byte codewords.")
    mode.add_argument("-d", "--decode", action="store_true",
                      help=f"Read {RS_N}-byte blocks, correct them and write them back out.")
    framing = p.add_mutually_exclusive_group()
    framing.add_argument("-t", "--text", action="store_true",
                         help="Treat input and output as hex encoded text.")
    framing.add_argument("-b", "--binary", action="store_true",
                         help="Treat input and output as raw bytes (default).")
    p.add_argument("-x", "--dual-basis", action="store_true",
                   help="Blocks are in the CCSDS dual basis representation.")
    p.add_argument("-c", "--continuous", action="store_true",
                   help="Keep processing blocks until the input ends.")
    p.add_argument("-p", "--print-input", action="store_true",
                   help="Echo every parsed input block to the output before the result.")
    p.add_argument("-n", "--skip", type=int, default=0, metavar="N",
                   help="Discard N preamble bytes before every block.")
    p.add_argument("-i", "--input", metavar="PATH",
                   help="Input file ('-' or absent for stdin).")
    p.add_argument("-o", "--output", metavar="PATH",
                   help="Output file ('-' or absent for stdout).")
    p.add_argument("-E", "--erasures", metavar="LIST",
                   help="Comma separated erasure positions applied to every decoded block.")
    p.add_argument("--pad", action="store_true",
                   help=f"Zero-pad a short final data block to {RS_K} bytes when encoding.")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Progress messages on stderr (-vv for per-byte detail).")
    return p


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    verbose = args.verbose >= 1
    very_verbose = args.verbose >= 2

    if args.skip < 0:
        print("Invalid ignore preamble count", file=sys.stderr)
        return ExitCode.USAGE
    try:
        erasures = _parse_erasures(args.erasures)
    except ValueError as exc:
        print(f"Invalid erasure list: {exc}", file=sys.stderr)
        return ExitCode.USAGE
    if erasures and args.encode:
        print("Erasures only apply to decoding", file=sys.stderr)
        return ExitCode.USAGE

    input_name = args.input if args.input not in (None, "-") else None
    output_name = args.output if args.output not in (None, "-") else None
    framing = "in hex text" if args.text else "in byte stream"

    with ExitStack() as stack:
        try:
            if input_name is None:
                in_stream = sys.stdin.buffer
            else:
                in_stream = stack.enter_context(open(input_name, "rb"))
        except OSError as exc:
            print(f"Error opening {input_name}: {exc}", file=sys.stderr)
            return ExitCode.NOINPUT

        try:
            if output_name is None:
                out_stream = sys.stdout.buffer
            else:
                out_stream = stack.enter_context(open(output_name, "wb"))
        except OSError as exc:
            print(f"Error opening {output_name}: {exc}", file=sys.stderr)
            return ExitCode.CANTCREAT

        if args.text:
            text_in = io.TextIOWrapper(in_stream, encoding="latin-1", newline="")
            # leave the underlying stream to its owner
            stack.callback(text_in.detach)
            reader = HexTextBlockReader(text_in, verbose=very_verbose)
        else:
            reader = BinaryBlockReader(in_stream)

        need = RS_K if args.encode else RS_N
        blocks = 0
        corrected = 0
        failures = 0

        while True:
            try:
                if args.skip > 0:
                    if verbose:
                        print(f"Ignoring {args.skip} bytes {framing}", file=sys.stderr)
                    preamble = reader.read(args.skip, skipping=True)
                    if len(preamble) < args.skip:
                        if blocks and args.continuous:
                            break
                        print(f"Input ended inside the {args.skip}-byte preamble", file=sys.stderr)
                        return ExitCode.DATAERR

                if verbose:
                    print(f"Waiting for {need} bytes {framing}", file=sys.stderr)
                data = reader.read(need)
            except OSError as exc:
                print(f"Error reading from {input_name or 'stdin'}: {exc}", file=sys.stderr)
                return ExitCode.IOERR

            if not data and blocks and args.continuous:
                break
            if len(data) < need:
                if args.encode and args.pad and data:
                    data = pad_to_block(data, RS_K)
                else:
                    print(f"Expected {need} bytes, got {len(data)}", file=sys.stderr)
                    return ExitCode.DATAERR

            try:
                if args.print_input:
                    if verbose:
                        print("Input parsed:", file=sys.stderr)
                    _write_block(out_stream, data, args.text)

                if args.encode:
                    if verbose:
                        print("Encoding ...", file=sys.stderr)
                    result = rs_encode_block(data, dual_basis=args.dual_basis)
                    if verbose:
                        print("Encoded.", file=sys.stderr)
                else:
                    if verbose:
                        print("Decoding ...", file=sys.stderr)
                    block = bytearray(data)
                    located = list(erasures)
                    try:
                        count = rs_decode_block(block, located, dual_basis=args.dual_basis)
                    except ValueError as exc:
                        print(f"Invalid erasure list: {exc}", file=sys.stderr)
                        return ExitCode.USAGE
                    if count != UNCORRECTABLE:
                        corrected += count
                        print(f"Decoded. {count} errors corrected.", file=sys.stderr)
                        if verbose and located:
                            print(f"Corrected positions: {sorted(located)}", file=sys.stderr)
                    else:
                        failures += 1
                        print(f"Unrecoverable, errors >{RS_T}.", file=sys.stderr)
                    result = bytes(block)

                if very_verbose:
                    print(hex_dump(data, label="in"), file=sys.stderr)
                    print(hex_dump(result, label="out"), file=sys.stderr)

                _write_block(out_stream, result, args.text)
            except OSError as exc:
                print(f"Error writing to {output_name or 'stdout'}: {exc}", file=sys.stderr)
                return ExitCode.CANTCREAT

            blocks += 1
            if not args.continuous:
                break

    if verbose:
        print(f"{blocks} block(s) processed, {corrected} symbol(s) corrected, "
              f"{failures} uncorrectable.", file=sys.stderr)
    return ExitCode.OK


if __name__ == "__main__":
    raise SystemExit(main())
