"""The Command Line Interface for the utility.

Three subcommands: `keygen` writes a signed key pair, `encrypt` verifies a public key's identity and encrypts a
file or stdin, `decrypt` reverses it with the private key.

Typical usage example:

    rsastream keygen -b 1024
    rsastream encrypt -i notes.txt -o notes.enc
    python -m rsastream decrypt -i notes.enc
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import contextlib
import getpass
import logging
import os
import pathlib
import sys
import typing

import rsastream
from rsastream import keygen as kg
from rsastream.randstate import RandState


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "keygen":
        HelpData("Generates an RSA public/private key pair."),
    "encrypt":
        HelpData("Encrypts data using RSA encryption."),
    "decrypt":
        HelpData("Decrypts data using RSA decryption."),
    "bits":
        HelpData(
            description="Minimum bits needed for public key n.",
            format=int,
            default=256,
        ),
    "iters":
        HelpData(
            description="Miller-Rabin iterations for testing primes.",
            format=int,
            default=50,
        ),
    "seed":
        HelpData(
            description="Random seed for testing. Defaults to the current time.",
            format=int,
        ),
    "public_key":
        HelpData(
            description="Public key file.",
            format=pathlib.Path,
            default=pathlib.Path("rsa.pub"),
        ),
    "private_key":
        HelpData(
            description="Private key file.",
            format=pathlib.Path,
            default=pathlib.Path("rsa.priv"),
        ),
    "pem":
        HelpData(
            description="Also export the public key as PKCS#1 PEM to this file.",
            format=pathlib.Path,
        ),
    "infile":
        HelpData(
            description="Input file.",
            format=pathlib.Path,
        ),
    "outfile":
        HelpData(
            description="Output file.",
            format=pathlib.Path,
        ),
}

verbose = argparse.ArgumentParser(add_help=False)
verbose.add_argument("--verbose", "-v", action="store_true", help="Display verbose program output.")
streams = argparse.ArgumentParser(add_help=False)
streams.add_argument("--infile", "-i", type=help_dict["infile"].format, help=help_dict["infile"].description)
streams.add_argument("--outfile", "-o", type=help_dict["outfile"].format, help=help_dict["outfile"].description)
corep = argparse.ArgumentParser(prog="rsastream")
corep.add_argument("--version", action="version", version=f"%(prog)s {rsastream.__version__}")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands", required=True)

keygen = commands.add_parser("keygen", parents=[verbose], help=help_dict["keygen"].description)
keygen.add_argument("--bits", "-b", type=help_dict["bits"].format, default=help_dict["bits"].default,
                    help=help_dict["bits"].description)
keygen.add_argument("--iters", "-i", type=help_dict["iters"].format, default=help_dict["iters"].default,
                    help=help_dict["iters"].description)
keygen.add_argument("--public_key", "-n", type=help_dict["public_key"].format,
                    default=help_dict["public_key"].default, help=help_dict["public_key"].description)
keygen.add_argument("--private_key", "-d", type=help_dict["private_key"].format,
                    default=help_dict["private_key"].default, help=help_dict["private_key"].description)
keygen.add_argument("--seed", "-s", type=help_dict["seed"].format, help=help_dict["seed"].description)
keygen.add_argument("--pem", type=help_dict["pem"].format, help=help_dict["pem"].description)

encrypt = commands.add_parser("encrypt", parents=[verbose, streams], help=help_dict["encrypt"].description)
encrypt.add_argument("--public_key", "-n", type=help_dict["public_key"].format,
                     default=help_dict["public_key"].default, help=help_dict["public_key"].description)

decrypt = commands.add_parser("decrypt", parents=[verbose, streams], help=help_dict["decrypt"].description)
decrypt.add_argument("--private_key", "-n", type=help_dict["private_key"].format,
                     default=help_dict["private_key"].default, help=help_dict["private_key"].description)


def describe(name: str, value: int) -> str:
    return f"{name} ({value.bit_length()} bits) = {value}"


def open_input(path: pathlib.Path | None, mode: str) -> typing.ContextManager[typing.IO]:
    """Open `path`, or fall back to stdin in the matching mode without closing it."""
    if path is not None:
        return open(path, mode, encoding=None if "b" in mode else "ascii")
    return contextlib.nullcontext(sys.stdin.buffer if "b" in mode else sys.stdin)


def open_output(path: pathlib.Path | None, mode: str) -> typing.ContextManager[typing.IO]:
    """Open `path`, or fall back to stdout in the matching mode without closing it."""
    if path is not None:
        return open(path, mode, encoding=None if "b" in mode else "ascii")
    return contextlib.nullcontext(sys.stdout.buffer if "b" in mode else sys.stdout)


def run_keygen(args: argparse.Namespace) -> int:
    username = getpass.getuser()
    if args.bits < kg.MIN_BITS:
        print(f"Error: key size must be at least {kg.MIN_BITS} bits.", file=sys.stderr)
        return 1
    try:
        rsastream.b62_dec(username)
    except ValueError:
        print(f"Error: username {username!r} is not made of letters and digits only.", file=sys.stderr)
        return 1
    with RandState(args.seed) as rng:
        pub, priv, p, q = rsastream.generate_key_pair(args.bits, args.iters, rng, username, expose_primes=True)

    with open(args.public_key, "w", encoding="ascii") as f:
        pub.write(f)
    # Private key is owner read/write only.
    fd = os.open(args.private_key, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="ascii") as f:
        os.fchmod(f.fileno(), 0o600)
        priv.write(f)
    if args.pem is not None:
        pub.export_pem(args.pem)

    if args.verbose:
        print(f"user = {username}")
        print(describe("s", pub.signature))
        print(describe("p", p))
        print(describe("q", q))
        print(describe("n", pub.mod))
        print(describe("e", pub.expo))
        print(describe("d", priv.expo))
    return 0


def run_encrypt(args: argparse.Namespace) -> int:
    with open(args.public_key, "r", encoding="ascii") as f:
        pub = rsastream.RSAPubKey.read(f)
    if args.verbose:
        print(f"user = {pub.username}")
        print(describe("s", pub.signature))
        print(describe("n", pub.mod))
        print(describe("e", pub.expo))
    if not pub.verify_identity():
        print("Error: the signature was not verified.", file=sys.stderr)
        return 1
    with open_input(args.infile, "rb") as infile, open_output(args.outfile, "w") as outfile:
        pub.encrypt_stream(infile, outfile)
    return 0


def run_decrypt(args: argparse.Namespace) -> int:
    with open(args.private_key, "r", encoding="ascii") as f:
        priv = rsastream.RSAPrivKey.read(f)
    if args.verbose:
        print(describe("n", priv.mod))
        print(describe("d", priv.expo))
    with open_input(args.infile, "r") as infile, open_output(args.outfile, "wb") as outfile:
        priv.decrypt_stream(infile, outfile)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Core CLI entrypoint."""
    args = corep.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s:%(name)s: %(message)s",
                        stream=sys.stderr)
    match args.subcommand:
        case "keygen":
            return run_keygen(args)
        case "encrypt":
            return run_encrypt(args)
        case "decrypt":
            return run_decrypt(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
