"""Command-line entry point: print the SHA-256 digest of one message.

    sha256-digest "message"
    python sha256_cli.py --encoding codepoint "message"
"""
import argparse
import logging
import os
import sys

from sha256 import ENCODINGS, load_default_encoding, sha256


def build_parser():
    parser = argparse.ArgumentParser(description='Print the SHA-256 hex digest of MESSAGE.')
    parser.add_argument('message', help='Message to hash')
    parser.add_argument('--encoding', choices=ENCODINGS, default=None,
                        help='How characters become octets (default: $SHA256_ENCODING or utf-8). '
                             'The utf-8 default hashes the argument bytes; codepoint keeps the legacy '
                             'one-octet-per-character hashing, and the two differ on non-ASCII input')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug output to stderr')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s', stream=sys.stderr)
    encoding = args.encoding if args.encoding is not None else load_default_encoding()
    message = args.message
    if encoding == 'utf-8':
        # undo surrogateescape so undecodable argv bytes are hashed as given
        message = os.fsencode(message)
    print(sha256(message, encoding))
    return 0


if __name__ == '__main__':
    sys.exit(main())
