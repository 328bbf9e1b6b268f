"""
A tool to create the RSA key pair used to issue and validate the example API's tokens.

Prints `.env` lines that `demoapi.config.load_settings` reads.
"""

import argparse
import logging

from demoapi.keys import generate_key_pair

logging.basicConfig(level="INFO")
logger = logging.getLogger()


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--key-size", type=int, default=2048)
    parser.add_argument("--issuer", default="https://localhost")
    parser.add_argument("--audience", default="demoapi")
    args = parser.parse_args()

    logger.info("Generating %d bit RSA key pair", args.key_size)
    private_key, public_key = generate_key_pair(args.key_size)
    print(f"JWT_PRIVATE_KEY={private_key}")
    print(f"JWT_PUBLIC_KEY={public_key}")
    print(f"JWT_ISSUER={args.issuer}")
    print(f"JWT_AUDIENCE={args.audience}")


if __name__ == "__main__":
    main()
