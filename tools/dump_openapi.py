"""
A tool to write the example API's OpenAPI document to a file.
"""

import argparse
import json
import logging

from demoapi.main import create_app

logging.basicConfig(level="DEBUG")
logger = logging.getLogger()


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("output", nargs="?", default="openapi.json")
    args = parser.parse_args()

    schema = create_app().openapi()
    with open(args.output, "w") as f:
        json.dump(schema, f, indent=2)
    logger.info("Wrote %d paths to %s", len(schema.get("paths", {})), args.output)


if __name__ == "__main__":
    main()
