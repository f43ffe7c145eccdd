#!/usr/bin/env python3
"""Look up the address for a Brazilian postal code (CEP).

Usage
-----
::

    python scripts/lookup_cep.py 01001-000
    ESTOQUE_CEP_BASE_URL=https://viacep.com.br/ws python scripts/lookup_cep.py 01001000

Prints the address as JSON. Exit status is 2 for malformed input, 1 when
the code is unknown or the lookup fails.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import aiohttp

from pyestoque import CepLookup, EstoqueConfig
from pyestoque.exceptions import EstoqueNotFoundError, EstoqueTransportError, EstoqueValidationError


async def main() -> int:
    parser = argparse.ArgumentParser(description="Resolve a CEP to an address via the lookup service.")
    parser.add_argument("cep", help="Postal code, with or without punctuation")
    parser.add_argument("--raw", action="store_true", help="Print the service payload unchanged")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = EstoqueConfig.from_env()
    async with aiohttp.ClientSession() as http_session:
        lookup = CepLookup(config, http_session)
        try:
            address = await lookup.lookup(args.cep)
        except EstoqueValidationError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        except (EstoqueNotFoundError, EstoqueTransportError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1

    payload = address.model_dump() if args.raw else {
        "cep": address.cep,
        "street": address.street,
        "neighborhood": address.neighborhood,
        "city": address.city,
        "state": address.state,
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
