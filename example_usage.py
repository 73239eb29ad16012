#!/usr/bin/env python3
"""
Basic usage examples for the Freemius API client library.

Credentials are read from the command line:

    python example_usage.py developer 1234 pk_... sk_... [--sandbox]
"""

import json
import logging
import sys

from freemius_client import (
    ApiError,
    ErrorKind,
    FreemiusClient,
    FreemiusClientError,
    RateLimitExhaustedError,
)


def main():
    """Run basic usage examples."""
    args = [arg for arg in sys.argv[1:] if not arg.startswith('--')]
    if len(args) != 4:
        print(__doc__)
        return 2

    scope, scope_id, public_key, secret_key = args
    sandbox = '--sandbox' in sys.argv
    if '--debug' in sys.argv:
        logging.basicConfig(level=logging.DEBUG)

    print("=== Freemius Python Client Usage Examples ===\n")

    try:
        client = FreemiusClient(scope, int(scope_id), public_key, secret_key, sandbox=sandbox)
    except (FreemiusClientError, ValueError) as e:
        print(f"Invalid credentials: {e}")
        return 1

    with client:
        print(f"1. Client created for: {client.base_url}")
        print(f"   Scope: {client.scope.value} {scope_id}")
        print(f"   Public key: {public_key[:8]}...\n")

        try:
            # Example 1: connectivity
            print("2. Testing connectivity...")
            print(f"   {'✓ pong' if client.test() else '✗ unexpected reply'}\n")

            # Example 2: clock skew
            print("3. Synchronizing clock with the API server...")
            diff = client.sync_clock()
            print(f"   Local clock is {diff}s ahead of the server\n")

            # Example 3: signed request headers
            print("4. Signing a request...")
            signed = client.signer.sign('GET', client.canonize_path('/plugins.json'))
            for name, value in signed.as_dict().items():
                print(f"   {name}: {value}")
            print()

            # Example 4: authenticated GET
            print("5. Listing plugins...")
            plugins = client.get('/plugins.json', {'fields': 'id,slug,title', 'count': 5})
            print(json.dumps(plugins, indent=2))
            print()

            # Example 5: pre-signed URL
            print("6. Building a signed URL...")
            print(f"   {client.get_signed_url('/plugins.json', {'count': 1})}\n")

            # Example 6: result-style error handling
            print("7. Requesting a missing resource...")
            outcome = client.transport.send(
                'GET',
                '/v1' + client.canonize_path('/plugins/0.json'),
                headers=client.signer.sign('GET', client.canonize_path('/plugins/0.json')).as_dict(),
            )
            if getattr(outcome, 'kind', None) is ErrorKind.API:
                print(f"   ✓ API error as expected: {outcome}")
            else:
                print(f"   Unexpected outcome: {outcome}")

        except RateLimitExhaustedError as e:
            print(f"   ✗ Rate limited: {e}")
            return 1
        except ApiError as e:
            print(f"   ✗ API error: {e}")
            return 1
        except FreemiusClientError as e:
            print(f"   ✗ Request failed: {e}")
            return 1

    print("\n=== Examples completed ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
