#!/usr/bin/env python3
"""Validate a German address against the OpenPLZ service.

Feeds the given locality and/or postal code into the synchronization
engine exactly as a UI would, waits for every lookup to settle and prints
the resulting field state.

Usage
-----
::

    python scripts/validate_address.py --locality Berlin
    python scripts/validate_address.py --postal-code 80331
    python scripts/validate_address.py --locality München --select 80333

Options::

    --locality NAME        Type NAME into the locality field
    --postal-code PLZ      Type PLZ into the postal code field
    --select PLZ           Pick PLZ from the candidate list once it appears
    --delay SECONDS        Debounce delay (default: PLZ_DEBOUNCE_DELAY or 1.0)
    --json                 Output machine-readable JSON
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from plzsync import FieldState, PlzClient, PlzConfig, SyncEngine  # noqa: E402


async def _settle(engine: SyncEngine, delay: float) -> None:
    """Let timers fire and lookups finish until nothing is pending."""
    while engine.busy:
        await asyncio.sleep(delay + 0.05)
        await engine.wait_idle()


def _print_state(state: FieldState, *, json_mode: bool) -> None:
    if json_mode:
        payload = state.model_dump(mode="json")
        payload["is_validated"] = state.is_validated
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    print(f"Locality:     {state.locality or '-'}")
    print(f"Postal code:  {state.postal_code or '-'}")
    if state.locality_error:
        print(f"  locality error:    {state.locality_error}")
    if state.postal_code_error:
        print(f"  postal code error: {state.postal_code_error}")
    if state.show_candidates:
        print("Multiple postal codes found. Please select one:")
        for candidate in state.candidates:
            print(f"  {candidate.postal_code}  {candidate.name}")
    if state.is_validated:
        print(f"Address validated: {state.locality} • PLZ {state.postal_code}")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Validate a German locality / postal code pair via OpenPLZ")
    parser.add_argument("--locality", help="Type this into the locality field")
    parser.add_argument("--postal-code", help="Type this into the postal code field")
    parser.add_argument("--select", help="Postal code to pick from the candidate list")
    parser.add_argument("--delay", type=float, help="Debounce delay in seconds")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    if not args.locality and not args.postal_code:
        parser.error("give --locality and/or --postal-code")

    overrides = {"debounce_delay": args.delay} if args.delay is not None else {}
    config = PlzConfig.from_env(**overrides)

    async with PlzClient(config) as client, SyncEngine(client, config=config) as engine:
        if args.locality:
            engine.set_locality(args.locality)
            await _settle(engine, config.debounce_delay)
        if args.postal_code:
            engine.set_postal_code(args.postal_code)
            await _settle(engine, config.debounce_delay)
        if args.select:
            offered = {candidate.postal_code for candidate in engine.state.candidates}
            if args.select not in offered:
                print(f"{args.select} is not one of the offered postal codes", file=sys.stderr)
                return 1
            engine.candidate_selected(args.select)
            await _settle(engine, config.debounce_delay)

        state = engine.state

    _print_state(state, json_mode=args.json_mode)
    return 0 if state.is_validated or state.show_candidates else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
