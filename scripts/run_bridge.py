"""Relay badge-reader lines to the backend.

Reads lines from stdin (or --device, e.g. a serial tty already configured with
stty) and writes one status token per scan back to the same device, or stdout.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_ledger.attendance_ledger.hardware.bridge import EndpointSession, ScanBridge


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(asctime)s %(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--device", help="reader device path; defaults to stdin/stdout")
    parser.add_argument("--reader-id", default="default")
    args = parser.parse_args()

    session = EndpointSession(settings.BRIDGE_ENDPOINTS, timeout=settings.BRIDGE_TIMEOUT_SECONDS)
    try:
        if args.device:
            with open(args.device, "r", encoding="ascii", errors="replace") as rx, open(
                args.device, "a", encoding="ascii"
            ) as tx:

                def write(token: str) -> None:
                    tx.write(token + "\n")
                    tx.flush()

                bridge = ScanBridge(session, write, debounce_seconds=settings.SCAN_DEBOUNCE_SECONDS)
                bridge.serve(rx, reader_id=args.reader_id)
        else:
            bridge = ScanBridge(session, lambda token: print(token, flush=True), debounce_seconds=settings.SCAN_DEBOUNCE_SECONDS)
            bridge.serve(sys.stdin, reader_id=args.reader_id)
    except KeyboardInterrupt:
        pass
    finally:
        session.close()


if __name__ == "__main__":
    main()
