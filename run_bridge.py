from __future__ import annotations
"""
VitalBridge launcher
- Central logging
- Opens the serial port (fatal if it cannot)
- Serves the snapshot over HTTP with uvicorn until SIGINT
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

import uvicorn  # type: ignore

# Put the project root on sys.path when run as a script
ROOT = os.path.dirname(os.path.abspath(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from vitalbridge.gateway.config_loader import load_config as load_gateway_config  # noqa: E402
from vitalbridge.gateway.xGatewayService import create_app  # noqa: E402
from vitalbridge.logwrapper import init_logging  # noqa: E402
from vitalbridge.vitals_serial import SerialOpenError, xVitalsSerialService  # noqa: E402

logger = logging.getLogger("bridge")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Serial vitals to HTTP bridge.")
    ap.add_argument("--port", default=None, help="Serial device (e.g. /dev/ttyUSB0, COM7).")
    ap.add_argument("--baud", type=int, default=None, help="Serial baud rate.")
    ap.add_argument("--strategy", choices=("accumulate", "line"), default=None, help="Record assembly strategy.")
    ap.add_argument("--host", default=None, help="HTTP bind address.")
    ap.add_argument("--http-port", type=int, default=None, help="HTTP port.")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    gw_cfg = load_gateway_config(overrides={"server": {"host": args.host, "port": args.http_port}})
    init_logging(gw_cfg.get("logging"))

    svc = xVitalsSerialService(
        config_overrides={"port": args.port, "baudrate": args.baud, "strategy": args.strategy}
    )

    try:
        svc.start()
    except SerialOpenError as exc:
        logger.error("%s", exc)
        return 1

    app = create_app(svc)
    host = str(gw_cfg["server"]["host"])
    port = int(gw_cfg["server"]["port"])
    logger.info("Server running on http://%s:%d", host, port)
    try:
        # uvicorn returns after handling SIGINT/SIGTERM
        uvicorn.run(app, host=host, port=port, log_config=None)
    finally:
        svc.stop()
    logger.info("Shut down")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
