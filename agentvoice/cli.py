import argparse
import logging
import sys
from typing import Optional

import uvicorn
from dotenv import load_dotenv

from agentvoice.config import load_settings


def main(argv: Optional[list] = None) -> int:
    load_dotenv()  # so GEMINI_API_KEY / ELEVENLABS_API_KEY work from .env

    parser = argparse.ArgumentParser(
        prog="agentvoice",
        description="Voice agent gateway and JSON-RPC agent runtime",
    )
    parser.add_argument(
        "service",
        choices=["gateway", "runtime"],
        help="gateway: client-facing HTTP API; runtime: JSON-RPC agent server",
    )
    parser.add_argument("--host", default=None, help="Override the configured bind host")
    parser.add_argument("--port", type=int, default=None, help="Override the configured port")
    args = parser.parse_args(argv)

    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.service == "gateway":
        from agentvoice.api.main import create_app

        host, port = settings.GATEWAY_HOST, settings.GATEWAY_PORT
    else:
        from agentvoice.runtime.server import create_app

        host, port = settings.RUNTIME_HOST, settings.RUNTIME_PORT

    app = create_app(settings)
    uvicorn.run(app, host=args.host or host, port=args.port or port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
