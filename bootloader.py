import argparse
import os

import uvicorn

from shared.enums import StoreBackend
from shared.utils import config, setup_logging

logger = setup_logging("bootloader")

SERVICES = {
    "gateway": "app:app",
    "presentations": "services.presentations.app:app",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bootloader for PromptDeck FastAPI services.")
    parser.add_argument(
        "service", nargs="?", default="gateway", choices=SERVICES.keys(), help="Service to start"
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind")
    parser.add_argument(
        "--store",
        choices=[backend.value for backend in StoreBackend],
        help="Presentation store backend (defaults to PRESENTATION_STORE)",
    )
    parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=config.get("debug", False),
        help="Auto-reload on code changes (defaults to DEBUG)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.store:
        # Reload workers re-read the environment, so set it there as well
        os.environ["PRESENTATION_STORE"] = args.store
        config.set("presentation_store", args.store)

    logger.info(
        f"Starting {args.service} on {args.host}:{args.port} "
        f"with the {config.get('presentation_store')} store"
    )
    uvicorn.run(SERVICES[args.service], host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
