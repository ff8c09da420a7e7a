import argparse
from typing import Optional, Sequence

import uvicorn

from release_monitor.api.app import create_app
from release_monitor.common.logging_config import configure_logging
from release_monitor.config import load_release_monitor_config


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    config = load_release_monitor_config()
    configure_logging(config.log_level)
    uvicorn.run(create_app(config=config), host=host, port=port, log_config=None)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Serve the release monitor API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)
    run(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
