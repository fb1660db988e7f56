"""Command-line interface."""
import argparse
import logging

from thermalsentinel.config import API_BASE_URL
from thermalsentinel.logging_config import setup_logging

logger = logging.getLogger("thermalsentinel.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="thermalsentinel", description="Turbine thermal monitoring console.")
    parser.add_argument("--api-url", default=API_BASE_URL, help="Backend base URL (default: %(default)s)")
    parser.add_argument("--headless", action="store_true", help="Poll and log alerts without opening a window")
    parser.add_argument("--ticks", type=int, default=None, help="Stop headless polling after N ticks")
    parser.add_argument("--synthetic", action="store_true", help="Generate frames when the backend has none")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    return parser


def run_headless(api_url: str, ticks: int | None) -> None:
    from thermalsentinel.controller.alerts import AlertStateMachine
    from thermalsentinel.controller.polling import PollingLoop
    from thermalsentinel.model.api import ApiClient

    def log_snapshot(snapshot) -> None:
        if snapshot.status is None:
            logger.warning(f"No live status: {snapshot.last_error}")
            return
        status = snapshot.status
        logger.info(f"max={status.current_max_temp:.1f} °C angle={status.current_angle:.1f} online={status.is_online}")

    loop = PollingLoop(ApiClient(base_url=api_url), AlertStateMachine())
    loop.add_listener(log_snapshot)
    try:
        loop.run(max_ticks=ticks)
    except KeyboardInterrupt:
        logger.info("Stopped.")


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)
    if args.headless:
        run_headless(args.api_url, args.ticks)
        return

    from thermalsentinel.main import main as gui_main
    gui_main(api_url=args.api_url, synthetic=args.synthetic)


if __name__ == "__main__":
    main()
