import argparse
import asyncio
import sys
from loguru import logger
from .controller import SessionController
from .extraction import SchemaExtractor
from .log import setup_logging
from .settings import load_run_config
from .storage import DATA_DIR, LOGS_DIR, RESULTS_DIR, ensure_dirs, save_attempts
from .utils import iso_timestamp


async def run(config_path: str | None = None) -> int:
    config = load_run_config(config_path)
    root = config.output_path
    dirs = ensure_dirs(root, extraction=config.extraction is not None)
    setup_logging(dirs[LOGS_DIR])

    logger.info(f"Starting run: query={config.query!r} target={config.target_domain}")
    if config.proxy.playwright_proxy():
        logger.info(f"Using proxy {config.proxy.server}")

    extractor = None
    if config.extraction is not None:
        extractor = SchemaExtractor(config.extraction, config.target_domain, dirs[DATA_DIR])

    report = await SessionController(config, extractor=extractor).run()
    save_attempts(report, f"attempts-{iso_timestamp().replace(':', '-')}", root / RESULTS_DIR)
    logger.info("Run complete")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="serpnav", description="Search, click through to a target domain and scrape its JSON-LD.")
    parser.add_argument("--config", help="Path to run_config.yaml (defaults to ./run_config.yaml)")
    args = parser.parse_args(argv)

    try:
        return asyncio.run(run(args.config))
    except Exception as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
