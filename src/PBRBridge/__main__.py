"""Entrypoint for `python -m PBRBridge`."""
import logging

logger = logging.getLogger("pbr_bridge")


def _run_cli():
    from .cli import main as cli_main
    logger.debug("Dispatching to CLI entrypoint.")
    cli_main()


if __name__ == "__main__":
    _run_cli()
