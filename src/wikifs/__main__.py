"""Run the wikifs CLI: ``python -m wikifs``."""

from wikifs.interfaces.cli.app import run_cli

if __name__ == "__main__":
    run_cli()
