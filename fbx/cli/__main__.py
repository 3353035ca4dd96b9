"""Entry point for running the cli with python -m fbx.cli."""

from fbx.cli.main import cli

cli()
