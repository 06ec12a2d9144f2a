import os

from invoke import Context, task
from loguru import logger

WINDOWS = os.name == "nt"
PROJECT_NAME = "fcamap"
PYTHON_VERSION = "3.12"
# Ensure FCAMAP_ROOT is set for subprocesses to locate configs
os.environ["FCAMAP_ROOT"] = os.path.dirname(os.path.abspath(__file__))


@task
def match(ctx: Context, source="", target="", args=""):
    """Aligns two ontologies using the default configuration in configs/matcher/"""

    if not source or not target:
        logger.error("Both --source and --target ontologies are required.")
        return

    print("\nRunning FCA ontology matcher.")
    cmd = f"uv run python -m fcamap.create_alignment ontology.source={source} ontology.target={target}"
    if args:
        cmd += f" {args}"
    ctx.run(cmd)

    logger.success("Ontology matching completed.")


@task
def test(ctx: Context, args=""):
    """Runs the test suite."""

    cmd = "uv run pytest"
    if args:
        cmd += f" {args}"
    ctx.run(cmd, pty=not WINDOWS)


@task
def clean(ctx: Context):
    """Removes generated alignments and hydra run directories."""

    logger.info("Cleaning up generated outputs.")
    ctx.run("rm -rf ./output ./outputs")
    logger.success("Cleanup done.")
