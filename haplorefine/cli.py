"""Command-line interface for haplorefine."""

import argparse
import datetime
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .config import REQUIRED_TOOLS, load_config, tool_path
from .pipeline import describe_plan, run_pipeline
from .pipeline_core.error_handling import PipelineError, ToolNotFoundError
from .utils import check_external_tools, get_tool_version
from .version import __version__

logger = logging.getLogger("haplorefine")

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}


def create_parser() -> argparse.ArgumentParser:
    """Create and return the argument parser for the haplorefine CLI."""
    parser = argparse.ArgumentParser(
        description=(
            "haplorefine: haplotype-resolved variant calling by iterative "
            "consensus, phasing and haplotagging."
        )
    )

    # General Options
    general_group = parser.add_argument_group("General Options")
    general_group.add_argument(
        "--version",
        action="version",
        version=f"haplorefine {__version__}",
        help="Show the current version and exit",
    )
    general_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARN", "ERROR"],
        default="INFO",
        help="Set the logging level",
    )
    general_group.add_argument(
        "--log-file", help="Path to a file to write logs to (in addition to stderr)."
    )
    general_group.add_argument(
        "-c",
        "--config",
        help="Path to a JSON configuration file overriding the packaged defaults",
        default=None,
    )

    # Core Input/Output
    io_group = parser.add_argument_group("Core Input/Output")
    io_group.add_argument(
        "-i", "--bam", required=True, help="Input alignment (BAM) with a .bai index"
    )
    io_group.add_argument(
        "-f", "--reference", required=True, help="Reference FASTA the reads are aligned to"
    )
    io_group.add_argument(
        "-r",
        "--regions",
        nargs="+",
        default=None,
        help="Restrict processing to these regions (e.g. chr1:1-1000). The alignment is "
        "filtered to the regions first because the phasing tool cannot restrict itself.",
    )
    io_group.add_argument(
        "-o",
        "--output-dir",
        default="output",
        help="Directory for all artifacts; re-running with the same directory resumes",
    )
    io_group.add_argument(
        "-d",
        "--delete-intermediates",
        action="store_true",
        default=None,
        help="Delete intermediate files after a successful run, keeping the final VCFs",
    )
    io_group.add_argument(
        "--summary-file",
        default=None,
        help="Write a tab-separated summary of every stage (status, elapsed time) here",
    )

    # Calling
    calling_group = parser.add_argument_group("Consensus & Calling")
    calling_group.add_argument("-m", "--model", default=None, help="Consensus model identifier")
    calling_group.add_argument(
        "-N",
        "--threshold",
        type=float,
        default=None,
        help="Heterozygous calling threshold for the first (unphased) round. "
        "Haplotype-split rounds always use 1.0.",
    )
    calling_group.add_argument(
        "-t", "--threads", type=int, default=None, help="Threads passed to each external tool"
    )
    calling_group.add_argument(
        "-b", "--batch-size", type=int, default=None, help="Consensus inference batch size"
    )

    # Checkpoints
    checkpoint_group = parser.add_argument_group("Checkpoints")
    checkpoint_group.add_argument(
        "--list-checkpoints",
        action="store_true",
        help="Show which stage outputs already exist in the (existing) output directory and exit",
    )
    checkpoint_group.add_argument(
        "--skip-tool-check",
        action="store_true",
        help="Do not check that the external tools are on PATH before running",
    )

    return parser


def parse_args(args_list: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Parameters
    ----------
    args_list : list of str, optional
        Arguments to parse; defaults to sys.argv

    Returns
    -------
    argparse.Namespace
        Parsed arguments
    """
    parser = create_parser()
    return parser.parse_args(args_list)


def build_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge the configuration file with command-line arguments.

    Command-line values win over configuration values when given.
    """
    cfg: Dict[str, Any] = load_config(args.config)
    cfg["bam"] = args.bam
    cfg["reference"] = args.reference
    cfg["output_dir"] = args.output_dir

    overrides = {
        "regions": args.regions,
        "model": args.model,
        "threshold": args.threshold,
        "threads": args.threads,
        "batch_size": args.batch_size,
        "delete_intermediates": args.delete_intermediates,
    }
    for key, value in overrides.items():
        if value is not None:
            cfg[key] = value

    if cfg.get("threads", 1) < 1:
        raise ValueError("Thread count must be at least 1")
    if cfg.get("batch_size", 1) < 1:
        raise ValueError("Batch size must be at least 1")
    if not 0.0 <= float(cfg["threshold"]) <= 1.0:
        raise ValueError("Threshold must be between 0 and 1")
    return cfg


def check_tools(cfg: Dict[str, Any]) -> None:
    """Make sure every external tool is on PATH; log versions at debug level.

    Raises
    ------
    ToolNotFoundError
        For the first tool that cannot be found
    """
    for tool in REQUIRED_TOOLS:
        executable = tool_path(cfg, tool)
        if not check_external_tools([executable]):
            raise ToolNotFoundError(executable)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{tool}: {get_tool_version(tool, executable)}")


def main(argv: Optional[List[str]] = None) -> int:
    """Run main entry point for the haplorefine CLI.

    Steps:
        1. Parse arguments.
        2. Configure logging and load config.
        3. Check the external tools.
        4. Run the pipeline (or list checkpoints).

    Returns 0 when every stage succeeded, 1 otherwise.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    args: argparse.Namespace = parse_args(argv)

    # Configure logging level
    logging.getLogger("haplorefine").setLevel(LOG_LEVEL_MAP[args.log_level])

    # If a log file is specified, add a file handler
    if args.log_file:
        log_file_path = Path(args.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        fh = logging.FileHandler(args.log_file)
        fh.setLevel(LOG_LEVEL_MAP[args.log_level])
        fh.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        logger.addHandler(fh)
        logger.debug(f"Logging to file enabled: {args.log_file}")

    start_time: datetime.datetime = datetime.datetime.now()
    logger.info(f"Run started at {start_time.isoformat()}")
    logger.debug(f"CLI arguments: {args}")

    try:
        cfg = build_config(args)
    except (FileNotFoundError, ValueError, TypeError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    logger.debug(f"Configuration loaded: {cfg}")

    if args.list_checkpoints:
        try:
            plan = describe_plan(cfg)
        except (PipelineError, OSError) as e:
            logger.error(f"Cannot inspect {args.output_dir}: {e}")
            return 1
        with pd.option_context("display.max_rows", None, "display.width", 200):
            print(plan.to_string(index=False))
        pending = plan[plan["state"] == "pending"]
        if pending.empty:
            print("All stage outputs exist; a run would not execute anything.")
        else:
            print(f"A run would resume at stage '{pending.iloc[0]['stage']}'.")
        return 0

    try:
        if not args.skip_tool_check:
            check_tools(cfg)
        result = run_pipeline(cfg)
    except (PipelineError, OSError) as e:
        logger.error(f"Pipeline failed: {e}")
        return 1

    if args.summary_file:
        try:
            result.write_summary(args.summary_file)
        except OSError as e:
            logger.error(f"Cannot write summary file {args.summary_file}: {e}")
            return 1

    if not result.ok:
        logger.error(f"Pipeline failed at stage '{result.failed.stage}': {result.error}")
        return 1

    elapsed = (datetime.datetime.now() - start_time).total_seconds()
    logger.info(f"Run finished successfully in {elapsed:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
