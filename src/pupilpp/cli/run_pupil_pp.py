"""Core pupil preprocessing runner.

This module contains the actual command-line runner, separated from the
console entry point wrapper. Scripts are thin wrappers; this is the real
implementation.
"""

import argparse
import importlib.util
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from pupilpp.contracts import ContractViolation, InvalidInputError
from pupilpp.pipeline.processor import ProcessingOutput, PupilProcessor
from pupilpp.pupil.segment_stats import segments_to_frame
from pupilpp.schemas import CLIConfig, ParamConfig, UserConfig, resolve_config

__all__ = ['load_user_config_dict', 'run_pupil_pp', 'main', 'EXIT_OK', 'EXIT_INVALID_INPUT',
           'EXIT_CONTRACT_VIOLATION']

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_INPUT = 1
EXIT_CONTRACT_VIOLATION = 2


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def _setup_logging(level: str, log_file: Optional[str] = None) -> None:
    """Configure the root logger with a console and an optional file handler."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Clear existing handlers and add new ones
    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)


def run_pupil_pp(
    session_path: str,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    stats_out: Optional[str] = None,
    verbose: bool = False,
    log_file: Optional[str] = None,
) -> ProcessingOutput:
    """Preprocess the configured pupil channel(s) of one session file.

    This is the core execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Configures logging
    3. Runs PupilProcessor on the session and writes the output channel
    4. Optionally exports the segment statistics to Parquet

    Parameters
    ----------
    session_path : str
        Session file (netCDF) holding the raw channels; the output channel
        is written back into it.
    user_config_path : str, optional
        Python file with a CONFIG dict.
    cli_args : dict, optional
        CLI argument overrides. Keys: channel, channel_combine,
        channel_action, log_level. All optional.
    stats_out : str, optional
        Parquet file receiving one row per segment.
    verbose : bool, optional
        If True, enable DEBUG logging and log the resolved config.
    log_file : str, optional
        Also write the log to this file.

    Returns
    -------
    ProcessingOutput

    Raises
    ------
    InvalidInputError
        If the configuration or the session content cannot be processed.
    ContractViolation
        If a pipeline stage broke its invariants.

    Examples
    --------
    Combine both eyes and replace a previous result::

        run_pupil_pp(
            "session.nc",
            cli_args={"channel": "pupil_l", "channel_combine": "pupil_r",
                      "channel_action": "replace"},
        )
    """
    param_cfg = ParamConfig()  # Expert defaults

    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}

    try:
        user_cfg = UserConfig.model_validate(user_cfg_dict)
        cli_cfg = CLIConfig.model_validate(cli_dict)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid pupil preprocessing settings:\n{e}") from e

    # Resolve to internal config (Param < User < CLI)
    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    _setup_logging(config.logging.level, log_file)

    logger.info("=" * 60)
    logger.info("Pupil preprocessing: %s", session_path)
    logger.info("=" * 60)
    if verbose:
        logger.debug("Full internal configuration:\n%s", json.dumps(config.model_dump(), indent=2))

    processor = PupilProcessor(config)
    out = processor.process_session(session_path)

    status = "degraded" if out.degraded else "success"
    logger.info("Finished with status '%s', output channel %d (%s)",
                status, out.channel_index, out.record.chantype)

    if stats_out:
        df = segments_to_frame(out.signal.segments)
        stats_path = Path(stats_out)
        stats_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_parquet(stats_path, engine='pyarrow', index=False)
        logger.info("Segment statistics saved: %s (%d segments)", stats_path.name, len(df))

    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pupilpp",
        description="Validity filtering and reconstruction of pupil diameter channels",
    )
    parser.add_argument("session", help="Session file (netCDF) with the raw pupil channels")
    parser.add_argument("--config", help="Path to user config file (Python file with CONFIG dict)")
    parser.add_argument("--channel",
                        help="Channel to preprocess: index, channel type, or 'pupil' for the best eye")
    parser.add_argument("--channel-combine",
                        help="Second eye to combine with: index, channel type, or 'none'")
    parser.add_argument("--channel-action", choices=["add", "replace"],
                        help="Append the output channel or replace the last one of its type")
    parser.add_argument("--stats-out", help="Write segment statistics to this Parquet file")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    cli_args = {
        "channel": args.channel,
        "channel_combine": args.channel_combine,
        "channel_action": args.channel_action,
    }

    try:
        run_pupil_pp(
            args.session,
            user_config_path=args.config,
            cli_args=cli_args,
            stats_out=args.stats_out,
            verbose=args.verbose,
            log_file=args.log_file,
        )
    except (InvalidInputError, FileNotFoundError) as e:
        logger.error("%s", e)
        return EXIT_INVALID_INPUT
    except ContractViolation as e:
        logger.critical("Pipeline contract violated: %s", e)
        return EXIT_CONTRACT_VIOLATION

    return EXIT_OK
