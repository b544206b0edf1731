"""Pieces shared by the console scripts: logging, common flags, error reporting."""

import argparse
import functools
import logging
from typing import Any, Callable, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .config import __version__, get_settings
from .mapping import MappingError

logger = logging.getLogger("bedrock_tools")

PROFILE_HELP = (
    "AWS profile override. Region and credentials come from, in order: this profile "
    "(~/.aws/config and ~/.aws/credentials), the AWS_* environment variables, "
    "then the default profile."
)


def setup_logging(verbose: bool = False) -> logging.Logger:
    if not logger.handlers:
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        logger.addHandler(sh)
        log_file = get_settings().log_file
        if log_file:
            fh = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            fh.setFormatter(fmt)
            logger.addHandler(fh)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger


def sanitize_for_log(value: Any, max_len: int = 200) -> Any:
    # Keep image/video bytes and base64 blobs out of the logs
    if value is None or isinstance(value, (int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if isinstance(value, str):
        if len(value) > max_len:
            return value[:max_len] + f"...<truncated len={len(value)}>"
        return value
    if isinstance(value, (list, tuple)):
        return [sanitize_for_log(v, max_len) for v in value]
    if isinstance(value, dict):
        out: Dict[str, Any] = {}
        for k, v in value.items():
            out[k] = sanitize_for_log(v, max_len)
        return out
    s = str(value)
    return s[:max_len] + (f"...<truncated len={len(s)}>" if len(s) > max_len else "")


def new_parser(prog: str, description: str, short_profile: bool = True) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    flags = ["-p", "--aws-profile"] if short_profile else ["--aws-profile"]
    parser.add_argument(*flags, dest="aws_profile", default=None, help=PROFILE_HELP)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def report_errors(fn: Callable[[Optional[List[str]]], int]) -> Callable[[Optional[List[str]]], int]:
    """Turn SDK and mapping failures into an `error:` message and exit status 1."""

    @functools.wraps(fn)
    def wrapper(argv: Optional[List[str]] = None) -> int:
        try:
            return fn(argv)
        except (ClientError, BotoCoreError) as e:
            logger.error("Bedrock error: %s", e)
            print(f"\nerror:\n{e}")
            return 1
        except (MappingError, OSError) as e:
            logger.error("%s: %s", type(e).__name__, e)
            print(f"\nerror:\n{e}")
            return 1

    return wrapper
