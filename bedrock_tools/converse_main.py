"""`converse`: hold a multi-turn interactive conversation with a model.

Callers need permission for bedrock:InvokeModel.

Example:
    converse --aws-profile bedrock -m us.amazon.nova-lite-v1:0

Inside the shell:
    say [-a PATH]... PROMPT    send a turn, optionally with attachments
    help                       show commands
    quit | exit                leave
"""

import argparse
import json
import logging
import shlex
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from . import bedrock_client
from .cli import new_parser, report_errors, sanitize_for_log, setup_logging
from .config import get_settings, resolve_model_id
from .mapping import (
    InvalidPath,
    ResponseError,
    build_user_message,
    map_inference_config,
    map_system,
    output_message,
    render_content_block,
)

logger = logging.getLogger("bedrock_tools")

ATTACH_HELP = (
    "Media file to attach; repeat for more. Type comes from the extension. "
    "Images: png, jpg, jpeg, gif, webp (local only). "
    "Videos: mp4, mov, mkv, webm, flv, mpeg, mpg, wmv, 3gp (local or s3://). "
    "Documents: csv, doc, docx, html, md, pdf, txt, xls, xlsx (local only)."
)


@dataclass
class ConversationState:
    model: str
    client: Any
    verbose: bool = False
    system_prompt: Optional[List[Dict[str, str]]] = None
    inference_config: Optional[Dict[str, Any]] = None
    messages: List[Dict[str, Any]] = field(default_factory=list)


class ShellArgumentError(Exception):
    pass


class _ShellParser(argparse.ArgumentParser):
    # Report bad `say` input without leaving the shell.
    def error(self, message):
        raise ShellArgumentError(message)

    def exit(self, status=0, message=None):
        raise ShellArgumentError(message or "")


def build_say_parser() -> argparse.ArgumentParser:
    parser = _ShellParser(prog="say", description="Send a message to the model")
    parser.add_argument("-a", "--attach", action="append", default=[], help=ATTACH_HELP)
    parser.add_argument("prompt", help="The prompt for your next turn in the conversation")
    return parser


def say(state: ConversationState, prompt: str, attachments: List[str], out: Callable[[str], None] = print) -> bool:
    """Run one turn. Returns False when the turn was aborted or failed."""
    try:
        new_msg = build_user_message(prompt, attachments)
    except InvalidPath as e:
        out(f"Invalid attachment path, aborting turn. path: {e.path}")
        return False
    except OSError as e:
        logger.error("Unreadable attachment: %s", e)
        out(f"\nerror:\n{e}")
        return False

    if state.verbose:
        logger.debug("model: %s", state.model)
        logger.debug("%s", json.dumps(sanitize_for_log(new_msg)))
    state.messages.append(new_msg)

    try:
        resp = bedrock_client.converse(
            state.client,
            modelId=state.model,
            system=state.system_prompt,
            messages=state.messages,
            inferenceConfig=state.inference_config,
        )
        logger.debug("%s", json.dumps(sanitize_for_log(resp), default=str))
        msg = output_message(resp)
        rendered = [render_content_block(block) for block in msg.get("content") or []]
    except (ClientError, BotoCoreError, ResponseError) as e:
        # Drop the unanswered turn so history keeps alternating user/assistant.
        state.messages.pop()
        logger.error("Bedrock Converse error: %s", e)
        out(f"\nerror:\n{e}")
        return False

    for line in rendered:
        out(line)
    state.messages.append({"role": msg.get("role", "assistant"), "content": msg.get("content") or []})
    return True


def handle_line(state: ConversationState, line: str, out: Callable[[str], None] = print) -> bool:
    """Dispatch one shell line. Returns False when the shell should exit."""
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        out(f"error: {e}")
        return True
    if not tokens:
        return True

    command, rest = tokens[0], tokens[1:]
    if command in ("quit", "exit"):
        return False
    if command == "help":
        out(__doc__)
        return True
    if command == "say":
        parser = build_say_parser()
        if rest and rest[0] in ("-h", "--help"):
            out(parser.format_help())
            return True
        try:
            args = parser.parse_args(rest)
        except ShellArgumentError as e:
            out(f"say: {e}")
            return True
        say(state, args.prompt, args.attach, out)
        return True

    out(f"unknown command: {command} (try 'help')")
    return True


def run_shell(
    state: ConversationState,
    read: Optional[Callable[[str], str]] = None,
    out: Callable[[str], None] = print,
) -> None:
    read = read or input
    prompt = f"[{state.model}]\n> "
    out("")
    while True:
        try:
            line = read(prompt)
        except (EOFError, KeyboardInterrupt):
            out("")
            return
        if not handle_line(state, line, out):
            return


def build_parser():
    parser = new_parser("converse", __doc__, short_profile=False)
    parser.add_argument("-v", "--verbose", action="store_true", help="Whether output should be verbose")
    parser.add_argument(
        "-m",
        "--model",
        default=None,
        help=(
            "Model or inference profile id to use (or an alias). Not all models support Converse; "
            "Nova models need an inference profile id such as us.amazon.nova-lite-v1:0."
        ),
    )
    parser.add_argument("-s", "--system", default=None, help="System prompt for the entire conversation")
    parser.add_argument("--max-tokens", type=int, default=None)
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--top-p", type=float, default=None)
    return parser


@report_errors
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    settings = get_settings()

    client = bedrock_client.get_runtime_client(args.aws_profile, settings.aws_region)
    state = ConversationState(
        model=resolve_model_id(args.model or settings.converse_model_id),
        client=client,
        verbose=args.verbose,
        system_prompt=map_system(args.system),
        inference_config=map_inference_config(args.max_tokens, args.temperature, args.top_p),
    )
    try:
        import readline  # noqa: F401  line editing and history for input()
    except ImportError:  # pragma: no cover - not available on Windows
        pass
    run_shell(state)
    return 0


if __name__ == "__main__":
    sys.exit(main())
