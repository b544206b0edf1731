"""`models`: list Bedrock foundation model ids."""

import sys
from typing import List, Optional

from . import bedrock_client
from .cli import new_parser, report_errors, setup_logging
from .config import get_settings


def build_parser():
    parser = new_parser("models", __doc__, short_profile=False)
    parser.add_argument(
        "provider",
        nargs="?",
        default=None,
        help="Optional case-insensitive provider filter, e.g. Amazon, amazon, Anthropic.",
    )
    return parser


@report_errors
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    client = bedrock_client.get_control_client(args.aws_profile, get_settings().aws_region)
    for model_id in bedrock_client.list_models(client, args.provider):
        print(model_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
