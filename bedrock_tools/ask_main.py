"""`ask`: call InvokeModel on Amazon Bedrock.

Each model has its own inference parameter conventions, so each supported
model is a sub-command. You must be opted into the model in your AWS account.
"""

import json
import sys
from typing import List, Optional

from . import bedrock_client
from .cli import new_parser, report_errors, setup_logging
from .config import get_settings
from .nova import NovaLiteRequest

DOWNLOAD_DIR = "/tmp/"


def build_parser():
    parser = new_parser("ask", __doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="dumps raw output")
    sub = parser.add_subparsers(dest="command", required=True)

    lite = sub.add_parser(
        "amzn-nova-lite",
        help="Amazon Nova Lite v1:0, invoked through the us.amazon.nova-lite-v1:0 inference profile",
    )
    lite.add_argument("-s", "--system", default=None, help="System prompt for the model.")
    lite.add_argument(
        "-a",
        "--assistant",
        default=None,
        help="Prefilled assistant response the model continues from.",
    )
    lite.add_argument("user", help="User prompt.")
    return parser


def make_request(args):
    if args.command == "amzn-nova-lite":
        return NovaLiteRequest(args.user, system=args.system, assistant=args.assistant)
    raise ValueError(f"unsupported command: {args.command}")


@report_errors
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    request = make_request(args)
    body = request.body()

    if args.verbose:
        print(">>> request")
        print(f"id: {request.model_id}")
        print(json.dumps(body))

    client = bedrock_client.get_runtime_client(args.aws_profile, get_settings().aws_region)
    result = bedrock_client.invoke_model(client, request.model_id, body)

    if args.verbose:
        print(f"\n<<< response\n{json.dumps(result.metadata, indent=2, default=str)}")
        print(f"{result.body}\n")

    pretty, locations = request.render_response(result.body, DOWNLOAD_DIR)
    print(pretty)
    for location in locations:
        print(location.describe())
    return 0


if __name__ == "__main__":
    sys.exit(main())
