"""`canvas`: generate images with Amazon Nova Canvas (amazon.nova-canvas-v1:0).

You must be opted into the model and hold bedrock:InvokeModel.

Example:
    canvas --negative "birds, ducks" "Picture of a lake with wildlife, photorealistic"
"""

import json
import os
import sys
from typing import List, Optional

from . import bedrock_client
from .canvas import build_request, parse_response, redact_body, save_images
from .cli import new_parser, report_errors, setup_logging
from .config import CANVAS_MODEL_ID, get_settings


def build_parser():
    parser = new_parser("canvas", __doc__)
    parser.add_argument("-d", "--debug", action="store_true", help="dumps raw input/output")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="dumps input and output with the body redacted"
    )
    parser.add_argument("-o", "--output", default="./", help="Output directory")
    parser.add_argument(
        "-n",
        "--negative",
        default=None,
        help="Negative prompt: what Canvas should leave out. Avoid words like 'no' and 'without'.",
    )
    parser.add_argument(
        "prompt",
        help="User prompt. Canvas isn't conversational; write it like an image caption.",
    )
    return parser


@report_errors
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug or args.verbose)

    body = build_request(args.prompt, args.negative)
    if args.debug or args.verbose:
        print(">>> request")
        print(f"id: {CANVAS_MODEL_ID}")
        print(json.dumps(body))

    client = bedrock_client.get_runtime_client(args.aws_profile, get_settings().aws_region)
    result = bedrock_client.invoke_model(client, CANVAS_MODEL_ID, body)

    if args.debug or args.verbose:
        print(f"\n<<< response\n{json.dumps(result.metadata, indent=2, default=str)}")
    if args.verbose:
        print(f"{redact_body(result.body)}\n")
        print("run with --debug for more")
    elif args.debug:
        print(f"{result.body}\n")

    rsp = parse_response(result.body)
    if rsp.error:
        print(f"response.error: {rsp.error}")

    prefix = result.request_id if result.request_id != "UNKNOWN" else "out"
    paths = save_images(rsp.images, os.path.join(args.output, f"{prefix}-"))
    if paths:
        print("Writing:")
    for path in paths:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
