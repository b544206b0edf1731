"""`nova`: invoke Amazon's Nova family of text models on Bedrock.

Creative content models (Canvas, Reel) are not supported by this tool. You
must be opted into the model and hold bedrock:InvokeModel.

Example:
    nova --image ~/black_dog.jpeg --image ~/white_dog.jpeg "What is the difference between these dogs?"
"""

import json
import sys
from typing import List, Optional

from . import bedrock_client
from .cli import new_parser, report_errors, sanitize_for_log, setup_logging
from .config import get_settings, resolve_model_id
from .nova import InferenceConfig, build_request, parse_response

MODEL_HELP = (
    "Model or inference profile id, or an alias (micro, lite, pro). Nova models must be "
    "called through an inference profile, e.g. us.amazon.nova-lite-v1:0. Not all models "
    "support all modalities (micro takes no image/video input)."
)
MEDIA_HELP = "This tool won't validate the files are supported."


def build_parser():
    parser = new_parser("nova", __doc__)
    parser.add_argument("-d", "--debug", action="store_true", help="dumps raw input/output")
    parser.add_argument("-s", "--system", default=None, help="System prompt.")
    parser.add_argument("-m", "--model", default=None, help=MODEL_HELP)
    parser.add_argument("-a", "--assistant", default=None, help="Prefilled assistant response.")
    parser.add_argument(
        "-i", "--image", action="append", default=[], help=f"Path of an image to send. {MEDIA_HELP}"
    )
    parser.add_argument(
        "-v", "--video", action="append", default=[], help=f"Path of a video to send. {MEDIA_HELP}"
    )
    parser.add_argument(
        "-u",
        "--uri-video",
        action="append",
        default=[],
        help=f"S3 uri of a video to send (same-account buckets only). {MEDIA_HELP}",
    )
    parser.add_argument("--max-tokens", type=int, default=None, help="max_new_tokens, up to 5000")
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--top-p", type=float, default=None)
    parser.add_argument("--top-k", type=int, default=None)
    parser.add_argument("--stop", action="append", default=[], help="Stop sequence; repeatable.")
    parser.add_argument("prompt", help="User prompt.")
    return parser


def request_from_args(args):
    cfg = InferenceConfig(
        max_new_tokens=args.max_tokens,
        temperature=args.temperature,
        top_p=args.top_p,
        top_k=args.top_k,
        stop_sequences=list(args.stop),
    )
    return build_request(
        args.prompt,
        system=args.system,
        assistant=args.assistant,
        images=args.image,
        videos=args.video,
        s3_videos=args.uri_video,
        inference_config=cfg,
    )


@report_errors
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging(args.debug)
    settings = get_settings()
    model_id = resolve_model_id(args.model or settings.nova_model_id)

    body = request_from_args(args)
    logger.debug("nova request: %s", json.dumps(sanitize_for_log(body)))

    if args.debug:
        print(">>> request")
        print(f"id: {model_id}")
        print(json.dumps(body))

    client = bedrock_client.get_runtime_client(args.aws_profile, settings.aws_region)
    result = bedrock_client.invoke_model(client, model_id, body)

    if args.debug:
        print(f"\n<<< response\n{json.dumps(result.metadata, indent=2, default=str)}")
        print(f"{result.body}\n")

    print(parse_response(result.body))
    return 0


if __name__ == "__main__":
    sys.exit(main())
