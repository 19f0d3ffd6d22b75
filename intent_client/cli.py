"""
Command-line entry point: one detect-intent call, printed as JSON.

    intent-client detect --endpoint localhost:50051 \\
        --project p1 --session s1 --text "Hi" --language en

Options not given on the command line come from the environment
(INTENT_ENDPOINT, INTENT_SECURE, ...) and an optional .env file.
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .clients import connect
from .config import ChannelCredentials, ConfigLoader
from .errors import CallError, ClientConnectionError, ConfigurationError, RemoteError
from .observability import configure_logging
from .schemas import DetectIntentRequest

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CALL_ERROR = 1
EXIT_CONNECTION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intent-client", description="Detect intents against a Sessions service"
    )
    parser.add_argument("--env-file", help="Path to .env file (default: ./.env)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit JSON logs instead of console output"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    detect = sub.add_parser("detect", help="Send one text query")
    detect.add_argument("--endpoint", help="host:port or URL (env: INTENT_ENDPOINT)")
    detect.add_argument(
        "--secure", action="store_true", default=None, help="Use a TLS channel"
    )
    detect.add_argument("--root-certs", help="PEM file with root certificates")
    detect.add_argument("--access-token", help="Bearer token for call credentials")
    detect.add_argument("--timeout", type=float, help="Deadline in seconds")
    detect.add_argument("--project", required=True, help="Project id")
    detect.add_argument("--session", required=True, help="Session id")
    detect.add_argument("--text", required=True, help="Text to classify")
    detect.add_argument("--language", default="en", help="BCP-47 language tag")
    return parser


def _credentials(args, loader: ConfigLoader) -> Optional[ChannelCredentials]:
    base = loader.load_credentials() or ChannelCredentials()
    root_certificates = base.root_certificates
    if args.root_certs:
        try:
            root_certificates = Path(args.root_certs).read_bytes()
        except OSError as e:
            raise ConfigurationError(f"--root-certs: cannot read {args.root_certs}: {e.strerror}") from e
    credentials = base.model_copy(update={
        "root_certificates": root_certificates,
        "access_token": args.access_token or base.access_token,
    })
    return None if credentials.is_empty() else credentials


def run_detect(args) -> int:
    loader = ConfigLoader(args.env_file)
    config = loader.load_client_config(
        endpoint=args.endpoint,
        secure=args.secure,
        timeout=args.timeout,
        credentials=_credentials(args, loader),
    )
    request = DetectIntentRequest(
        project_id=args.project,
        session_id=args.session,
        text=args.text,
        language_code=args.language,
    )

    with connect(config) as client:
        response = client.detect_intent(request)

    print(json.dumps(response.model_dump(), indent=2, ensure_ascii=False))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("intent-client", args.log_level, json_output=args.json_logs)

    try:
        return run_detect(args)
    except (ConfigurationError, ClientConnectionError) as e:
        print(f"connection error: {e}", file=sys.stderr)
        return EXIT_CONNECTION_ERROR
    except RemoteError as e:
        print(f"remote error: {e.code}: {e.message}", file=sys.stderr)
        return EXIT_CALL_ERROR
    except CallError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_CALL_ERROR


if __name__ == "__main__":
    sys.exit(main())
