import argparse
import json
import os
import sys

from veil.config import find_config, load_config
from veil.config.models import ToggleConfig
from veil.core.masking import RedactorBuilder
from veil.errors import ConfigurationError, RedactionAbortedError
from veil.toggle import ToggleState


def _config(path):
    path = path or find_config()
    if not path:
        return ToggleConfig.default()
    return load_config(path)


def _describe(cfg: ToggleConfig):
    return {
        "source": cfg.source,
        "rules": [
            {"env": r.variable, "values": sorted(r.values), "redact": r.redact}
            for r in cfg.rules
        ],
        "fallback": cfg.fallback.value,
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="veil redaction toolbox")
    parser.add_argument("--config", default=os.getenv("VEIL_CONFIG_PATH"))
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("check", help="Validate a toggle config file")
    sub.add_parser("status", help="Show whether redaction is active in this environment")

    r = sub.add_parser("redact", help="Redact a text string")
    r.add_argument("text", help="Input text string")
    r.add_argument("--char", default=None, help="Mask character (default '*')")
    mode = r.add_mutually_exclusive_group()
    mode.add_argument("--partial", action="store_true", help="Keep a few characters at both ends")
    mode.add_argument("--fixed", type=int, default=None, help="Always emit this many mask characters")

    args = parser.parse_args(argv)

    try:
        if args.cmd == "check":
            print(json.dumps(_describe(_config(args.config)), indent=2))
        elif args.cmd == "status":
            state = ToggleState(config=_config(args.config))
            try:
                active = state.is_active()
            except RedactionAbortedError as e:
                print(json.dumps({"redact": None, "reason": str(e)}, indent=2))
                return 2
            print(json.dumps({"redact": active, "reason": state.reason}, indent=2))
        elif args.cmd == "redact":
            builder = RedactorBuilder()
            if args.char is not None:
                builder.char(args.char)
            if args.partial:
                builder.partial()
            if args.fixed is not None:
                builder.fixed(args.fixed)
            print(builder.build().redact(args.text))
        else:
            parser.print_help()
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
