import argparse
import sys
import traceback

from bundler import bundle, set_verbose
from packer.config import CONFIG_FILE, DEFAULT_OUTPUT
from packer.errors import BundleError
from packer.introspection import build_manifest

def log(message):
    """Log informational messages to stderr."""
    print(f"\033[92m\033[1mINFO:\033[0m {message}", file=sys.stderr)

def build_parser():
    parser = argparse.ArgumentParser(
        prog="knapsack",
        description="Bundle a Python script and the local modules it imports into one file",
    )
    parser.add_argument("entry", help="Entry script, relative to the current directory")
    parser.add_argument("-o", "--output", help=f"Bundle destination (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--concurrency", type=int, help="Maximum modules processed at once (default: unlimited)")
    parser.add_argument("--no-format", dest="pretty", action="store_false", default=None,
                        help="Skip normalizing the emitted code")
    parser.add_argument("--manifest", action="store_true", help="Print the module table as JSON")
    parser.add_argument("--config", default=CONFIG_FILE, help=f"Options file (default: {CONFIG_FILE})")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    return parser

def main(argv=None):
    args = build_parser().parse_args(argv)
    set_verbose(args.verbose)

    try:
        result = bundle(
            args.entry,
            config_file=args.config,
            output=args.output,
            concurrency=args.concurrency,
            pretty=args.pretty,
        )
    except BundleError as e:
        if args.verbose:
            traceback.print_exc()
        print(f"Error: Bundling failed:{e}", file=sys.stderr)
        return 1

    if args.manifest:
        print(build_manifest(result.store, result.output).model_dump_json(indent=2))

    log(f"Bundled {len(result.store)} module(s) into {result.output}")
    log("Done!")
    return 0

if __name__ == "__main__":
    sys.exit(main())
