import argparse
import os
import sys

from .bindgen.bindings import Config, generate
from .bindgen.errors import GenerationError
from .bindgen.manifest import load_manifest
from .bindgen.utils import error, parse_name_list


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate GObject C bindings for a glib/gtk-rs library.")
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="Declaration manifest (JSON) or a directory containing gbindgen.json (default: current directory).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the bindings to this path instead of stdout.",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Compare the bindings to the existing --output file; fail if they differ.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Report errors only.",
    )
    parser.add_argument(
        "--verbose",
        default="",
        help="Comma-separated list of passes to log (discovery, dependencies, resolve, render, or 'all').",
    )
    parser.add_argument(
        "--include-guard",
        default=None,
        help="Wrap the output in an #ifndef include guard with this name.",
    )
    args = parser.parse_args(argv)
    if args.verify and not args.output:
        parser.error("--verify requires --output")

    input_path = args.input or os.getcwd()
    config = Config(quiet=args.quiet)
    if not args.quiet:
        config.verbose = parse_name_list(args.verbose)

    try:
        library, config = load_manifest(input_path, config)
        if args.include_guard:
            config.include_guard = args.include_guard
        bindings = generate(library, config)
    except GenerationError as exc:
        for item in getattr(exc, "errors", [exc]):
            error(str(item))
        error(f"Couldn't generate bindings for {input_path}.")
        return 1

    if args.output:
        changed = bindings.write_to_file(args.output)
        if args.verify and changed:
            error(f"Bindings changed: {args.output}")
            return 2
        return 0

    bindings.write(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
