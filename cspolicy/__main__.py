"""
cspolicy CLI
"""
import argparse
import json
import sys

import structlog

from cspolicy.config.loader import get_settings
from cspolicy.config.presets import get_preset, load_presets
from cspolicy.errors import CspError, PolicyViolationError
from cspolicy.logging_config import setup_logging
from cspolicy.merger import merge
from cspolicy.parser import parse
from cspolicy.serializer import serialize

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_VIOLATION = 2


def build_parser():
    parser = argparse.ArgumentParser(
        prog="cspolicy",
        description="Parse, merge and evaluate Content-Security-Policy strings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Canonical form of a policy
  python -m cspolicy parse "img-src b.com a.com; default-src 'self'" --canonical

  # Merge a preset with an override
  python -m cspolicy merge "default-src 'self'" "default-src cdn.example.com"

  # Which sources govern images?
  python -m cspolicy sources "default-src 'self'; img-src *" img

  # Is a resource allowed? (exit code 2 if not)
  python -m cspolicy check "default-src 'self'" script https://example.com/app.js --self https://example.com
        """
    )
    parser.add_argument('--strict', action='store_true',
                        help='Reject malformed policy strings instead of accepting them as-is')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    parse_parser = subparsers.add_parser('parse', help='Parse a policy and print it')
    parse_parser.add_argument('policy', help='Policy string')
    parse_parser.add_argument('--canonical', action='store_true',
                              help='Print the normalized form instead of the source string')
    parse_parser.add_argument('--json', action='store_true', help='Print directives as JSON')

    merge_parser = subparsers.add_parser('merge', help='Merge policies (later ones override)')
    merge_parser.add_argument('policies', nargs='+', help='Policy strings or @preset names')

    sources_parser = subparsers.add_parser('sources', help='Print the sources allowed for a category')
    sources_parser.add_argument('policy', help='Policy string or @preset name')
    sources_parser.add_argument('category', help='Bare category, e.g. img, script, connect')

    check_parser = subparsers.add_parser('check', help='Check whether a resource is allowed')
    check_parser.add_argument('policy', help='Policy string or @preset name')
    check_parser.add_argument('category', help='Bare category, e.g. img, script, connect')
    check_parser.add_argument('resource', help='Resource URL or host')
    check_parser.add_argument('--self', dest='self_origin', help="Origin that 'self' refers to")

    preset_parser = subparsers.add_parser('preset', help='Print a named preset')
    preset_parser.add_argument('name', nargs='?', help='Preset name (default: configured preset)')
    preset_parser.add_argument('--list', action='store_true', help='List preset names')

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    # Settings are read silently; events are only emitted once logging is set up.
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)
    logger.debug("config_loaded", presets_file=settings.presets_file, default_preset=settings.default_preset)

    try:
        if args.command == 'parse':
            return cmd_parse(args)
        elif args.command == 'merge':
            return cmd_merge(args)
        elif args.command == 'sources':
            return cmd_sources(args)
        elif args.command == 'check':
            return cmd_check(args)
        elif args.command == 'preset':
            return cmd_preset(args)
    except PolicyViolationError as e:
        print(f"Denied: {e.resource} ({e.category})")
        return EXIT_VIOLATION
    except (CspError, KeyError) as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    return EXIT_OK


def _load(source, strict):
    """Policy from a string, or from a preset when written as @name."""
    if source.startswith('@'):
        return get_preset(source[1:])
    return parse(source, strict=strict)


def cmd_parse(args):
    """Execute parse command"""
    policy = _load(args.policy, args.strict)
    if args.json:
        print(json.dumps({d.name: list(d.arguments) for d in policy.directives}, indent=2))
    elif args.canonical:
        print(serialize(policy.directives_map))
    else:
        print(policy.to_source_string())
    return EXIT_OK


def cmd_merge(args):
    """Execute merge command"""
    merged = merge(_load(source, args.strict) for source in args.policies)
    print(merged.to_source_string())
    return EXIT_OK


def cmd_sources(args):
    """Execute sources command"""
    policy = _load(args.policy, args.strict)
    for source in policy.get_allowed_sources(args.category):
        print(source)
    return EXIT_OK


def cmd_check(args):
    """Execute check command"""
    policy = _load(args.policy, args.strict)
    policy.check_source(args.category, args.resource, args.self_origin)
    print(f"Allowed: {args.resource} ({args.category})")
    return EXIT_OK


def cmd_preset(args):
    """Execute preset command"""
    if args.list:
        for name in load_presets().names():
            print(name)
        return EXIT_OK
    print(get_preset(args.name).to_source_string())
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
