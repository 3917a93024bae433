import sys

from ..core import libc_file
from ..core.errors import ParseError
from .common import load_context


def do_check(args):
    """Parses and validates a libc file, echoing it back in canonical form."""
    _, profile = load_context(args)

    try:
        installation = libc_file.parse_file(args.file, profile)
    except OSError as e:
        print(f"Error: unable to read {args.file}: {e}", file=sys.stderr)
        sys.exit(1)
    except ParseError as e:
        print(f"Error: {args.file}: {e}", file=sys.stderr)
        sys.exit(1)

    sys.stdout.write(libc_file.render(installation))


def do_profile(args):
    """Prints the platform profile libc detection would use."""
    _, profile = load_context(args)
    print(f"os={profile.os}")
    print(f"abi={profile.abi}")
    print(f"arch={profile.arch}")
