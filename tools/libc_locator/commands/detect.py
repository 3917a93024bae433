import sys

from ..core import libc_file
from ..core.errors import FindError
from ..internal.detector import find_native
from .common import load_context


def do_detect(args):
    """Detects the native libc installation and prints or writes the libc file."""
    config, profile = load_context(args)

    try:
        installation = find_native(profile, cc=args.cc, config=config)
    except FindError as e:
        print(f"Error: unable to detect native libc: {e}", file=sys.stderr)
        sys.exit(1)

    if profile.is_darwin and installation.crt_dir is None:
        print("Warning: crt_dir is not detected on macOS and must be filled in manually.", file=sys.stderr)

    if args.output:
        libc_file.write_file(installation, args.output)
        print(f"Wrote {args.output}")
    else:
        sys.stdout.write(libc_file.render(installation))
