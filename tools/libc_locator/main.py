import argparse

from .commands.check import do_check, do_profile
from .commands.detect import do_detect


def build_parser():
    parser = argparse.ArgumentParser(description="Locate the native libc installation")
    parser.add_argument("--config", help="Path to a .libc_locator.yaml config file", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every probe")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Detect
    p_detect = subparsers.add_parser("detect", help="Detect the native libc and print a libc file")
    p_detect.add_argument("--cc", help="C compiler to query (default: $CC, then config, then cc)", default=None)
    p_detect.add_argument("-o", "--output", help="Write the libc file here instead of stdout", default=None)
    p_detect.set_defaults(func=do_detect)

    # Check
    p_check = subparsers.add_parser("check", help="Parse and validate a libc file")
    p_check.add_argument("file", help="Path to the libc file")
    p_check.set_defaults(func=do_check)

    # Profile
    p_profile = subparsers.add_parser("profile", help="Show the detected platform profile")
    p_profile.set_defaults(func=do_profile)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
