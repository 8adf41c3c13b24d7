from typing import Optional, Sequence

from promote_release.cli import cli


def main(args: Optional[Sequence[str]] = None):
    # pylint: disable=no-value-for-parameter
    cli(args)


if __name__ == "__main__":
    main()
