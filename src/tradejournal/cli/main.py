"""Trade journal CLI main entry point."""

import click

from tradejournal import __version__
from tradejournal.cli.commands import report_command


@click.group()
@click.version_option(version=__version__)
def main():
    """Trade Journal - checklist journal performance analytics"""
    pass


main.add_command(report_command)


if __name__ == "__main__":
    main()
