"""Allow ``python -m folkstore``."""

from folkstore.cli import cli

cli()
