import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from deploy_on_save.cli.compile import compile_file, watch
from deploy_on_save.cli.diagnose import diagnose

app = typer.Typer(
    name="deploy-on-save",
    help="Deploy saved source files to a Salesforce org and report compile problems.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("compile")(compile_file)
app.command("watch")(watch)
app.command("diagnose")(diagnose)


@app.callback()
def _configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def main() -> None:
    app()
