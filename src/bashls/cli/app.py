import typer

from bashls.cli.analyze import analyze, references, symbols
from bashls.cli.serve import serve

app = typer.Typer(
    name="bashls",
    help="bashls: a language server and analyzer for shell scripts.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("serve")(serve)
app.command("analyze")(analyze)
app.command("symbols")(symbols)
app.command("references")(references)


def main() -> None:
    app()
