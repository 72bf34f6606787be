import json

import click

from ..exceptions import InvalidLocationSelection
from .render import ViewNode
from .services import widget_context


class EchoNotifier:
    def show_error(self, title: str, detail: str) -> None:
        click.secho(f"{title}: {detail}", fg="red", err=True)


@click.group(name="weather", help="Show and configure the weather widget")
def cli() -> None:
    pass


@cli.command(help="Show the weather for the current location")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "html", "json"]),
    default="text",
    show_default=True,
)
async def show(*, output_format: str) -> None:
    async with widget_context(notifier=EchoNotifier()) as widget:
        view = await widget.start()

    echo_view(view, output_format=output_format)


@cli.command(help="Search for locations matching QUERY")
@click.argument("query")
async def search(*, query: str) -> None:
    async with widget_context(notifier=EchoNotifier()) as widget:
        await widget.settings.on_search_input(query)

    for candidate in widget.settings.candidate_list:
        click.echo(f"{candidate.key}\t{candidate.label}")


@cli.command(name="set-location", help="Save the location matching LABEL")
@click.argument("label")
async def set_location(*, label: str) -> None:
    async with widget_context(notifier=EchoNotifier()) as widget:
        await widget.settings.on_search_input(label)
        try:
            view = await widget.settings.on_save(label)
        except InvalidLocationSelection:
            labels = [c.label for c in widget.settings.candidate_list]
            hint = "\n".join(f"  {name}" for name in labels) or "  (none)"
            raise click.ClickException(f"Pick one of the matching locations:\n{hint}")

    echo_view(view, output_format="text")


def echo_view(view: ViewNode | None, *, output_format: str) -> None:
    if view is None:
        raise click.ClickException("No weather data available")

    if output_format == "html":
        click.echo(view.to_html())
    elif output_format == "json":
        click.echo(json.dumps(view.to_dict(), indent=2, ensure_ascii=False))
    else:
        click.echo(view.to_text())
