"""Command-line entry point for browsing S3 folders."""
from dataclasses import asdict, replace
import logging
from typing import Annotated, Optional

import typer

from .controller import NotConnectedError, S3FoldersController, filter_buckets
from .paths import breadcrumbs
from .presenter import ListingListener
from .services import ListingServiceError
from .settings import SettingsStorage
from .ui_utils import format_entry_row, load_package_info

app = typer.Typer(
    name="s3-folders",
    help="Browse S3 buckets folder by folder.",
    no_args_is_help=True,
)

AccessKeyOption = Annotated[
    str, typer.Option("--access-key", envvar="AWS_ACCESS_KEY_ID", help="Access key ID.")
]
SecretKeyOption = Annotated[
    str,
    typer.Option(
        "--secret-key",
        envvar="AWS_SECRET_ACCESS_KEY",
        help="Secret access key.",
        show_default=False,
    ),
]
EndpointOption = Annotated[
    Optional[str], typer.Option("--endpoint-url", help="S3-compatible endpoint URL.")
]
RegionOption = Annotated[Optional[str], typer.Option("--region", help="Signing region.")]
FilterOption = Annotated[
    str, typer.Option("--filter", "-f", help="Case-insensitive name filter.")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


class _ErrorCollector(ListingListener):
    def __init__(self) -> None:
        self.errors: list[str] = []

    def on_error(self, message: str) -> None:
        self.errors.append(message)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _connect(
    access_key: str,
    secret_key: str,
    endpoint_url: Optional[str],
    region: Optional[str],
) -> tuple[S3FoldersController, list[str]]:
    controller = S3FoldersController(settings=SettingsStorage().load())
    try:
        buckets = controller.connect(
            access_key=access_key,
            secret_key=secret_key,
            endpoint_url=endpoint_url,
            region=region,
        )
    except ListingServiceError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    return controller, buckets


@app.command("buckets")
def buckets_command(
    access_key: AccessKeyOption,
    secret_key: SecretKeyOption,
    endpoint_url: EndpointOption = None,
    region: RegionOption = None,
    query: FilterOption = "",
    verbose: VerboseOption = False,
) -> None:
    """List the buckets visible to the given credentials."""
    _configure_logging(verbose)
    _, buckets = _connect(access_key, secret_key, endpoint_url, region)
    for name in filter_buckets(buckets, query):
        typer.echo(name)


@app.command("ls")
def ls_command(
    bucket: Annotated[str, typer.Argument(help="Bucket to browse.")],
    access_key: AccessKeyOption,
    secret_key: SecretKeyOption,
    prefix: Annotated[str, typer.Argument(help="Folder prefix, root when omitted.")] = "",
    endpoint_url: EndpointOption = None,
    region: RegionOption = None,
    query: FilterOption = "",
    pages: Annotated[int, typer.Option("--pages", min=1, help="Pages to load.")] = 1,
    load_everything: Annotated[
        bool, typer.Option("--all", help="Load every page below the prefix.")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """List the folders and files directly below PREFIX."""
    _configure_logging(verbose)
    controller, _ = _connect(access_key, secret_key, endpoint_url, region)
    errors = _ErrorCollector()
    try:
        client = controller.open_bucket(
            bucket,
            prefix=prefix,
            runner=lambda task: task(),
            listener=errors,
        )
    except NotConnectedError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    if not errors.errors:
        client.load_all(None if load_everything else pages)
    client.set_filter(query)

    typer.echo(f"{bucket}: " + " > ".join(label for label, _ in breadcrumbs(client.prefix)))
    for kind, name, size, modified in (format_entry_row(entry) for entry in client.filtered_view):
        typer.echo(f"{kind:<7} {size:>10}  {modified:<20}  {name}")
    if client.has_more and not errors.errors:
        typer.echo("... more entries available (use --pages or --all)")
    if errors.errors:
        for message in errors.errors:
            typer.echo(f"Error: {message}", err=True)
        raise typer.Exit(code=1)


@app.command("config")
def config_command(
    page_size: Annotated[
        Optional[int], typer.Option("--page-size", min=1, max=1000, help="Keys per page.")
    ] = None,
    endpoint_url: EndpointOption = None,
    region: RegionOption = None,
    connect_timeout: Annotated[
        Optional[int], typer.Option("--connect-timeout", min=1, help="Seconds.")
    ] = None,
    read_timeout: Annotated[Optional[int], typer.Option("--read-timeout", min=1, help="Seconds.")] = None,
    max_attempts: Annotated[
        Optional[int], typer.Option("--max-attempts", min=1, help="Attempts per request.")
    ] = None,
) -> None:
    """Show the saved settings, updating any that are given."""
    storage = SettingsStorage()
    settings = storage.load()
    updates = {
        "page_size": page_size,
        "endpoint_url": endpoint_url,
        "region": region,
        "connect_timeout": connect_timeout,
        "read_timeout": read_timeout,
        "max_attempts": max_attempts,
    }
    updates = {name: value for name, value in updates.items() if value is not None}
    if updates:
        settings = replace(settings, **updates)
        storage.save(settings)
    for name, value in asdict(settings).items():
        typer.echo(f"{name} = {value}")


@app.command("version")
def version_command() -> None:
    """Show the installed version."""
    info = load_package_info()
    typer.echo(f"{info.name} {info.version}".strip())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
