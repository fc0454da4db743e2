"""Command-line interface for partition-lister.

Commands:
    - run: Export a flat listing of every partition under a root prefix
    - partitions: Show the partitions a run would process (discovery only)

Every option falls back to its ``PARTITION_LISTER_*`` environment variable
when it is not given on the command line.
"""

from typing import Annotated, Optional

import typer

from . import __version__
from .core import ConfigurationError, ExportSettings, load_export_settings
from .export import discover_partitions, run_export

app = typer.Typer(
    name="partition-lister",
    help="Export per-partition object listings from S3-compatible storage.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"partition-lister {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    Partition-Lister: list every partition under an S3 prefix into its own file.
    """
    pass


BucketOption = Annotated[
    Optional[str], typer.Option("--bucket", "-b", help="Bucket to enumerate")
]
PrefixOption = Annotated[
    Optional[str], typer.Option("--prefix", "-p", help="Root prefix, may be empty")
]
DelimiterOption = Annotated[
    Optional[str], typer.Option("--delimiter", help="Hierarchy delimiter")
]
RegionOption = Annotated[
    Optional[str], typer.Option("--region", help="AWS region name")
]
EndpointUrlOption = Annotated[
    Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
]
AwsProfileOption = Annotated[
    Optional[str], typer.Option("--aws-profile", help="AWS CLI profile name")
]
ShallowMaxPagesOption = Annotated[
    Optional[int],
    typer.Option("--shallow-max-pages", help="Page cap for partition discovery"),
]
ShallowMaxKeysOption = Annotated[
    Optional[int],
    typer.Option("--shallow-max-keys", help="Keys per page for partition discovery"),
]
OutputLocationOption = Annotated[
    Optional[str],
    typer.Option("--output-location", "-o", help="Directory for output files"),
]
OutputPrefixOption = Annotated[
    Optional[str], typer.Option("--output-prefix", help="Output file name prefix")
]


def _load_settings(**overrides) -> ExportSettings:
    try:
        return load_export_settings(**overrides)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("run")
def run_cmd(
    bucket: BucketOption = None,
    prefix: PrefixOption = None,
    delimiter: DelimiterOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
    shallow_max_pages: ShallowMaxPagesOption = None,
    shallow_max_keys: ShallowMaxKeysOption = None,
    deep_max_pages: Annotated[
        Optional[int],
        typer.Option("--deep-max-pages", help="Page cap per partition, 0 = all"),
    ] = None,
    deep_max_keys: Annotated[
        Optional[int],
        typer.Option("--deep-max-keys", help="Keys per page per partition"),
    ] = None,
    listing_attempts: Annotated[
        Optional[int],
        typer.Option("--listing-attempts", help="Attempts per listing call"),
    ] = None,
    workers: Annotated[
        Optional[int], typer.Option("--workers", "-w", help="Number of workers")
    ] = None,
    queue_size: Annotated[
        Optional[int], typer.Option("--queue-size", help="Job queue capacity")
    ] = None,
    output_format: Annotated[
        Optional[str], typer.Option("--format", "-f", help="Record format: csv or json")
    ] = None,
    output_location: OutputLocationOption = None,
    output_prefix: OutputPrefixOption = None,
    force: Annotated[
        Optional[bool],
        typer.Option("--force/--no-force", help="Rewrite outputs that already exist"),
    ] = None,
) -> None:
    """
    List every partition under the root prefix into its own output file.

    Partitions whose output file already exists are skipped unless --force
    is given, so an interrupted run can simply be repeated.

    Examples:
        partition-lister run --bucket my-bucket --prefix data/ -o ./target
        PARTITION_LISTER_BUCKET=my-bucket PARTITION_LISTER_PREFIX= \
            partition-lister run --format json --workers 10
    """
    export_settings = _load_settings(
        bucket=bucket,
        prefix=prefix,
        delimiter=delimiter,
        region_name=region_name,
        endpoint_url=endpoint_url,
        aws_profile=aws_profile,
        shallow_max_pages=shallow_max_pages,
        shallow_max_keys=shallow_max_keys,
        deep_max_pages=deep_max_pages,
        deep_max_keys=deep_max_keys,
        listing_attempts=listing_attempts,
        workers=workers,
        queue_size=queue_size,
        output_format=output_format,
        output_location=output_location,
        output_prefix=output_prefix,
        force=force,
    )

    try:
        summary = run_export(export_settings)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Source: s3://{summary.bucket}/{summary.prefix}")
    typer.echo(f"Partitions discovered: {summary.partitions_discovered:,}")
    typer.echo(f"Dispatched: {summary.dispatched:,}")
    typer.echo(f"Skipped (output exists): {summary.skipped:,}")
    typer.echo(f"Completed: {summary.completed:,}")
    typer.echo(f"Partial: {summary.partial:,}")
    typer.echo(f"Failed: {summary.failed:,}")
    typer.echo(f"Entries written: {summary.entries_written:,}")
    typer.echo(f"Execution time: {summary.duration_seconds:.2f}s")

    if summary.interrupted:
        typer.echo("Run interrupted; repeat it to finish the remaining partitions.", err=True)
    if not summary.succeeded:
        raise typer.Exit(1)


@app.command("partitions")
def partitions_cmd(
    bucket: BucketOption = None,
    prefix: PrefixOption = None,
    delimiter: DelimiterOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
    shallow_max_pages: ShallowMaxPagesOption = None,
    shallow_max_keys: ShallowMaxKeysOption = None,
    output_location: OutputLocationOption = None,
    output_prefix: OutputPrefixOption = None,
) -> None:
    """
    Show the partitions under the root prefix without listing their contents.

    Example:
        partition-lister partitions --bucket my-bucket --prefix data/
    """
    export_settings = _load_settings(
        bucket=bucket,
        prefix=prefix,
        delimiter=delimiter,
        region_name=region_name,
        endpoint_url=endpoint_url,
        aws_profile=aws_profile,
        shallow_max_pages=shallow_max_pages,
        shallow_max_keys=shallow_max_keys,
        output_location=output_location,
        output_prefix=output_prefix,
    )

    try:
        partitions = discover_partitions(export_settings)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not partitions:
        typer.echo("No partitions found.")
        return

    typer.echo(f"Found {len(partitions)} partitions:")
    for partition in partitions:
        status = "exists, skip" if partition.output_exists else "pending"
        typer.echo(f"  {partition.partition_id}  {partition.output_target}  ({status})")


if __name__ == "__main__":
    app()
