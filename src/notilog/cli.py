from __future__ import annotations

import json

import click
from config.settings import get_safe_config_report

from notilog import views
from notilog.capture import build_capture
from notilog.config import get_settings
from notilog.errors import LogStoreReadError, LogStoreWriteError
from notilog.log_store import LogStore, build_log_store
from notilog.models import NotificationEntry, PostedNotification
from notilog.notifier import ChangeNotifier, inline_dispatch
from notilog.utils.log import logger, set_log_level


def _cli_notifier() -> ChangeNotifier:
    # The CLI process has no subscribers worth a thread pool.
    return ChangeNotifier(str(get_settings().signal_name), dispatch=inline_dispatch)


def _load(store: LogStore) -> list[NotificationEntry]:
    try:
        return store.load()
    except LogStoreReadError as ex:
        raise click.ClickException(str(ex)) from ex


def _print_entries(entries: list[NotificationEntry], *, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps([e.to_dict() for e in entries], ensure_ascii=False, indent=2))
        return
    for e in entries:
        click.echo(f"{e.formatted_time()}  {e.source_id}  {e.title}")
        if e.short_text:
            click.echo(f"    {e.short_text}")


@click.group(name="notilog")
@click.option("--log-level", default=None, help="Override LOG_LEVEL for this run.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """
    Captured notification log.
    """
    # Embedding callers may pass obj={"notifier": ...} to observe changes.
    ctx.ensure_object(dict).setdefault("notifier", _cli_notifier())
    if log_level:
        set_log_level(log_level)


@cli.command(name="list")
@click.option("--source", default=None, help="Only entries from this source.")
@click.option("--distinct", is_flag=True, default=False, help="Latest entry per source.")
@click.option("--limit", type=int, default=None)
@click.option("--json", "as_json", is_flag=True, default=False)
def list_cmd(source: str | None, distinct: bool, limit: int | None, as_json: bool) -> None:
    entries = _load(build_log_store())
    if source:
        entries = views.filter_by_source(entries, source)
    if distinct:
        entries = views.distinct_by_source(entries)
    if limit is not None:
        entries = entries[: max(0, limit)]
    _print_entries(entries, as_json=as_json)


@cli.command(name="sources")
def sources_cmd() -> None:
    for s in views.sources(_load(build_log_store())):
        click.echo(s)


@cli.command(name="clear")
@click.option("--yes", is_flag=True, default=False, help="Do not prompt.")
@click.pass_obj
def clear_cmd(obj: dict, yes: bool) -> None:
    if not yes:
        click.confirm("Delete every captured notification?", abort=True)
    try:
        build_log_store().clear()
    except LogStoreWriteError as ex:
        raise click.ClickException(str(ex)) from ex
    obj["notifier"].publish()
    click.echo("Cleared.")


@cli.command(name="ingest")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def ingest_cmd(obj: dict, source) -> None:
    """
    Feed posted notifications (one JSON object per line) through capture.

    Use - to read from stdin.
    """
    cap = build_capture(notifier=obj["notifier"])
    captured = skipped = 0
    for lineno, line in enumerate(source, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            payload = PostedNotification.from_dict(json.loads(line))
        except ValueError as ex:
            skipped += 1
            logger.warning("ingest_line_invalid", line=lineno, error=str(ex))
            continue
        if cap.handle(payload) is None:
            skipped += 1
        else:
            captured += 1
    click.echo(f"captured={captured} skipped={skipped}")


@cli.command(name="serve")
@click.option("--host", default=None)
@click.option("--port", type=int, default=None)
def serve_cmd(host: str | None, port: int | None) -> None:
    import uvicorn

    s = get_settings()
    uvicorn.run(
        "notilog.server:app",
        host=host or str(s.host),
        port=int(port or s.port),
        log_config=None,
    )


@cli.command(name="config")
def config_cmd() -> None:
    click.echo(json.dumps(get_safe_config_report(), indent=2, sort_keys=True))


def main() -> None:  # pragma: no cover
    cli(prog_name="notilog")


if __name__ == "__main__":  # pragma: no cover
    main()
