"""CLI entry point: python -m history_graph.cli build"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from history_graph.clustering.quality import partition_modularity, summarize_clusters
from history_graph.config.settings import get_settings
from history_graph.export.service import write_graph_export
from history_graph.history.chrome import ChromeHistoryProvider
from history_graph.history.fetcher import FetchError, HistoryFetcher
from history_graph.history.provider import (
    HistoryProvider,
    HistoryProviderError,
    InMemoryHistoryProvider,
    load_history_json,
)
from history_graph.logging_config import configure_logging
from history_graph.pipeline.config import PipelineConfig, load_pipeline_config
from history_graph.pipeline.orchestrator import Orchestrator


async def run_build(
    provider: HistoryProvider,
    horizon_days: int,
    output_dir: Path,
    config: PipelineConfig,
    delete_clusters: list[str] | None = None,
) -> Path:
    """Run the pipeline once, drop the given clusters, and write the export."""
    log = structlog.get_logger()
    fetcher = HistoryFetcher(provider, config.fetch.max_results_per_search)
    orchestrator = Orchestrator(fetcher, config)

    # A single run on a fresh orchestrator is never superseded
    result = await orchestrator.run(horizon_days)
    graph = result.graph
    for label in delete_clusters or []:
        graph = orchestrator.delete_cluster(label, graph)

    for summary in summarize_clusters(graph):
        log.info(
            "cluster_summary",
            cluster=summary.label,
            size=summary.size,
            total_visits=summary.total_visits,
            members=summary.members[:10],
        )
    log.info("partition_quality", modularity=round(partition_modularity(graph), 4))

    path = write_graph_export(graph, output_dir)
    log.info("export_file_written", path=str(path), nodes=len(graph.nodes))
    return path


def resolve_horizon(days: int | None, config: PipelineConfig) -> int:
    """Return the horizon for ``--days``, falling back to the configured default.

    Raises:
        ValueError: If ``days`` is not one of ``horizons.choices``.
    """
    if days is None:
        return config.horizons.default
    if days not in config.horizons.choices:
        raise ValueError(
            f"--days must be one of {config.horizons.choices}, got {days}"
        )
    return days


def _open_provider(args: argparse.Namespace, settings) -> HistoryProvider:
    if args.history_json:
        return InMemoryHistoryProvider(load_history_json(Path(args.history_json)))
    db_path = Path(args.history_db) if args.history_db else settings.history_db_path
    if db_path is None:
        raise HistoryProviderError(
            "No history source: pass --history-db, --history-json or set HISTORY_GRAPH_HISTORY_DB_PATH"
        )
    if not db_path.exists():
        raise HistoryProviderError(f"History database not found: {db_path}")
    return ChromeHistoryProvider.from_path(db_path)


async def _build(args: argparse.Namespace, settings, config: PipelineConfig) -> int:
    log = structlog.get_logger()
    try:
        provider = _open_provider(args, settings)
    except HistoryProviderError as e:
        log.error("history_source_unavailable", error=str(e))
        return 1

    horizon_days = resolve_horizon(args.days, config)
    output_dir = Path(args.output_dir) if args.output_dir else settings.export_dir
    try:
        await run_build(provider, horizon_days, output_dir, config, args.delete_cluster)
    except FetchError:
        return 1
    finally:
        if isinstance(provider, ChromeHistoryProvider):
            await provider.aclose()
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="history_graph.cli",
        description="Browser history domain graph CLI",
    )
    subparsers = parser.add_subparsers(dest="command")

    build_parser = subparsers.add_parser(
        "build", help="Build and cluster the domain graph, then export it as JSON"
    )
    build_parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Horizon in days, one of horizons.choices (default: horizons.default)",
    )
    source = build_parser.add_mutually_exclusive_group()
    source.add_argument(
        "--history-db",
        type=str,
        default=None,
        help="Path to a copy of a Chromium History database",
    )
    source.add_argument(
        "--history-json",
        type=str,
        default=None,
        help="JSON array of {url, lastVisitTime} records",
    )
    build_parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory (default: HISTORY_GRAPH_EXPORT_DIR or ./export)",
    )
    build_parser.add_argument(
        "--delete-cluster",
        action="append",
        default=[],
        metavar="LABEL",
        help="Remove a cluster from the exported graph (repeatable)",
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "build":
        settings = get_settings()
        configure_logging(json_output=settings.log_json, log_level=settings.log_level)
        config = load_pipeline_config(settings.pipeline_config_path)
        try:
            resolve_horizon(args.days, config)
        except ValueError as e:
            parser.error(str(e))
        sys.exit(asyncio.run(_build(args, settings, config)))


if __name__ == "__main__":
    main()
