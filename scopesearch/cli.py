"""CLI for scopesearch."""

import logging
from pathlib import Path
from typing import Any

import click
import yaml

from .graph.builder import build_graph, graph_stats
from .graph.scope import compute_scoped_dataset
from .graph.traversal import reachable
from .search.access import Actor
from .search.config import SearchConfig
from .search.engine import SearchEngine
from .search.types import QueryOptions


def load_document(path: Path | None) -> dict[str, Any]:
    """Load a YAML (or JSON) mapping from disk."""
    if path is None:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise SystemExit(f"Failed to load {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SystemExit(f"Expected a mapping at the top of {path}")
    return data


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Scoped entity search over connected records."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("dataset_path", type=click.Path(exists=True, path_type=Path))
@click.argument("query", type=str)
@click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path))
@click.option("--actor", "actor_path", type=click.Path(exists=True, path_type=Path))
@click.option("--collection", default="all", help="Collection key or category")
@click.option("--category", default=None, help="Restrict to one category")
@click.option(
    "--limit",
    "-n",
    type=int,
    default=None,
    help="Results per collection [default: config page_limit]",
)
@click.option(
    "--scoped/--no-scoped",
    default=True,
    help="Apply the actor's graph scope before indexing",
)
@click.option("--depth", type=int, default=1, help="Scope traversal depth")
def search(
    dataset_path: Path,
    query: str,
    config_path: Path | None,
    actor_path: Path | None,
    collection: str,
    category: str | None,
    limit: int | None,
    scoped: bool,
    depth: int,
):
    """Search a dataset file."""
    dataset = load_document(dataset_path)
    config = SearchConfig.from_mapping(load_document(config_path))
    actor = Actor.from_mapping(load_document(actor_path)) if actor_path else None

    engine = SearchEngine(defaults=config)
    if scoped and actor is not None:
        dataset = engine.scoped_dataset_for_actor(dataset, actor, max_depth=depth)
    generation = engine.set_index_data(dataset, config, actor)

    result = engine.query(
        query,
        QueryOptions(
            collection=collection,
            category=category,
            limit=limit if limit is not None else config.page_limit,
        ),
    )

    click.echo(f"Searching for: {result.normalized_query}")
    click.echo(f"\nFound {result.total} results:\n")
    for group in result.groups:
        click.echo(f"[{group.collection_key}]")
        for i, hit in enumerate(group.results, 1):
            name = hit.record.get(config.schema.name_field, hit.record_id)
            line = f"  {i}. [{hit.score:.3f}] {name} ({hit.record_id})"
            if hit.alias_fields:
                shown = ", ".join(str(v) for v in hit.alias_fields.values() if v)
                line += f" via alias {shown}"
            click.echo(line)
            if hit.context:
                trail = " > ".join(
                    str(entry.name or entry.id) for entry in reversed(hit.context)
                )
                click.echo(f"     in {trail}")
            aliases = generation.aliases_for(hit.record_id or "")
            if aliases and hit.collection_key == config.schema.primary:
                click.echo(f"     aliases: {len(aliases)}")
        click.echo()


@cli.command("reachable")
@click.argument("dataset_path", type=click.Path(exists=True, path_type=Path))
@click.argument("roots", nargs=-1, required=True)
@click.option("--depth", type=int, default=1, help="BFS depth (0 = roots only)")
@click.option("--edge-type", "edge_types", multiple=True, help="Allowed edge type")
def reachable_cmd(dataset_path: Path, roots: tuple[str, ...], depth: int, edge_types):
    """List record ids reachable from ROOTS."""
    config = SearchConfig()
    dataset = load_document(dataset_path)
    graph = build_graph(dataset.get(config.schema.primary) or [], schema=config.schema)
    found = reachable(
        list(roots),
        graph,
        max_depth=depth,
        allowed_edge_types=list(edge_types) or None,
    )
    for record_id in sorted(found):
        click.echo(record_id)


@cli.command()
@click.argument("dataset_path", type=click.Path(exists=True, path_type=Path))
@click.argument("roots", nargs=-1)
@click.option("--depth", type=int, default=1, help="BFS depth (0 = roots only)")
@click.option("--edge-type", "edge_types", multiple=True, help="Allowed edge type")
def scope(dataset_path: Path, roots: tuple[str, ...], depth: int, edge_types):
    """Show how many records of each collection ROOTS can see."""
    dataset = load_document(dataset_path)
    scoped = compute_scoped_dataset(
        dataset,
        list(roots),
        max_depth=depth,
        allowed_edge_types=list(edge_types) or None,
    )
    for key, value in scoped.items():
        if not isinstance(value, list):
            continue
        before = len(dataset.get(key) or [])
        click.echo(f"{key}: {len(value)}/{before}")


@cli.command()
@click.argument("dataset_path", type=click.Path(exists=True, path_type=Path))
def graph(dataset_path: Path):
    """Print connection graph statistics."""
    config = SearchConfig()
    dataset = load_document(dataset_path)
    stats = graph_stats(
        build_graph(dataset.get(config.schema.primary) or [], schema=config.schema)
    )
    click.echo(str(stats))


if __name__ == "__main__":
    cli()
