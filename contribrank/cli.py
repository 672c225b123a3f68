"""CLI for contribrank."""

import asyncio
import json
import logging
from pathlib import Path

import click

from .analysis.pagerank import pagerank
from .analysis.weights import edge_evaluator_from_types, load_type_weights
from .config import DEFAULT_PAGERANK_OPTIONS, load_options
from .core.address import NodeAddress, parse_address
from .core.graph import ContributionGraph
from .errors import ContribRankError


@click.group()
def cli():
    """contribrank - Rank the nodes of a contribution graph."""
    pass


@cli.command()
@click.argument("graph_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--weights",
    "-w",
    type=click.Path(exists=True, path_type=Path),
    help="YAML file mapping edge type prefixes to to_weight/fro_weight",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="YAML file with pagerank options",
)
@click.option("--top", "-n", type=int, default=20, help="Number of nodes to show")
@click.option(
    "--prefix",
    type=str,
    default=None,
    help="Node prefix (parts joined by '/') whose scores sum to the total",
)
@click.option("--total-score", type=float, default=None, help="Normalization total")
@click.option("--max-iterations", type=int, default=None, help="Iteration cap")
@click.option("--verbose", "-v", is_flag=True, help="Log convergence diagnostics")
def rank(
    graph_path: Path,
    weights: Path | None,
    config: Path | None,
    top: int,
    prefix: str | None,
    total_score: float | None,
    max_iterations: int | None,
    verbose: bool,
):
    """Rank nodes of a node-link JSON graph and print the top scores."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    try:
        options = load_options(config) if config else DEFAULT_PAGERANK_OPTIONS
        options = options.with_overrides(
            total_score=total_score,
            max_iterations=max_iterations,
            total_score_node_prefix=(
                parse_address(NodeAddress, prefix) if prefix is not None else None
            ),
            verbose=True if verbose else None,
        )
        type_weights = load_type_weights(weights) if weights else {}

        with open(graph_path, "r", encoding="utf-8") as f:
            graph = ContributionGraph.from_node_link(json.load(f))

        result = asyncio.run(
            pagerank(graph, edge_evaluator_from_types(type_weights), options)
        )
    except (ContribRankError, ValueError, KeyError) as exc:
        raise SystemExit(f"Error: {exc}") from exc

    ranked = sorted(result.scores.items(), key=lambda kv: (-kv[1], kv[0].canonical))
    click.echo(
        f"Ranked {len(ranked)} nodes across {len(result.edge_weights)} edges\n"
    )
    for i, (node, score) in enumerate(ranked[:top], 1):
        click.echo(f"{i:>3}. {score:>10.3f}  {node}")


def main():
    cli()


if __name__ == "__main__":
    main()
