"""Command-line interface for genome-scout."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import click
from pydantic import BaseModel

from genome_scout.config import get_settings
from genome_scout.data_sources.base_client import DataSourceError
from genome_scout.models.model_gene import GeneBounds
from genome_scout.services.genome_data import GenomeDataService


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


def _emit(value: Any, output: str | None) -> None:
    text = json.dumps(_to_jsonable(value), indent=2)
    if output:
        Path(output).write_text(text)
        click.echo(f"Results saved to: {output}")
    else:
        click.echo(text)


def _run(ctx: click.Context, operation) -> Any:
    """Run ``operation(service)`` on a fresh service, mapping errors to exit codes."""

    async def runner() -> Any:
        async with GenomeDataService(ctx.obj["config"]) as service:
            return await operation(service)

    try:
        return asyncio.run(runner())
    except DataSourceError as e:
        raise click.ClickException(str(e)) from e


output_option = click.option(
    "-o", "--output", type=click.Path(), help="Output file path (JSON)"
)
genome_option = click.option(
    "-g", "--genome", default="hg38", show_default=True, help="Assembly id"
)


@click.group()
@click.version_option(package_name="genome-scout")
@click.option("--analysis-url", default=None, help="Prediction backend URL")
@click.pass_context
def main(ctx: click.Context, analysis_url: str | None):
    """genome-scout: browse assemblies, genes, sequence and ClinVar variants."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = settings.to_services_config()
    if analysis_url:
        config = config.model_copy(update={"analysis_url": analysis_url})
    ctx.obj = {"config": config}


@main.command()
@output_option
@click.pass_context
def assemblies(ctx: click.Context, output: str | None):
    """List reference assemblies grouped by organism."""
    _emit(_run(ctx, lambda s: s.ucsc.list_assemblies()), output)


@main.command()
@genome_option
@output_option
@click.pass_context
def chromosomes(ctx: click.Context, genome: str, output: str | None):
    """List primary chromosomes of an assembly."""
    _emit(_run(ctx, lambda s: s.ucsc.list_chromosomes(genome)), output)


@main.command()
@click.argument("query")
@genome_option
@output_option
@click.pass_context
def search(ctx: click.Context, query: str, genome: str, output: str | None):
    """Search genes by free text."""
    _emit(_run(ctx, lambda s: s.gene_search.search(query, genome)), output)


@main.command()
@click.argument("gene_id")
@click.option("-c", "--chrom", default=None, help="Also load sequence and ClinVar for this chromosome")
@genome_option
@output_option
@click.pass_context
def gene(ctx: click.Context, gene_id: str, chrom: str | None, genome: str, output: str | None):
    """Resolve a gene id to bounds and a viewing window."""
    if chrom:
        result = _run(ctx, lambda s: s.load_gene_view(gene_id, chrom, genome))
    else:
        result = _run(ctx, lambda s: s.ncbi_gene.resolve_gene(gene_id))
    _emit(result, output)


@main.command()
@click.argument("chrom")
@click.argument("start", type=int)
@click.argument("end", type=int)
@genome_option
@output_option
@click.pass_context
def sequence(ctx: click.Context, chrom: str, start: int, end: int, genome: str, output: str | None):
    """Fetch bases for a 1-based inclusive range."""
    _emit(_run(ctx, lambda s: s.ucsc.fetch_sequence(chrom, start, end, genome)), output)


@main.command()
@click.argument("chrom")
@click.argument("start", type=int)
@click.argument("end", type=int)
@genome_option
@output_option
@click.pass_context
def clinvar(ctx: click.Context, chrom: str, start: int, end: int, genome: str, output: str | None):
    """List ClinVar variants between two positions."""
    bounds = GeneBounds.from_endpoints(start, end)
    _emit(_run(ctx, lambda s: s.clinvar.resolve_variants(chrom, bounds, genome)), output)


@main.command()
@click.argument("chrom")
@click.argument("position", type=int)
@click.argument("alternative")
@click.option("-r", "--reference", default=None, help="Reference base, if known")
@genome_option
@output_option
@click.pass_context
def analyze(
    ctx: click.Context,
    chrom: str,
    position: int,
    alternative: str,
    reference: str | None,
    genome: str,
    output: str | None,
):
    """Predict the effect of a single-nucleotide variant."""

    async def operation(service: GenomeDataService):
        return await service.require_analysis().analyze(
            position, alternative, genome, chrom, reference=reference
        )

    _emit(_run(ctx, operation), output)


@main.command("analyze-clinvar")
@click.argument("chrom")
@click.argument("start", type=int)
@click.argument("end", type=int)
@genome_option
@click.option("-n", "--max-concurrent", type=int, default=None, help="Analyses in flight")
@output_option
@click.pass_context
def analyze_clinvar(
    ctx: click.Context,
    chrom: str,
    start: int,
    end: int,
    genome: str,
    max_concurrent: int | None,
    output: str | None,
):
    """Fetch ClinVar variants in a range and analyze every SNV among them."""
    bounds = GeneBounds.from_endpoints(start, end)

    async def operation(service: GenomeDataService):
        variants = await service.clinvar.resolve_variants(chrom, bounds, genome)
        return await service.analyze_clinvar_variants(variants, genome, max_concurrent)

    _emit(_run(ctx, operation), output)


if __name__ == "__main__":
    main()
