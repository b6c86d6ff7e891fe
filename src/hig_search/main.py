import logging
from pathlib import Path
from typing import Annotated, Optional

from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from typer import Argument, Exit, Option, Typer

from .config import semantic_disabled
from .crossref import CrossReferenceMapper, MappingTableError, load_mapping_table
from .embeddings import GenAIEmbeddingProvider
from .models import RankedResult, Section
from .search import HybridSearchEngine, InvalidFilter, InvalidQuery, QueryAnalyzer

app = Typer(help="Diagnostics for the HIG relevance engine.")
console = Console()

_CORPUS_ADAPTER = TypeAdapter(list[Section])


def load_corpus(path: Path) -> list[Section]:
    try:
        return _CORPUS_ADAPTER.validate_json(path.read_bytes())
    except OSError as exc:
        console.print(f"[bold red]Cannot read corpus {path}:[/] {escape(str(exc))}")
        raise Exit(code=1) from exc
    except ValidationError as exc:
        console.print(f"[bold red]Invalid corpus {path}:[/]\n{escape(str(exc))}")
        raise Exit(code=1) from exc


def _results_table(results: list[RankedResult], title: str) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("#", justify="right")
    table.add_column("Section")
    table.add_column("Platform")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Sem/Kw/Str/Ctx", justify="right")
    for position, result in enumerate(results, start=1):
        signals = (
            f"{result.semantic_score:.2f}/{result.keyword_score:.2f}/"
            f"{result.structure_score:.2f}/{result.contextual_score:.2f}"
        )
        table.add_row(
            str(position),
            f"{result.title}\n[dim]{result.section_id}[/]",
            result.platform,
            result.category,
            f"{result.combined_score:.3f}",
            signals,
        )
    return table


@app.callback()
def main(
    verbose: Annotated[
        bool, Option("--verbose", "-v", help="Log indexing and ranking details.")
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def analyze(
    query: Annotated[str, Argument(help="Free-text query to analyze.")],
) -> None:
    """Show intent, entities, keywords and concepts for a query."""
    try:
        analysis = QueryAnalyzer().analyze(query)
    except InvalidQuery as exc:
        console.print(f"[bold red]Invalid query:[/] {escape(str(exc))}")
        raise Exit(code=1) from exc

    entities = ", ".join(
        f"{entity.normalized_value} ({entity.type}, {entity.confidence:.1f})"
        for entity in analysis.entities
    )
    content = "\n".join(
        [
            f"[bold]Normalized:[/] {escape(analysis.normalized_query)}",
            f"[bold]Intent:[/] {analysis.intent}",
            f"[bold]Entities:[/] {entities or '-'}",
            f"[bold]Keywords:[/] {', '.join(analysis.keywords) or '-'}",
            f"[bold]Concepts:[/] {', '.join(sorted(analysis.concepts)) or '-'}",
            f"[bold]Platform:[/] {analysis.platform or '-'}",
            f"[bold]Category:[/] {analysis.category or '-'}",
        ]
    )
    console.print(Panel(content, title="Query analysis", title_align="left", border_style="cyan"))


@app.command()
def search(
    query: Annotated[str, Argument(help="Query or glob pattern.")],
    corpus: Annotated[Path, Option("--corpus", "-c", help="JSON file with a list of sections.")],
    platform: Annotated[Optional[str], Option("--platform", "-p")] = None,
    category: Annotated[Optional[str], Option("--category")] = None,
    limit: Annotated[int, Option("--limit", "-n")] = 10,
    semantic: Annotated[
        bool, Option("--semantic/--no-semantic", help="Use the embedding provider.")
    ] = True,
) -> None:
    """Rank corpus sections against a query."""
    sections = load_corpus(corpus)
    provider = GenAIEmbeddingProvider() if semantic and not semantic_disabled() else None
    engine = HybridSearchEngine(provider)
    try:
        with console.status("Ranking sections..."):
            results = engine.search(
                query, sections, {"platform": platform, "category": category}, limit
            )
    except (InvalidQuery, InvalidFilter) as exc:
        console.print(f"[bold red]{escape(str(exc))}[/]")
        raise Exit(code=1) from exc
    finally:
        engine.close()

    if not results:
        console.print("[yellow]No matching sections.[/]")
        return
    console.print(_results_table(results, f"Results for {query!r}"))
    if not all(result.semantic_available for result in results):
        console.print("[dim]Some scores were computed without semantic similarity.[/]")


@app.command()
def pattern(
    pattern: Annotated[str, Argument(help="Glob pattern, e.g. 'UI*' or 'NS????'.")],
    corpus: Annotated[Path, Option("--corpus", "-c", help="JSON file with a list of sections.")],
    limit: Annotated[int, Option("--limit", "-n")] = 10,
    case_sensitive: Annotated[bool, Option("--case-sensitive")] = False,
    whole_word: Annotated[bool, Option("--whole-word")] = False,
) -> None:
    """Match section titles and content against a glob pattern."""
    sections = load_corpus(corpus)
    engine = HybridSearchEngine()
    try:
        outcome = engine.search_pattern(
            pattern,
            sections,
            limit=limit,
            case_sensitive=case_sensitive,
            whole_word=whole_word,
        )
    except InvalidQuery as exc:
        console.print(f"[bold red]{escape(str(exc))}[/]")
        raise Exit(code=1) from exc

    if outcome.results:
        console.print(_results_table(list(outcome.results), f"Matches for {pattern!r}"))
        for result in outcome.results:
            console.print(f"[bold]{escape(result.title)}:[/] {escape(result.snippet)}")
    else:
        console.print("[yellow]No matches.[/]")
    if outcome.examples:
        console.print(f"[bold]Matched:[/] {', '.join(outcome.examples)}")
    for suggestion in outcome.suggestions:
        console.print(f"[dim]- {suggestion}[/]")


def _mapper(mappings: Optional[Path]) -> CrossReferenceMapper:
    try:
        return CrossReferenceMapper(load_mapping_table(mappings))
    except MappingTableError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/]")
        raise Exit(code=1) from exc


@app.command()
def xref(
    concept: Annotated[str, Argument(help="Design concept or section title.")],
    symbol: Annotated[str, Option("--symbol", "-s", help="Technical symbol to match.")] = "",
    platform: Annotated[Optional[str], Option("--platform", "-p")] = None,
    technical_platform: Annotated[
        Optional[list[str]], Option("--technical-platform", "-t")
    ] = None,
    mappings: Annotated[Optional[Path], Option("--mappings", help="Alternate concept table.")] = None,
) -> None:
    """Rank technical symbols implementing a design concept."""
    mapper = _mapper(mappings)
    references = mapper.find_cross_references(concept, symbol, platform, technical_platform)
    if not references:
        console.print("[yellow]No cross-references found.[/]")
        return

    table = Table(title=f"Cross-references for {concept!r}", title_justify="left")
    table.add_column("Symbol")
    table.add_column("Type")
    table.add_column("Confidence", justify="right")
    table.add_column("Valid")
    table.add_column("Explanation")
    for reference in references:
        report = mapper.validate_cross_reference(reference)
        table.add_row(
            reference.technical_symbol,
            reference.mapping_type,
            f"{reference.confidence:.2f}",
            "yes" if report.is_valid else f"no ({'; '.join(report.issues)})",
            reference.explanation,
        )
    console.print(table)


@app.command()
def mapping(
    component: Annotated[str, Argument(help="Component name, e.g. 'button'.")],
    mappings: Annotated[Optional[Path], Option("--mappings", help="Alternate concept table.")] = None,
) -> None:
    """Show guideline references and symbols for a component."""
    mapper = _mapper(mappings)
    result = mapper.get_component_mapping(component)
    if result is None:
        console.print(f"[yellow]No mapping for {component!r}.[/]")
        raise Exit(code=1)

    table = Table(title=result.component_name, title_justify="left")
    table.add_column("Symbol")
    table.add_column("Framework")
    table.add_column("Platform")
    table.add_column("Kind")
    table.add_column("Relevance", justify="right")
    for symbol in result.technical_symbols:
        table.add_row(
            symbol.symbol,
            symbol.framework,
            symbol.platform,
            symbol.symbol_kind,
            f"{symbol.relevance:.2f}",
        )
    console.print(table)
    for guideline in result.design_guidelines:
        console.print(f"[bold]{guideline.title}[/] {guideline.url}")
    related = mapper.find_related_components(result.component_name)
    if related:
        console.print(f"[bold]Related:[/] {', '.join(related)}")
