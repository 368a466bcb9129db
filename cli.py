"""
Jan Sahayak CLI - Command Line Interface
"""

import asyncio
import logging
import os
import uuid
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

# Load environment variables
load_dotenv()

console = Console()

# Paths
BASE_DIR = Path(__file__).parent.resolve()
DATA_DIR = BASE_DIR / "data"
INDEX_DIR = DATA_DIR / "index"
SCHEMES_FILE = DATA_DIR / "schemes.json"
DEFAULT_MODEL = "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2"


def _load_retriever(index_dir: str, model: str, use_llm: bool = True):
    """Embedder + saved store + optional Gemini generator, wrapped in a retriever."""
    from jansahayak.indexing import KnowledgeStore, SentenceTransformerEmbedder
    from jansahayak.llm import GeminiGenerator
    from jansahayak.retrieval import SchemeRetriever

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Loading model...", total=None)
        embedder = SentenceTransformerEmbedder(model_name=model)
        embedder.embed("warm up")

        progress.update(task, description="Loading index...")
        store = KnowledgeStore.load(index_dir)

    generator = None
    if use_llm:
        if os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"):
            generator = GeminiGenerator()
            console.print("[green]✓ Gemini connected - answers will be generated[/green]")
        else:
            console.print("[yellow]Set GEMINI_API_KEY for AI-generated answers (using templates)[/yellow]")

    return SchemeRetriever(store, embedder, generator=generator), generator


@click.group()
@click.version_option(version="1.0.0")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Jan Sahayak CLI - bilingual government scheme and civic issue assistant"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@click.option("--schemes-file", "-s", default=str(SCHEMES_FILE), help="JSON file with scheme documents")
@click.option("--index-dir", "-i", default=str(INDEX_DIR), help="Output directory for the index")
@click.option("--model", "-m", default=DEFAULT_MODEL, help="Embedding model name")
@click.option("--max-tokens", default=120, help="Maximum words per chunk")
def ingest(schemes_file: str, index_dir: str, model: str, max_tokens: int):
    """Chunk, embed and index scheme documents."""
    from jansahayak.indexing import (
        KnowledgeStore,
        SchemeChunker,
        SchemeIndexer,
        SentenceTransformerEmbedder,
        load_schemes_file,
    )

    console.print(Panel.fit(
        "[bold blue]Building Scheme Index[/bold blue]\n"
        f"Model: {model}\n"
        f"Schemes: {schemes_file}\n"
        f"Index: {index_dir}",
        title="🔍 Ingesting Schemes"
    ))

    documents = load_schemes_file(schemes_file)
    if not documents:
        console.print("[red]No scheme documents found![/red]")
        return

    embedder = SentenceTransformerEmbedder(model_name=model)
    embedder.embed("warm up")
    store = KnowledgeStore(embedding_dim=embedder.embedding_dim)
    indexer = SchemeIndexer(store, embedder, SchemeChunker(max_tokens=max_tokens))

    for doc in documents:
        count = indexer.index(doc)
        console.print(f"[green]✓[/green] {doc.scheme_id} v{doc.version}: {count} chunks")

    store.save(index_dir)
    _print_stats(store.get_stats())
    console.print(f"\n[green]✓ Index saved to {index_dir}[/green]")


@cli.command()
@click.argument("query")
@click.option("--index-dir", "-i", default=str(INDEX_DIR), help="Directory with the index")
@click.option("--model", "-m", default=DEFAULT_MODEL, help="Embedding model")
@click.option("--language", "-l", type=click.Choice(["en", "hi", "any"]), default="en", help="Content language")
@click.option("--category", "-c", default=None, help="Restrict to a scheme category")
@click.option("--top-k", "-k", default=3, help="Number of results to return")
def search(query: str, index_dir: str, model: str, language: str, category: str | None, top_k: int):
    """Search schemes without starting a conversation."""
    from jansahayak.models import Language
    from jansahayak.retrieval import RetrievalConfig, SearchContext

    if not Path(index_dir).exists():
        console.print("[red]Index not found! Run 'ingest' first.[/red]")
        return

    retriever, _ = _load_retriever(index_dir, model, use_llm=False)
    retriever.config = RetrievalConfig(top_k=top_k, rerank_top_n=max(top_k, 10))
    lang = None if language == "any" else Language(language)
    result = retriever.search(query, lang, SearchContext(category=category))

    if result.is_empty:
        console.print("[yellow]No scheme cleared the similarity floor.[/yellow]")
        return
    if result.cross_language:
        console.print("[yellow]No match in the requested language; showing the other language.[/yellow]")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Scheme", style="cyan", width=24)
    table.add_column("Section", width=12)
    table.add_column("Text", width=60)
    table.add_column("Score", justify="right", width=8)
    for hit in result.hits:
        text = hit.chunk.text
        table.add_row(
            hit.scheme_id,
            hit.chunk.section.value,
            text[:200] + "..." if len(text) > 200 else text,
            f"{hit.score:.3f}",
        )
    console.print(table)


@cli.command()
@click.argument("scheme_id")
@click.option("--index-dir", "-i", default=str(INDEX_DIR), help="Directory with the index")
@click.option("--model", "-m", default=DEFAULT_MODEL, help="Embedding model")
@click.option("--age", type=int, default=None)
@click.option("--income", type=float, default=None, help="Annual family income in rupees")
@click.option("--occupation", default=None)
@click.option("--state", default=None)
@click.option("--land", type=float, default=None, help="Land holding in acres")
@click.option("--bpl/--no-bpl", default=None, help="Holds a BPL card")
@click.option("--language", "-l", type=click.Choice(["en", "hi"]), default="en")
def eligibility(scheme_id, index_dir, model, age, income, occupation, state, land, bpl, language):
    """Check a profile against a scheme's eligibility criteria."""
    from jansahayak.errors import NotFoundError
    from jansahayak.models import Language, UserProfile

    retriever, _ = _load_retriever(index_dir, model)
    profile = UserProfile(
        age=age, annual_income=income, occupation=occupation,
        state=state, land_holding_acres=land, is_bpl=bpl,
    )
    try:
        result = retriever.check_eligibility(scheme_id, profile, Language(language))
    except NotFoundError:
        console.print(f"[red]Unknown scheme: {scheme_id}[/red]")
        return

    colour = "green" if result.eligible else "yellow"
    console.print(Panel(result.explanation, title=f"📋 {scheme_id}", border_style=colour))
    for text in result.matched:
        console.print(f"  [green]✓[/green] {text}")
    for text in result.unmatched:
        console.print(f"  [red]✗[/red] {text}")
    for text in result.missing_information:
        console.print(f"  [yellow]?[/yellow] {text}")


@cli.command()
@click.option("--index-dir", "-i", default=str(INDEX_DIR), help="Directory with the index")
@click.option("--model", "-m", default=DEFAULT_MODEL, help="Embedding model")
def chat(index_dir: str, model: str):
    """Start an interactive conversation (text in place of speech)."""
    from jansahayak.conversation import DialogueOrchestrator, InMemorySessionStore
    from jansahayak.issues import IssueTracker

    if not Path(index_dir).exists():
        console.print("[red]Index not found! Run 'ingest' first.[/red]")
        return

    console.print(Panel.fit(
        "[bold blue]Jan Sahayak[/bold blue]\n"
        "Ask about government schemes, report a civic problem or track a complaint.\n"
        "English, Hindi or a mix are all fine. Type 'quit' or 'exit' to end the session.",
        title="🇮🇳 Citizen Assistant"
    ))

    retriever, generator = _load_retriever(index_dir, model)
    orchestrator = DialogueOrchestrator(retriever, InMemorySessionStore(), IssueTracker(), generator=generator)
    session_id = uuid.uuid4().hex
    console.print(f"[dim]Session {session_id}[/dim]\n")

    while True:
        try:
            utterance = console.input("[bold cyan]You:[/bold cyan] ").strip()
        except (KeyboardInterrupt, EOFError):
            console.print("\n[dim]Goodbye![/dim]")
            break

        if not utterance:
            continue
        if utterance.lower() in ["quit", "exit", "q"]:
            console.print("[dim]Goodbye![/dim]")
            break

        response = asyncio.run(orchestrator.process(session_id, utterance))
        console.print(f"\n[bold green]Assistant:[/bold green] {response.text}")
        if response.data is not None and response.data.kind == "scheme_results":
            for i, item in enumerate(response.data.items, start=1):
                console.print(f"  [dim]{i}. {item.name} ({item.category}, {item.score:.2f})[/dim]")
        if response.suggestions:
            console.print(f"[dim]Try: {' | '.join(response.suggestions)}[/dim]")
        console.print()


@cli.command()
@click.option("--index-dir", "-i", default=str(INDEX_DIR), help="Directory with the index")
def stats(index_dir: str):
    """Show statistics about the indexed schemes."""
    from jansahayak.indexing import KnowledgeStore

    if not Path(index_dir).exists():
        console.print("[red]Index not found! Run 'ingest' first.[/red]")
        return

    store = KnowledgeStore.load(index_dir)
    console.print(Panel.fit("[bold blue]Index Statistics[/bold blue]", title="📊 Stats"))
    _print_stats(store.get_stats())

    schemes = Table(title="Current schemes")
    schemes.add_column("Scheme", style="cyan")
    schemes.add_column("Version", justify="right")
    schemes.add_column("Category")
    schemes.add_column("Name")
    for doc in sorted(store.list_schemes(), key=lambda d: d.scheme_id):
        schemes.add_row(doc.scheme_id, str(doc.version), doc.category, doc.name.en or doc.name.hi)
    console.print(schemes)
    console.print(f"[dim]Index location: {index_dir}[/dim]")


def _print_stats(stats: dict):
    table = Table()
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Schemes", str(stats["schemes"]))
    table.add_row("Versions", str(stats["versions"]))
    table.add_row("Chunks (all versions)", str(stats["chunks"]))
    table.add_row("Chunks (current)", str(stats["current_chunks"]))
    for language, count in sorted(stats["chunks_by_language"].items()):
        table.add_row(f"  {language}", str(count))
    table.add_row("Embedding Dimension", str(stats["embedding_dim"]))
    console.print(table)


if __name__ == "__main__":
    cli()
