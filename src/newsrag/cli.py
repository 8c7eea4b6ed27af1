"""CLI entry point — Typer app for newsrag commands.

Usage:
    newsrag ingest
    newsrag ingest https://feeds.npr.org/1001/rss.xml
    newsrag query "What happened at the summit?" --stream
    newsrag articles "election results" --source "BBC News"
    newsrag status
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from newsrag import __version__
from newsrag.config import Settings, load_settings

app = typer.Typer(
    name="newsrag",
    help="News feed RAG — ingest feeds, ask questions about recent news.",
    no_args_is_help=True,
)

console = Console()

_state: dict[str, Settings] = {}


@app.callback()
def main(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a settings YAML file",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    _state["settings"] = load_settings(config)


def _settings() -> Settings:
    return _state.get("settings") or load_settings()


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def _build_batcher(settings: Settings):
    from newsrag.embeddings.batcher import EmbeddingBatcher
    from newsrag.embeddings.factory import get_embedding_provider

    cfg = settings.embedding
    provider = get_embedding_provider(
        cfg.provider,
        model=cfg.model,
        dimension=cfg.dimension,
        timeout=cfg.timeout,
    )
    return EmbeddingBatcher(
        provider,
        dimension=cfg.dimension,
        max_input_chars=cfg.max_input_chars,
        max_attempts=cfg.max_attempts,
        retry_delay=cfg.retry_delay,
        batch_size=cfg.batch_size,
        max_concurrency=cfg.max_concurrency,
        batch_pause=cfg.batch_pause,
        query_template=cfg.query_template,
    )


def _build_store(settings: Settings):
    from newsrag.vectorstore.factory import get_vector_store

    cfg = settings.vectorstore
    dimension = settings.embedding.dimension
    if cfg.backend == "qdrant":
        return get_vector_store(
            "qdrant",
            collection_name=cfg.collection,
            dimension=dimension,
            url=cfg.url,
            api_key=cfg.api_key,
            path=cfg.path,
        )
    return get_vector_store(cfg.backend, dimension=dimension)


def _build_query_pipeline(settings: Settings):
    from newsrag.llm.factory import get_llm_provider
    from newsrag.pipeline.interactions import JsonlInteractionLog, MemoryInteractionLog
    from newsrag.pipeline.query import QueryPipeline
    from newsrag.retrieval.context import ContextAssembler
    from newsrag.retrieval.retriever import Retriever
    from newsrag.retrieval.schemas import RetrievalConfig

    llm_cfg = settings.llm
    llm = get_llm_provider(
        llm_cfg.provider,
        model=llm_cfg.model,
        temperature=llm_cfg.temperature,
        max_tokens=llm_cfg.max_tokens,
        timeout=llm_cfg.timeout,
    )

    log_path = settings.interactions.log_path
    interaction_log = JsonlInteractionLog(log_path) if log_path else MemoryInteractionLog()

    ret_cfg = settings.retrieval
    return QueryPipeline(
        retriever=Retriever(_build_batcher(settings), _build_store(settings)),
        llm_provider=llm,
        assembler=ContextAssembler(
            budget=ret_cfg.context_budget,
            max_sources=ret_cfg.max_sources,
        ),
        interaction_log=interaction_log,
        retrieval_config=RetrievalConfig(
            top_k=ret_cfg.top_k,
            similarity_threshold=ret_cfg.similarity_threshold,
        ),
    )


def _build_ingestion_job(settings: Settings):
    from newsrag.acquisition.acquirer import ContentAcquirer
    from newsrag.acquisition.extractor import ContentExtractor
    from newsrag.acquisition.feeds import FeedReader
    from newsrag.acquisition.seen import MemorySeenStore, SqliteSeenStore
    from newsrag.chunking.sentence_chunker import SentenceChunker
    from newsrag.pipeline.ingest import IngestionJob, IngestPipeline

    ing = settings.ingestion
    seen = SqliteSeenStore(ing.seen_store_path) if ing.seen_store_path else MemorySeenStore()
    acquirer = ContentAcquirer(
        feeds=ing.feeds,
        reader=FeedReader(
            user_agent=ing.user_agent,
            feed_timeout=ing.feed_timeout,
            article_timeout=ing.article_timeout,
        ),
        extractor=ContentExtractor(
            min_selector_chars=ing.min_selector_chars,
            min_content_chars=ing.min_content_chars,
        ),
        seen=seen,
        max_entries_per_feed=ing.max_entries_per_feed,
    )

    ch = settings.chunking
    pipeline = IngestPipeline(
        batcher=_build_batcher(settings),
        vector_store=_build_store(settings),
        chunker=SentenceChunker(
            max_chunk_size=ch.max_chunk_size,
            overlap_sentences=ch.overlap_sentences,
            min_final_chunk=ch.min_final_chunk,
            min_text_length=ch.min_text_length,
        ),
    )
    return IngestionJob(acquirer, pipeline)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def ingest(
    feeds: list[str] | None = typer.Argument(
        None, help="Feed URLs to ingest (defaults to configured feeds)",
    ),
) -> None:
    """Run one ingestion pass over the news feeds."""
    job = _build_ingestion_job(_settings())
    try:
        run = job.run_manual(feeds or None)
    finally:
        job.pipeline.vector_store.close()
    if run is None:
        console.print("[yellow]Ingestion already running, skipped.[/]")
        raise typer.Exit(code=1)

    console.print("\n[bold green]Ingestion complete[/]")
    console.print(f"  Articles acquired: {run.articles_acquired}")
    console.print(f"  Articles ingested: {run.articles_ingested}")
    console.print(f"  Chunks stored: {run.chunks_stored}")

    failures = sum(len(r.failures) for r in run.results)
    if failures:
        console.print(f"  [yellow]Chunks dropped after embedding failures:[/] {failures}")


@app.command()
def query(
    question: str = typer.Argument(..., help="Question about recent news"),
    stream: bool = typer.Option(
        False, "--stream", help="Print the answer as it is generated",
    ),
    top_k: int | None = typer.Option(
        None, "--top-k", "-k", help="Number of chunks to retrieve",
    ),
    source: str | None = typer.Option(
        None, "--source", help="Only use articles from this source",
    ),
    session_id: str = typer.Option(
        "cli", "--session", help="Session id recorded in the interaction log",
    ),
) -> None:
    """Ask a question answered from ingested news articles."""
    from newsrag.errors import NewsRagError
    from newsrag.pipeline.channel import ChatEvent, SessionChannel
    from newsrag.retrieval.schemas import RetrievalConfig
    from newsrag.vectorstore.schemas import SearchFilter

    settings = _settings()
    pipeline = _build_query_pipeline(settings)
    config = RetrievalConfig(
        top_k=top_k or settings.retrieval.top_k,
        similarity_threshold=settings.retrieval.similarity_threshold,
        search_filter=SearchFilter(source=source) if source else None,
    )

    console.print(f"\n[bold]Q:[/] {question}")
    try:
        if stream:

            class _ConsoleChannel(SessionChannel):
                def publish(self, session_id, event, payload):
                    if event == ChatEvent.MESSAGE_CHUNK and not payload["isComplete"]:
                        console.print(payload["chunk"], end="", markup=False, highlight=False)

            console.print("\n[bold green]A:[/] ", end="")
            result = pipeline.stream(question, session_id, _ConsoleChannel(), config=config)
            if not result.metrics.chunks_used:
                console.print(result.response, end="", markup=False)
            console.print()
        else:
            result = pipeline.answer(question, session_id=session_id, config=config)
            console.print(f"\n[bold green]A:[/] {result.response}")
    except NewsRagError as exc:
        console.print(f"\n[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        pipeline.retriever.vector_store.close()

    if result.citations:
        table = Table(title="Sources")
        table.add_column("#", style="cyan")
        table.add_column("Title")
        table.add_column("Source")
        table.add_column("Score", justify="right")
        for i, c in enumerate(result.citations, 1):
            table.add_row(str(i), c.title, c.source, f"{c.score:.3f}")
        console.print(table)

    m = result.metrics
    console.print(
        f"\n[dim]Model: {result.model} | {m.processing_time_ms}ms "
        f"| Chunks: {m.chunks_used}/{m.chunks_found} | Context: {m.context_length} chars[/]",
    )


@app.command()
def articles(
    text: str = typer.Argument(..., help="Search text"),
    source: str | None = typer.Option(None, "--source", help="Filter by source"),
    date_from: str | None = typer.Option(None, "--from", help="Earliest publish date (ISO)"),
    date_to: str | None = typer.Option(None, "--to", help="Latest publish date (ISO)"),
    category: str | None = typer.Option(None, "--category", help="Filter by category"),
) -> None:
    """Search ingested articles by similarity."""
    from newsrag.retrieval.retriever import Retriever
    from newsrag.vectorstore.schemas import SearchFilter

    settings = _settings()
    retriever = Retriever(_build_batcher(settings), _build_store(settings))
    try:
        hits = retriever.search_articles(text, SearchFilter(
            source=source,
            date_from=date_from,
            date_to=date_to,
            category=category,
        ))
    finally:
        retriever.vector_store.close()

    if not hits:
        console.print("[yellow]No matching articles.[/]")
        return

    table = Table(title=f"Articles matching '{text}'")
    table.add_column("Score", justify="right", style="cyan")
    table.add_column("Title")
    table.add_column("Source")
    table.add_column("Published")
    table.add_column("Chunks", justify="right")
    for hit in hits:
        table.add_row(
            f"{hit.score:.3f}", hit.title, hit.source, hit.pub_date[:10], str(hit.chunk_count),
        )
    console.print(table)


@app.command()
def status() -> None:
    """Show system status (installed providers, config, vector store)."""
    from newsrag.embeddings.factory import available_providers as emb_providers
    from newsrag.llm.factory import available_providers as llm_providers
    from newsrag.vectorstore.factory import available_stores

    settings = _settings()
    console.print(f"\n[bold green]newsfeed-rag[/] v{__version__}\n")

    table = Table(title="Available Components")
    table.add_column("Layer", style="cyan")
    table.add_column("Available")
    table.add_column("Configured")

    table.add_row("Embedding Providers", ", ".join(emb_providers()), settings.embedding.provider)
    table.add_row("Vector Stores", ", ".join(available_stores()), settings.vectorstore.backend)
    table.add_row("LLM Providers", ", ".join(llm_providers()), settings.llm.provider)
    table.add_row("Feeds", str(len(settings.ingestion.feeds)), "")
    console.print(table)

    try:
        store = _build_store(settings)
        try:
            console.print(f"\nIndexed chunks: [bold]{store.count()}[/]")
        finally:
            store.close()
    except Exception as exc:
        console.print(f"\n[yellow]Vector store unavailable:[/] {exc}")


if __name__ == "__main__":
    app()
