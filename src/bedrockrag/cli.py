"""
Command-line interface for bedrockrag.

Commands:
    basic    - Send one fixed prompt to the model and print the answer
    doc-chat - Chat about a single web page, passed whole to the model
    rag      - Load a web page into a vector store, then answer questions
    version  - Show version information

Commands take no flags; everything is configured through the environment
(see bedrockrag.config).
"""

import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from bedrockrag.config import (
    DOC_CHAT_DEFAULT_SOURCE_URL,
    RAG_DEFAULT_SOURCE_URL,
    Settings,
    get_settings,
)
from bedrockrag.exceptions import BedrockRAGError, ConfigError

app = typer.Typer(
    name="bedrockrag",
    help="Question answering over web pages with Amazon Bedrock",
    add_completion=False,
)
console = Console()
logger = logging.getLogger("bedrockrag")

BASIC_PROMPT = "Explain AI in 100 words or less."


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _fatal(error: Exception) -> typer.Exit:
    logger.error(f"{type(error).__name__}: {error}")
    console.print(f"[red]{escape(str(error))}[/red]", highlight=False)
    return typer.Exit(1)


def _startup() -> Settings:
    """Load settings and configure logging, exiting on invalid configuration."""
    try:
        settings = get_settings()
    except ValidationError as e:
        _configure_logging("INFO")
        raise _fatal(ConfigError(f"Invalid configuration: {e}")) from e

    _configure_logging(settings.log_level)
    return settings


def _bedrock_client(settings: Settings):
    from bedrockrag.aws import create_bedrock_client

    return create_bedrock_client(settings.aws_region, settings.bedrock_max_attempts)


def _create_llm(settings: Settings, client):
    """Build the configured LLM; a custom endpoint must answer a test prompt first."""
    from bedrockrag.llm import create_llm

    llm = create_llm(settings, client)
    if settings.llm_provider == "custom":
        healthy, message = llm.health_check()
        if not healthy:
            raise ConfigError(
                f"LLM endpoint {settings.custom_endpoint_url} is unusable: {message}"
            )
        logger.info(message)
    return llm


def _run_loop(answer, label: str) -> None:
    from bedrockrag.chains.loop import QueryLoop

    loop = QueryLoop(answer, console=console, label=label)
    try:
        loop.run()
    except KeyboardInterrupt:
        console.print()
    except BedrockRAGError as e:
        raise _fatal(e) from e


@app.command()
def basic() -> None:
    """Send one prompt to the model and print the response."""
    settings = _startup()

    try:
        client = _bedrock_client(settings) if settings.llm_provider == "bedrock" else None
        llm = _create_llm(settings, client)

        with console.status("[bold green]Generating..."):
            response = llm.invoke(BASIC_PROMPT)
    except BedrockRAGError as e:
        raise _fatal(e) from e

    console.print("response:")
    console.print(response, markup=False, highlight=False)


@app.command("doc-chat")
def doc_chat() -> None:
    """Chat about a web page by passing the whole page to the model."""
    from bedrockrag.chains.qa import DocumentChat
    from bedrockrag.retrieval.loader import fetch_document

    settings = _startup()
    source = settings.resolve_source_url(DOC_CHAT_DEFAULT_SOURCE_URL)

    try:
        client = _bedrock_client(settings) if settings.llm_provider == "bedrock" else None
        llm = _create_llm(settings, client)

        with console.status(f"[bold green]Loading {source}..."):
            document = fetch_document(source, timeout=settings.fetch_timeout)
    except BedrockRAGError as e:
        raise _fatal(e) from e

    console.print(f"[green]Loaded content from {source}[/green]", highlight=False)

    chat = DocumentChat([document], llm, max_tokens=settings.llm_max_tokens)
    _run_loop(chat.answer, label="Response from model")


@app.command()
def rag() -> None:
    """Load a web page into the vector store, then answer questions from it."""
    from bedrockrag.chains.qa import RAGChain
    from bedrockrag.retrieval.loader import fetch_document, ingest
    from bedrockrag.retrieval.resources import create_embedder, create_vector_store
    from bedrockrag.retrieval.retriever import Retriever

    settings = _startup()
    source = settings.resolve_source_url(RAG_DEFAULT_SOURCE_URL)

    try:
        needs_client = "bedrock" in (settings.llm_provider, settings.embedding_provider)
        client = _bedrock_client(settings) if needs_client else None

        embedder = create_embedder(settings, client)
        store = create_vector_store(settings, dimension=embedder.dimension)
        console.print("[green]Vector store ready[/green]")

        llm = _create_llm(settings, client)

        if settings.vector_store == "faiss" and store.size > 0:
            console.print(f"[green]Using saved index with {store.size} chunks[/green]")
        else:
            console.print(f"[cyan]Loading data from {source}[/cyan]", highlight=False)
            with console.status("[bold green]Fetching, chunking and embedding..."):
                document = fetch_document(source, timeout=settings.fetch_timeout)
                added = ingest(
                    [document],
                    embedder,
                    store,
                    chunk_size=settings.chunk_size,
                    overlap=settings.chunk_overlap,
                )
            if settings.vector_store == "faiss" and added:
                store.save(settings.faiss_index_path)
            console.print(f"[green]Data successfully loaded into vector store ({added} chunks)[/green]")
    except BedrockRAGError as e:
        raise _fatal(e) from e

    chain = RAGChain(
        Retriever(embedder, store, top_k=settings.retrieval_top_k),
        llm,
        max_tokens=settings.llm_max_tokens,
        delimiter=settings.context_delimiter,
    )
    _run_loop(chain.answer, label="Model response")


@app.command()
def version() -> None:
    """Show version information."""
    from bedrockrag import __version__

    console.print(f"bedrockrag v{__version__}")


if __name__ == "__main__":
    app()
