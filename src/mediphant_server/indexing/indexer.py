"""
Corpus Indexer

Offline, one-shot job that loads the corpus into the vector index:

    chunk corpus -> embed every chunk -> validate -> upsert in batches

Commands
--------
test    Check connectivity to the vector index (prints index stats).
index   Embed and upsert the whole corpus.

Both commands need the embedding and vector-index credentials. Any failure is
logged with its cause and the process exits with status 1.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from ..config import Settings, settings as default_settings
from ..core.errors import MediphantError
from ..corpus.chunker import load_corpus
from ..embeddings.embedder import Embedder
from ..embeddings.models import VectorRecord
from ..embeddings.vector_index import PineconeIndex, VectorIndexError
from ..search.orchestrator import OrchestratorConfig, vector_clients_from

logger = logging.getLogger("mediphant.indexer")


class IndexingError(MediphantError):
    """Raised when the indexing job cannot complete."""


class CorpusIndexer:
    def __init__(
        self,
        embedder: Embedder,
        index: PineconeIndex,
        corpus_path: Optional[str] = None,
    ) -> None:
        self.embedder = embedder
        self.index = index
        self.corpus_path = corpus_path

    @classmethod
    def from_settings(cls, settings: Settings) -> "CorpusIndexer":
        """
        Raises
        ------
        IndexingError
            If either credential is missing.
        """
        if not OrchestratorConfig.from_settings(settings).vector_capable:
            raise IndexingError(
                "OPENAI_API_KEY and PINECONE_API_KEY must both be set to index the corpus"
            )
        embedder, index = vector_clients_from(settings)
        return cls(embedder, index, corpus_path=settings.corpus_path)

    async def test_connection(self) -> Dict[str, Any]:
        stats = await self.index.describe_stats()
        logger.info("Vector index connection successful. Index stats: %s", stats)
        return stats

    async def index_corpus(self) -> int:
        """
        Index the full corpus.

        Every chunk is embedded before anything is written, so an embedding
        failure leaves the index untouched.

        Returns
        -------
        int
            Number of vectors upserted.
        """
        logger.info("Starting corpus indexing")

        chunks = load_corpus(self.corpus_path)
        logger.info("Created %d chunks", len(chunks))

        embeddings = await self.embedder.embed([c.text for c in chunks])
        if len(embeddings) != len(chunks):
            raise IndexingError(
                f"Embedding count {len(embeddings)} does not match chunk count {len(chunks)}"
            )
        logger.info("Generated %d embeddings", len(embeddings))

        records: List[VectorRecord] = [
            VectorRecord.from_chunk(chunk, values)
            for chunk, values in zip(chunks, embeddings)
        ]

        try:
            upserted = await self.index.upsert(records)
        except VectorIndexError as exc:
            if exc.upserted:
                logger.error(
                    "Upsert failed after %d of %d vectors were written",
                    exc.upserted,
                    len(records),
                )
            raise

        logger.info("Successfully upserted %d vectors", upserted)
        return upserted


# ---------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--corpus",
        default=None,
        help="Path to an alternative corpus file",
    )
    common.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser = argparse.ArgumentParser(
        prog="mediphant-index",
        description="Load the medication-safety corpus into the vector index.",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("test", parents=[common], help="Check connectivity to the vector index")
    sub.add_parser("index", parents=[common], help="Embed and upsert the corpus")
    return parser


async def run(command: str, indexer: CorpusIndexer) -> None:
    if command == "test":
        await indexer.test_connection()
    elif command == "index":
        await indexer.index_corpus()
    else:
        raise IndexingError(f"Unknown command: {command}")


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = settings or default_settings
    if args.corpus:
        settings = settings.model_copy(update={"corpus_path": args.corpus})

    try:
        indexer = CorpusIndexer.from_settings(settings)
        asyncio.run(run(args.command, indexer))
    except MediphantError as exc:
        logger.error("Indexing job failed: %s", exc)
        return 1
    except OSError as exc:
        logger.error("Indexing job failed: cannot read corpus (%s)", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
