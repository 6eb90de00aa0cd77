"""Orchestrates one schema sync run.

retrieval -> extraction -> known-node augmentation -> diff against the local file
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from loguru import logger

from schema_sync.config import SchemaSyncConfig
from schema_sync.repository.doc_chunk import RetrievalStats
from schema_sync.repository.retrieval_adapter import RetrievalAdapter
from schema_sync.repository.retrieval_errors import RetrievalError
from schema_sync.schema.augmenter import add_known_nodes
from schema_sync.schema.diff import compare
from schema_sync.schema.extractor import extract_from_chunks
from schema_sync.schema.local import load_local_schema
from schema_sync.schema.models import DiffReport, SchemaDocument
from schema_sync.schema.version import resolve_version
from schema_sync.sync_state import read_last_sync, write_sync_state


@dataclass
class CheckResult:
    """Everything a check produced, for display or persistence."""

    local: SchemaDocument
    remote: SchemaDocument
    report: DiffReport
    last_sync: Optional[str] = None


@dataclass
class SyncStatus:
    """Local schema summary plus the state of the retrieval backend."""

    local_path: Path
    local_version: Optional[str]
    local_nodes: int
    local_error: Optional[str] = None
    retrieval: Optional[RetrievalStats] = None
    retrieval_error: Optional[str] = None
    last_sync: Optional[str] = None


class SchemaSyncService:
    """Builds the remote schema from documentation and compares it to the local one."""

    def __init__(self, app_config: SchemaSyncConfig, adapter: Optional[RetrievalAdapter] = None):
        self.app_config = app_config
        self.adapter = adapter or RetrievalAdapter.from_config(app_config)

    async def extract_remote_schema(self) -> SchemaDocument:
        """Recover the remote schema. The adapter must already be initialized."""
        chunks = await self.adapter.query_candidate_chunks(self.app_config.topics)
        version = await resolve_version(self.adapter.version_texts)

        extraction = extract_from_chunks(chunks, self.app_config.merge_policy)
        if extraction.conflicts:
            logger.warning(
                f"{len(extraction.conflicts)} definitions were redefined across chunks "
                f"(merge policy: {self.app_config.merge_policy.value})"
            )

        schema = SchemaDocument(
            version=version,
            nodes=extraction.nodes,
            enums=extraction.enums,
            sources=extraction.sources,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        added = add_known_nodes(schema)
        logger.info(
            f"Remote schema {schema.version}: {len(schema.nodes)} nodes "
            f"({len(added)} from catalog), {len(schema.enums)} enums, "
            f"{len(schema.sources)} source chunks"
        )
        return schema

    async def extract(self) -> SchemaDocument:
        """Open the retrieval backend, extract the remote schema and close it."""
        async with self.adapter:
            return await self.extract_remote_schema()

    async def check(self, local_path: Optional[Path] = None) -> CheckResult:
        """Compare the local schema file against the documentation.

        The local file is read first so a bad path fails before any network work.
        A completed comparison is recorded in the sync state file.
        """
        path = local_path or self.app_config.local_schema_path
        local = load_local_schema(path)
        logger.info(f"Local schema loaded: {path}")

        remote = await self.extract()
        report = compare(local, remote)

        result = CheckResult(local=local, remote=remote, report=report)
        try:
            result.last_sync = write_sync_state(self.app_config.sync_state_path, report)
        except OSError as e:
            logger.warning(f"Could not record sync state at {self.app_config.sync_state_path}: {e}")
        return result

    async def status(self, local_path: Optional[Path] = None) -> SyncStatus:
        """Summarize the local schema and query the retrieval backend.

        Problems on either side are reported in the result instead of raised.
        """
        path = local_path or self.app_config.local_schema_path
        result = SyncStatus(local_path=path, local_version=None, local_nodes=0)
        result.last_sync = read_last_sync(self.app_config.sync_state_path)

        try:
            local = load_local_schema(path)
            result.local_version = local.version
            result.local_nodes = len(local.nodes)
        except ValueError as e:
            result.local_error = str(e)

        try:
            async with self.adapter:
                result.retrieval = await self.adapter.get_stats()
        except RetrievalError as e:
            logger.warning(f"Retrieval backend unavailable: {e}")
            result.retrieval_error = str(e)

        return result
