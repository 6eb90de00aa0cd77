from schema_sync.services.schema_sync_service import CheckResult, SchemaSyncService, SyncStatus

__all__ = ["CheckResult", "SchemaSyncService", "SyncStatus"]
