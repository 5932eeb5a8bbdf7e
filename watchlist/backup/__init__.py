from watchlist.backup.remote import BackupOutcome, RemoteBackup

__all__ = ["BackupOutcome", "RemoteBackup"]
