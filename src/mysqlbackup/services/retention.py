"""Retention policy enforcement over the backup directory.

A single pass reads the clock once, lists the directory once, orders the
artifacts newest first and walks them, deleting every artifact that is either
older than ``keep_days`` or beyond the ``max_backups`` newest survivors.
"""

import re
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from mysqlbackup.constants import ARTIFACT_NAME_PATTERN, SECONDS_PER_DAY
from mysqlbackup.models import BackupArtifact, CleanupResult, RetentionPolicy

REASON_AGE = "age"
REASON_COUNT = "count"

_ARTIFACT_RE = re.compile(ARTIFACT_NAME_PATTERN)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_artifact_name(name: str) -> Optional[str]:
    """Returns the database embedded in a backup file name, or None for unrelated files."""
    match = _ARTIFACT_RE.match(name)
    if match is None:
        return None
    return match.group("database")


def age_in_days(artifact: BackupArtifact, now: datetime) -> float:
    return (now - artifact.modified_at).total_seconds() / SECONDS_PER_DAY


class RetentionService:
    """Deletes backup artifacts that violate a RetentionPolicy."""

    def __init__(self, logger, filesystem_service, clock: Callable[[], datetime] = utc_now):
        self.logger = logger
        self.filesystem_service = filesystem_service
        self.clock = clock

    def list_artifacts(self, directory: str) -> List[BackupArtifact]:
        artifacts: List[BackupArtifact] = []
        for entry in self.filesystem_service.list_files(directory):
            database = parse_artifact_name(entry.name)
            if database is None:
                continue
            artifacts.append(
                BackupArtifact(
                    path=entry.path,
                    database=database,
                    modified_at=entry.modified_at,
                    size_bytes=entry.size_bytes,
                )
            )
        return artifacts

    @staticmethod
    def plan(
        artifacts: List[BackupArtifact],
        policy: RetentionPolicy,
        now: datetime,
    ) -> List[Tuple[BackupArtifact, str]]:
        """Artifacts to delete, newest first, each with the rule that evicts it."""
        ordered = sorted(artifacts, key=lambda artifact: artifact.path)
        ordered.sort(key=lambda artifact: artifact.modified_at, reverse=True)

        doomed: List[Tuple[BackupArtifact, str]] = []
        retained = 0
        for artifact in ordered:
            if age_in_days(artifact, now) > policy.keep_days:
                doomed.append((artifact, REASON_AGE))
            elif retained >= policy.max_backups:
                doomed.append((artifact, REASON_COUNT))
            else:
                retained += 1
        return doomed

    def enforce(self, directory: str, policy: RetentionPolicy, dry_run: bool = False) -> CleanupResult:
        now = self.clock()
        artifacts = self.list_artifacts(directory)
        doomed = self.plan(artifacts, policy, now)

        self.logger.info(
            "Retention: %s artifact(s) found, %s to delete (keep_days=%s, max_backups=%s)",
            len(artifacts),
            len(doomed),
            policy.keep_days,
            policy.max_backups,
        )

        deleted_paths: List[str] = []
        freed_bytes = 0
        for artifact, reason in doomed:
            if dry_run:
                self.logger.info("Would delete backup (%s): %s", reason, artifact.path)
            else:
                try:
                    self.filesystem_service.remove_file(artifact.path)
                except FileNotFoundError:
                    self.logger.warning("Backup already gone, skipping: %s", artifact.path)
                    continue
                except OSError as exc:
                    self.logger.error("Could not delete backup %s: %s", artifact.path, exc)
                    continue
                self.logger.info("Backup deleted (%s): %s", reason, artifact.path)

            deleted_paths.append(artifact.path)
            freed_bytes += artifact.size_bytes

        return CleanupResult(
            deleted_count=len(deleted_paths),
            freed_bytes=freed_bytes,
            deleted_paths=tuple(deleted_paths),
        )
