"""Out of band consistency report between file records and blobs.

Uploads and renames may leave blobs without records, and a failed delete
may leave a record without a blob. Nothing on the request path repairs
either; this module finds them. Run it while the owner is idle: an upload
in flight looks like an orphaned blob until its record lands.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Set

from cloudvault.stores.metadata import MetadataStore
from cloudvault.stores.objects import ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    owner_id: int
    orphaned_blobs: List[str] = field(default_factory=list)
    dangling_records: List[int] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.orphaned_blobs and not self.dangling_records


def reconcile(metadata: MetadataStore, objects: ObjectStore, owner_id: int) -> ReconcileReport:
    blobs = set(objects.list_paths(f"{owner_id}/"))
    records = metadata.query_all_files(owner_id)
    recorded_paths = {file.storage_path for file in records}

    report = ReconcileReport(
        owner_id=owner_id,
        orphaned_blobs=sorted(blobs - recorded_paths),
        dangling_records=sorted(f.id for f in records if f.storage_path not in blobs),
    )
    if not report.consistent:
        logger.warning(
            "Owner %d: %d orphaned blobs, %d dangling records",
            owner_id,
            len(report.orphaned_blobs),
            len(report.dangling_records),
        )
    return report


def purge_orphans(objects: ObjectStore, report: ReconcileReport) -> Set[str]:
    """Delete the orphaned blobs of ``report``; returns the ones that survived."""
    if not report.orphaned_blobs:
        return set()
    failed = objects.delete(report.orphaned_blobs)
    logger.info(
        "Owner %d: purged %d orphaned blobs",
        report.owner_id,
        len(report.orphaned_blobs) - len(failed),
    )
    return failed
