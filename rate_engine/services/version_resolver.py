"""Contract version resolver — picks the version governing a given date."""

import logging
from collections.abc import Sequence
from datetime import date, datetime

from rate_engine.errors import AmbiguousVersionOverlap, NoActiveVersion
from rate_engine.schemas.contract import ContractVersion

logger = logging.getLogger(__name__)


def resolve_version(versions: Sequence[ContractVersion], on_date: date | datetime) -> ContractVersion:
    """Return the single version in force on ``on_date``.

    Overlapping versions are settled only through ``supersedes_id``: a
    candidate replaced by another candidate drops out. Anything still
    overlapping after that is a data fault, not something to guess at.
    """
    if isinstance(on_date, datetime):
        on_date = on_date.date()

    candidates = [v for v in versions if v.covers(on_date)]
    if not candidates:
        raise NoActiveVersion(f"No contract version is valid on {on_date.isoformat()}", on_date=on_date.isoformat())
    if len(candidates) == 1:
        return candidates[0]

    superseded = {v.supersedes_id for v in candidates if v.supersedes_id is not None}
    remaining = [v for v in candidates if v.id not in superseded]

    if len(remaining) == 1:
        logger.debug(
            f"Version {remaining[0].id} supersedes {len(candidates) - 1} overlapping version(s) on {on_date}"
        )
        return remaining[0]

    ids = [v.id for v in (remaining or candidates)]
    raise AmbiguousVersionOverlap(
        f"{len(ids)} contract versions overlap on {on_date.isoformat()} without supersession: {', '.join(ids)}",
        on_date=on_date.isoformat(),
        version_ids=ids,
    )
