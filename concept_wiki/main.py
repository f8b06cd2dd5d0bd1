"""
Engine entry point.

The ingestion collaborators fetch and parse the source files (service list
JSON, funding sources JSON, activity and price CSVs) and hand the parsed rows
here. create_catalog() validates the rows into typed records and runs the
build pipeline once; the returned PublishedCatalog serves every query after.
"""

import logging
from typing import Any, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel

from concept_wiki.schemas.catalog import ActivityRecord, FundingSource, ServiceRecord
from concept_wiki.schemas.pricing import PriceRecord
from concept_wiki.services.errors import require_collection
from concept_wiki.services.pipeline import PublishedCatalog, build_catalog
from concept_wiki.settings import settings

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


# ── Logging ───────────────────────────────────────────────────────────────────
def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s — %(message)s",
    )


def to_records(model: Type[M], rows: Iterable[Any], name: str) -> list[M]:
    """Validate parsed rows (dicts or records) into the given record type."""
    return [
        row if isinstance(row, model) else model.model_validate(row)
        for row in require_collection(rows, name)
    ]


def create_catalog(
    services: Iterable[Any],
    funding_sources: Iterable[Any],
    care_activities: Iterable[Any],
    restorative_activities: Iterable[Any],
    prices: Iterable[Any],
) -> PublishedCatalog:
    """
    Build the published catalog from parsed source rows.

    Raises:
        CatalogInputError: If any collection is None.
        pydantic.ValidationError: If a row has an unparseable value
            (e.g. a price that is not a number).
    """
    logger.info("Loading reference datasets [env=%s]", settings.environment)
    return build_catalog(
        to_records(ServiceRecord, services, "services"),
        to_records(FundingSource, funding_sources, "funding_sources"),
        to_records(ActivityRecord, care_activities, "care_activities"),
        to_records(ActivityRecord, restorative_activities, "restorative_activities"),
        to_records(PriceRecord, prices, "prices"),
    )
