"""Prefect tasks that use the harvesting components.

Este arquivo adapta os componentes "baixos" (harvester, serializer, storage)
para o modelo de execução do Prefect: cada task é uma unidade de trabalho com
logs e, quando faz I/O remoto, tentativas (retries).

Tasks only receive plain, hashable inputs (text, config, records) and build
their HTTP clients and key generators themselves.
"""

from __future__ import annotations

import io
from typing import Any, Dict, List, Optional

from prefect import get_run_logger, task

from content_harvester.core.config import HarvestConfig
from content_harvester.core.harvester import ContentHarvester
from content_harvester.core.keys import KeyGenerator
from content_harvester.core.models import HarvestedResources
from content_harvester.core.scraping.fetcher import Fetcher
from content_harvester.core.scraping.page_info import HtmlPageInfoLookup
from content_harvester.serializers import RecordSerializer
from content_harvester.services.storage_backends import bucket_name, get_storage


def _fetcher(config: HarvestConfig) -> Fetcher:
    return Fetcher(
        timeout=config.request_timeout,
        retries=config.retries,
        backoff_factor=config.backoff_factor,
    )


@task(name="harvest_text", retries=0)
def harvest_text_task(text: str, config: HarvestConfig) -> HarvestedResources:
    logger = get_run_logger()
    with _fetcher(config) as fetcher:
        harvester = ContentHarvester.from_config(config, fetcher=fetcher)
        harvested = harvester.harvest_resources(text)
    logger.info("Harvested %d resources from text", len(harvested))

    for resource in harvested.resources:
        disposition = resource.disposition()
        if disposition == "harvested":
            logger.info(
                "Harvested %s -> %s (cleaned=%s)",
                resource.original_url_text,
                resource.final_url,
                resource.cleaned,
            )
        else:
            logger.warning(
                "Skipped %s (%s): %s",
                resource.original_url_text,
                disposition,
                resource.ignore_reason,
            )
        if resource.content is not None and not resource.content.is_valid():
            logger.warning(
                "Content of %s could not be fully classified", resource.final_url
            )
    return harvested


@task(name="serialize_resources", retries=0)
def serialize_resources_task(
    harvested: HarvestedResources, config: HarvestConfig
) -> List[Dict[str, Any]]:
    logger = get_run_logger()
    sink = io.StringIO()
    with _fetcher(config) as fetcher:
        key_generator = KeyGenerator(
            page_info_lookup=HtmlPageInfoLookup(fetcher),
            max_attempts=config.key_max_attempts,
        )
        serializer = RecordSerializer(
            key_generator=key_generator, sink=sink, params=config.template_params
        )
        harvested.serialize(serializer)
    logger.info(
        "Serialized %d records (%d rendered)",
        len(serializer.records),
        len(sink.getvalue().splitlines()),
    )
    return serializer.records


@task(name="store_records", retries=2, retry_delay_seconds=5)
def store_records_task(
    records: List[Dict[str, Any]], config: HarvestConfig
) -> Optional[str]:
    logger = get_run_logger()
    if not records:
        logger.info("No records to store")
        return None

    import pandas as pd

    storage = get_storage(config.destination_bucket)
    location = storage.upload(
        pd.DataFrame(records),
        bucket_name(config.destination_bucket),
        config.output_path,
        format=config.output_format,
    )
    logger.info("Stored %d records at %s", len(records), location)
    return location
