"""
Fluxo de colheita de links

Este arquivo define um "flow" do Prefect que coordena a colheita dos links
encontrados em um texto (por exemplo, um tweet):

1. Valida a configuração do job (regras, timeouts, destino).
2. Descobre os links no texto e resolve cada um (redirects HTTP e, se
   configurado, redirects HTML via <meta http-equiv="refresh">).
3. Gera chaves únicas e slugs e serializa um registro por link.
4. Guarda a tabela de registros no destino (diretório local ou GCS).
"""

from __future__ import annotations

from typing import Any, Dict, List

from prefect import flow, get_run_logger

from content_harvester.core.config import HarvestConfig
from content_harvester.core.scraping.prefect_tasks import (
    harvest_text_task,
    serialize_resources_task,
    store_records_task,
)


@flow(name="Content Harvester", log_prints=True)
def harvest_flow(config_dict: dict, text: str) -> List[Dict[str, Any]]:
    """Harvest every URL in `text` and store one record per resource.

    config_dict: must conform to `HarvestConfig`.
    """
    logger = get_run_logger()
    try:
        config = HarvestConfig(**config_dict)
        logger.info("Config valid for job: %s", config.job_name)
    except Exception as e:
        logger.error("Invalid config: %s", e)
        raise

    harvested = harvest_text_task(text, config)
    records = serialize_resources_task(harvested, config)
    location = store_records_task(records, config)

    logger.info(
        "Job %s completed. %d resources harvested, stored at %s.",
        config.job_name,
        len(records),
        location,
    )
    return records


if __name__ == "__main__":
    payload = {
        "job_name": "tweet_links",
        "environment": "dev",
        "follow_html_redirects": True,
        "destination_bucket": "local",
        "destination_path": "harvested",
        "template_params": {"provenance_type": "tweet"},
    }
    harvest_flow(
        payload,
        "Check out the PROV-O specification document "
        "http://ceur-ws.org/Vol-1401/paper-05.pdf",
    )
