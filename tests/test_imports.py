def test_imports():
    import importlib

    # pandas
    import pandas as pd

    assert getattr(pd, "__version__", None)

    for name in (
        "content_harvester.core.harvester",
        "content_harvester.core.keys",
        "content_harvester.core.scraping",
        "content_harvester.core.scraping.prefect_tasks",
        "content_harvester.serializers",
        "content_harvester.services.storage_backends",
        "content_harvester.flows.harvest_flow",
    ):
        assert importlib.import_module(name) is not None
