import asyncio
import logging

from pylayoutexport import (
    LAYOUT_EXPORT_DECORATORS,
    ExportController,
    ExporterRegistry,
    InMemoryActivityLog,
    InMemoryStorage,
    LocalConfigurationGenerator,
    PollPolicy,
    is_success,
)

logging.basicConfig(level=logging.WARNING)

PUBLISHED_BASE = "https://maps.example.com"


async def published_index(export_config):
    """Stands in for json_result_processor: the index document of a published map."""
    file_id = export_config["output-url"].rsplit("/", 2)[-2]
    return {
        **export_config,
        "index-html": f"{PUBLISHED_BASE}/{file_id}/index.html",
        "thumb-png": f"{PUBLISHED_BASE}/{file_id}/thumb.png",
        "archive-zip": f"{PUBLISHED_BASE}/{file_id}/archive.zip",
    }


async def main():
    storage = InMemoryStorage()
    activity_log = InMemoryActivityLog()
    generator = LocalConfigurationGenerator(id_factory=lambda: "pub-42")

    registry = ExporterRegistry()
    registry.register(
        "publish",
        lambda: {"nodes": {"1": {"title": "Quarterly goals"}}},
        published_index,
        decorators=LAYOUT_EXPORT_DECORATORS,
    )

    controller = ExportController(registry, generator, storage, activity_log).with_poll_policy(
        PollPolicy.FAST
    )

    storage.publish("exports/pub-42/output", "exports/pub-42/output.publish")
    outcome = await controller.start_export(
        "publish",
        {"export": {"title": "Quarterly goals", "description": "Team goals for Q3"}},
    )

    if is_success(outcome):
        for key, value in sorted(outcome.result.items()):
            if key.endswith("-url") or key.endswith("-html") or key == "embed-markup":
                print(f"{key}: {value}")
    else:
        print(f"Publishing failed: {outcome.reason}")

    print(f"Activity: {activity_log.event_names()}")


if __name__ == "__main__":
    asyncio.run(main())
