import asyncio
import json
import logging

from pylayoutexport import (
    ExportController,
    ExporterRegistry,
    InMemoryStorage,
    LocalConfigurationGenerator,
    PollPolicy,
    Success,
    build_map_layout_exporter,
)
from pylayoutexport.activity import SqliteActivityLog

logging.basicConfig(level=logging.WARNING)

LAYOUT = {
    "nodes": {
        "1": {"title": "Launch plan", "attr": {"icon": {"url": "local:rocket"}}},
        "2": {"title": "Marketing"},
        "3": {"title": "Engineering"},
    },
}


async def conversion_service(storage: InMemoryStorage, output_list_url: str) -> None:
    """Pretend to convert the upload: wait a little, then list the output."""
    while not storage.objects():
        await asyncio.sleep(0.01)
    upload = storage.objects()[-1]
    print(f"Converter received {len(upload.content)} bytes (digest {upload.digest})")
    await asyncio.sleep(0.2)
    storage.publish(output_list_url, f"{upload.key}.pdf")


async def main():
    storage = InMemoryStorage(progress_events=("25%", "100%"))
    generator = LocalConfigurationGenerator(id_factory=lambda: "demo-001")
    activity_log = SqliteActivityLog("data/simple_export.db")
    await activity_log.connect()

    registry = ExporterRegistry()
    registry.register(
        "pdf",
        build_map_layout_exporter(lambda: LAYOUT, lambda url: f"https://icons.example.com/{url}"),
    )

    controller = ExportController(registry, generator, storage, activity_log).with_poll_policy(
        PollPolicy.with_periods(error_ms=500, output_ms=50)
    )

    converter = asyncio.create_task(conversion_service(storage, "exports/demo-001/output"))
    job = controller.start_export("pdf", {"export": {"page-size": "A4", "orientation": "landscape"}})

    async for message in job.progress():
        print(f"[progress] {message}")

    outcome = await job
    await converter

    match outcome:
        case Success(result, file_id):
            print(f"Export {file_id} ready at {result['output-url']}")
        case _:
            print(f"Export {outcome.file_id} failed: {outcome.reason}")

    uploaded = json.loads(storage.get_object("exports/demo-001/source.json").content)
    print(f"Uploaded icon URL: {uploaded['nodes']['1']['attr']['icon']['url']}")

    for event in await activity_log.events():
        print(f"[activity] {event.category}: {event.event_name}")
    await activity_log.close()


if __name__ == "__main__":
    asyncio.run(main())
