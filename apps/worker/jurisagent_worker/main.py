from __future__ import annotations

import json
import time
from pathlib import Path

import httpx

from .config import Settings, get_settings
from .tasks import run_queries


def run_cycle(settings: Settings | None = None, client: httpx.Client | None = None) -> Path:
    settings = settings or get_settings()

    records = run_queries(settings, client=client)
    for record in records:
        if record["ok"]:
            print(
                f"[worker] q={record['query']!r} results={record['result_count']} "
                f"errors={record['error_count']} took_ms={record['took_ms']}"
            )
        else:
            print(f"[worker] q={record['query']!r} status={record['status']} message={record.get('message', '')}")

    out_dir = Path(settings.worker_output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_file = out_dir / "latest.json"
    out_file.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"[worker] query_count={len(records)} file={out_file}")
    return out_file


def main() -> None:
    settings = get_settings()
    print("[worker] JurisAgentBR worker started")
    while True:
        run_cycle(settings)
        time.sleep(settings.worker_interval_seconds)


if __name__ == "__main__":
    main()
