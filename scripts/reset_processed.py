from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from notesmerge.config import CONFIG_PATH, load_settings  # noqa: E402
from notesmerge.storage.properties import JsonPropertyStore  # noqa: E402


def main(argv: Optional[List[str]] = None) -> int:
    """Clear processed markers so the given documents are merged again next run.

    The merge run never clears markers itself; this is the manual way back.
    """
    parser = argparse.ArgumentParser(description="Clear processed markers of the target document.")
    parser.add_argument("ids", nargs="*", help="Source document ids to reset")
    parser.add_argument("--all", action="store_true", help="Reset every marker of the target")
    parser.add_argument("--list", action="store_true", help="Only print the marked ids")
    parser.add_argument("--config", "-c", default=CONFIG_PATH, help="Path to settings JSON")
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    store = JsonPropertyStore(settings.properties_path, scope=settings.target_id or settings.target_document)
    marked = list(store.keys())

    if args.list:
        for key in marked:
            print(f"{key}\t{store.get(key)}")
        return 0

    to_reset = marked if args.all else args.ids
    if not to_reset:
        print("Nothing to reset: pass ids or --all")
        return 2

    removed = 0
    for key in to_reset:
        if key in marked:
            store.delete(key)
            removed += 1
        else:
            print(f"Warning: {key} is not marked; skipped")
    print(f"Reset {removed} marker(s) in {settings.properties_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
