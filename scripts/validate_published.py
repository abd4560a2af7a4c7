#!/usr/bin/env python3
"""Validation script for published offer documents.

Scans the file publish channel's output directory (OUTPUT_DIR, or the path
given as the first argument) and validates every shop document against the
published offers schema. Exits with error code if any invalid files are found.
"""

from __future__ import annotations

import sys
from pathlib import Path

from bundle_offers.domain.common.errors import MalformedBlob
from bundle_offers.domain.offers.payload import decode_published_groups
from bundle_offers.settings import get_settings


def validate_document(file_path: Path) -> tuple[bool, str | None, int]:
    """Validate one published document. Returns (valid, error, group_count)."""
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as e:
        return False, f"Unreadable: {e}", 0

    try:
        groups = decode_published_groups(raw)
    except MalformedBlob as e:
        return False, str(e), 0
    return True, None, len(groups)


def main(argv: list[str] | None = None) -> int:
    """Main validation function."""
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    output_dir = Path(argv[0]) if argv else Path(settings.output_dir)
    pattern = f"*/{settings.publish_namespace}.{settings.publish_key}.json"

    if not output_dir.exists():
        print(f"ERROR: Output directory not found: {output_dir}", file=sys.stderr)
        return 1

    errors: list[str] = []
    for document in sorted(output_dir.glob(pattern)):
        valid, error, count = validate_document(document)
        if not valid:
            errors.append(f"{document}: {error}")
        else:
            print(f"✓ {document} ({count} groups)")

    if errors:
        print("\nValidation errors:", file=sys.stderr)
        for error in errors:
            print(f"  {error}", file=sys.stderr)
        return 1

    print("\nAll files validated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
