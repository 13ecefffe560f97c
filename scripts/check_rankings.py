#!/usr/bin/env python3
"""
Ranking Integrity Check
=======================
Verifies that every course's selected applications hold ranks 1..N with
no gaps or duplicates. Exits with status 1 if any course is broken.

Usage:
    python scripts/check_rankings.py
"""

import asyncio
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.logging import setup_logging
from app.db.session import AsyncSessionLocal, engine
from app.services.ranking_audit import find_rank_violations


async def main() -> int:
    try:
        async with AsyncSessionLocal() as session:
            violations = await find_rank_violations(session)
    finally:
        await engine.dispose()

    print("=" * 70)
    print("📊 RANKING INTEGRITY REPORT")
    print("=" * 70)

    if not violations:
        print("✅ All course rankings are dense")
        return 0

    for course_code, violation in violations.items():
        print(f"❌ {course_code}: ranks={violation.ranks}")
        if violation.missing:
            print(f"   missing: {violation.missing}")
        if violation.duplicates:
            print(f"   duplicated: {violation.duplicates}")
        if violation.out_of_range:
            print(f"   out of range: {violation.out_of_range}")
    print("=" * 70)
    return 1


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main()))
