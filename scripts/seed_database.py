#!/usr/bin/env python3
"""
Database Seeder
===============
Creates a lecturer, candidates, courses and applications for local testing.

Usage:
    python scripts/seed_database.py            # seed (keeps existing rows)
    python scripts/seed_database.py clear      # delete all rows
    python scripts/seed_database.py reseed     # clear, then seed
"""

import argparse
import asyncio
import os
import sys

from sqlalchemy import delete, select

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.base import Base
from app.db.session import AsyncSessionLocal, engine
from app.models import Application, ApplicationType, Comment, Course, SelectedApplication, User, UserRole

LECTURER = {"first_name": "Grace", "last_name": "Hopper", "email": "grace.hopper@uni.example.edu"}

CANDIDATES = [
    {"first_name": "Alan", "last_name": "Turing", "email": "alan.turing@student.example.edu"},
    {"first_name": "Ada", "last_name": "Lovelace", "email": "ada.lovelace@student.example.edu"},
    {"first_name": "Edsger", "last_name": "Dijkstra", "email": "edsger.dijkstra@student.example.edu"},
    {"first_name": "Barbara", "last_name": "Liskov", "email": "barbara.liskov@student.example.edu"},
]

COURSES = [
    {"code": "COSC0001", "name": "Full Stack Development", "description": "Web applications end to end"},
    {"code": "COSC0002", "name": "Algorithms and Analysis", "description": "Design and analysis of algorithms"},
]


async def seed_all():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        existing = await session.execute(select(User).where(User.email == LECTURER["email"]))
        if existing.scalar_one_or_none():
            print("⚠️  Seed data already present, skipping (use 'reseed' to start over)")
            return

        lecturer = User(role=UserRole.LECTURER, **LECTURER)
        candidates = [User(role=UserRole.CANDIDATE, **data) for data in CANDIDATES]
        session.add(lecturer)
        session.add_all(candidates)
        await session.flush()

        courses = [Course(lecturer_id=lecturer.id, **data) for data in COURSES]
        session.add_all(courses)
        await session.flush()

        applications = []
        for course in courses:
            for index, candidate in enumerate(candidates):
                applications.append(Application(
                    course_code=course.code,
                    user_id=candidate.id,
                    type=ApplicationType.TUTOR if index % 2 == 0 else ApplicationType.LAB_ASSISTANT,
                    availability="Part-time" if index % 2 else "Full-time",
                    academic_credentials="Bachelor of Computer Science",
                    previous_roles="Peer mentor",
                    skills="Python, SQL, TypeScript",
                ))
        session.add_all(applications)
        await session.commit()

        print(f"✅ Seeded 1 lecturer, {len(candidates)} candidates, "
              f"{len(courses)} courses, {len(applications)} applications")


async def clear_all():
    async with AsyncSessionLocal() as session:
        # Children before parents
        for model in (Comment, SelectedApplication, Application, Course, User):
            result = await session.execute(delete(model))
            print(f"🗑️  {model.__tablename__}: {result.rowcount} rows deleted")
        await session.commit()


async def main(command: str):
    try:
        if command in ("clear", "reseed"):
            await clear_all()
        if command in ("seed", "reseed"):
            await seed_all()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the tutor selection database")
    parser.add_argument("command", nargs="?", default="seed", choices=["seed", "clear", "reseed"])
    args = parser.parse_args()

    try:
        asyncio.run(main(args.command))
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\n\n❌ Seeding failed: {str(e)}")
        import traceback
        traceback.print_exc()
        sys.exit(2)
