"""Seed the database with a demo admin, a demo student and a few concerns."""

import asyncio

from concerndesk.db import crud
from concerndesk.db.engine import async_session_factory, create_tables, engine
from concerndesk.services import tickets
from concerndesk.services.auth import AuthSession, hash_password

ADMIN_EMAIL = "admin@concerndesk.local"
STUDENT_EMAIL = "student@concerndesk.local"
DEMO_PASSWORD = "changeme123"

# (title, message, category)
CONCERNS = [
    ("Can't upload file", "Error 500 when uploading my grade report.", "technical"),
    ("Scholarship requirements", "Is a certificate of enrollment required for renewal?", "scholarship"),
    ("Application still pending", "My application has been pending for three weeks.", "application"),
]


async def seed():
    await create_tables()

    async with async_session_factory() as db:
        if await crud.get_user_by_email(db, ADMIN_EMAIL):
            print("Demo users already exist, skipping seed.")
            return

        admin = await crud.create_user(
            db, ADMIN_EMAIL, hash_password(DEMO_PASSWORD), display_name="Demo Admin", role="admin",
        )
        student = await crud.create_user(
            db, STUDENT_EMAIL, hash_password(DEMO_PASSWORD), display_name="Juan Dela Cruz",
        )

        # Seeding bypasses the API, so the sessions only need a non-empty token.
        as_student = AuthSession(user_id=student.id, is_admin=False, token="seed")
        as_admin = AuthSession(user_id=admin.id, is_admin=True, token="seed")

        created = []
        for title, message, category in CONCERNS:
            created.append(await tickets.create_concern(db, as_student, title, message, category))

        await tickets.set_status(db, as_admin, created[2].id, "in_progress")
        await tickets.respond(db, as_admin, created[1].id, "**Yes, please attach it to your renewal form.**")

        print(f"Admin:   {ADMIN_EMAIL} / {DEMO_PASSWORD}")
        print(f"Student: {STUDENT_EMAIL} / {DEMO_PASSWORD}")
        print(f"Seeded {len(created)} concerns.")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
