"""System symptoms and habits available to every user."""

import uuid

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncConnection

from welltrack.models.trackables import habits, symptoms

# Namespace for stable ids, so seeding twice never duplicates a row
SEED_NAMESPACE = uuid.UUID("6f1c2b0e-5d7a-4c1f-9a3e-8b2d4e6f7a90")

DEFAULT_SYMPTOMS = [
    ("Headache", "Pain"),
    ("Fatigue", "Energy"),
    ("Joint Pain", "Pain"),
    ("Muscle Pain", "Pain"),
    ("Nausea", "Digestive"),
    ("Brain Fog", "Cognitive"),
    ("Dizziness", "Neurological"),
    ("Insomnia", "Sleep"),
    ("Anxiety", "Mental Health"),
    ("Stomach Pain", "Digestive"),
    ("Back Pain", "Pain"),
]

DEFAULT_HABITS = [
    ("Sleep Duration", "duration", "hours"),
    ("Water Intake", "numeric", "glasses"),
    ("Exercise", "boolean", None),
    ("Alcohol", "boolean", None),
    ("Caffeine", "numeric", "cups"),
]


def seed_id(kind: str, name: str) -> uuid.UUID:
    return uuid.uuid5(SEED_NAMESPACE, f"{kind}:{name.lower()}")


async def seed_system_trackables(conn: AsyncConnection) -> tuple[int, int]:
    """
    Insert missing system symptoms and habits.

    Returns:
        Number of symptoms and habits inserted
    """
    existing = set((await conn.execute(select(symptoms.c.id))).scalars().all())
    symptom_rows = [
        {"id": seed_id("symptom", name), "user_id": None, "name": name, "category": category}
        for name, category in DEFAULT_SYMPTOMS
        if seed_id("symptom", name) not in existing
    ]
    if symptom_rows:
        await conn.execute(insert(symptoms), symptom_rows)

    existing = set((await conn.execute(select(habits.c.id))).scalars().all())
    habit_rows = [
        {
            "id": seed_id("habit", name),
            "user_id": None,
            "name": name,
            "tracking_type": tracking_type,
            "unit": unit,
        }
        for name, tracking_type, unit in DEFAULT_HABITS
        if seed_id("habit", name) not in existing
    ]
    if habit_rows:
        await conn.execute(insert(habits), habit_rows)

    return len(symptom_rows), len(habit_rows)
