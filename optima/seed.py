"""
Demo data for a fresh database: a month of completed projects for the
dashboards plus a queue of pending projects to schedule.
"""

import logging
import random
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from .models import ProjectStatus, utcnow
from .services.project_store import ProjectStore

logger = logging.getLogger(__name__)

SEED_THRESHOLD = 10

PAST_TITLES = [
    "System Audit", "Logo Design", "Bug Bounty", "AWS Migration",
    "UI Sprint", "Backend Patch", "SEO Overhaul", "Data Backup",
    "Client Meeting", "Code Review", "Server Setup", "Email Fix",
    "Beta Launch", "User Research", "Compliance Check", "API Docs",
    "Asset Backup", "Network Tuning", "Security Patch", "CI/CD Setup",
]

PENDING_TITLES = [
    "E-Commerce Engine", "Mobile App v3", "AI Predictor", "Crypto Wallet",
    "HR Portal", "Sales Dashboard", "IoT Hub", "Payment V2",
    "Smart Contract", "Video Streamer", "Chat Bot", "Edge Cache",
    "VR Sandbox", "ML Model Training", "Auth Service",
]


def build_demo_rows(rng: random.Random, now: datetime):
    rows = []
    for i in range(20):
        completed_at = now - timedelta(days=rng.randrange(30), hours=rng.randrange(24))
        deadline = rng.randint(1, 10)
        rows.append({
            "title": f"{PAST_TITLES[i % len(PAST_TITLES)]} #{i + 1}",
            "deadline": deadline,
            "expected_revenue": Decimal(2000 + rng.randrange(15000)),
            "status": ProjectStatus.COMPLETED,
            "created_at": completed_at - timedelta(days=rng.randrange(deadline)),
            "completed_at": completed_at,
        })

    for i in range(15):
        rows.append({
            "title": PENDING_TITLES[i % len(PENDING_TITLES)],
            "deadline": rng.randint(2, 26),
            "expected_revenue": Decimal(5000 + rng.randrange(45000)),
            "status": ProjectStatus.PENDING,
            "created_at": now,
        })
    return rows


def seed_demo_data(store: ProjectStore, rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> int:
    """Insert demo projects unless the store already holds SEED_THRESHOLD or more. Returns rows inserted."""
    if store.count() >= SEED_THRESHOLD:
        logger.info("Skipping demo data, store already populated")
        return 0

    inserted = store.add_many(build_demo_rows(rng or random.Random(), now or utcnow()))
    logger.info(f"🌱 Seeded {inserted} demo projects")
    return inserted
