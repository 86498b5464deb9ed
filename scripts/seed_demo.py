#!/usr/bin/env python3
"""Seed the database with a demo business, agents and entries.

Usage:
    python scripts/seed_demo.py
    python scripts/seed_demo.py --entries 500 --days 60 --seed 7
"""

import argparse
import random
import sys
import uuid
from datetime import timedelta
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from agency_desk.auth import LocalAuthProvider, PasswordHasher
from agency_desk.common.config import load_config
from agency_desk.common.logging import get_logger, setup_logging
from agency_desk.common.time_utils import today
from agency_desk.desk import AgencyDesk
from agency_desk.domain.models import (
    AgentDraft,
    AgentRole,
    Business,
    Category,
    EntryDraft,
    RedeemType,
    ReferralCode,
    TenantContext,
    TenantSettings,
)
from agency_desk.storage.database import Database

logger = get_logger(__name__)

DEMO_EMAIL = "test@test.com"
DEMO_PASSWORD = "password"
DEMO_AGENTS = ["ahsan", "hassan", "umer", "ali", "zara"]
AGENT_PASSWORD = "password123"


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/dev.yaml",
        help="Path to config file (default: configs/dev.yaml)",
    )
    parser.add_argument("--entries", type=int, default=250, help="Entries to create")
    parser.add_argument("--days", type=int, default=90, help="Spread entries over N days")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    config = load_config(args.config)
    setup_logging(config.logging)
    rng = random.Random(args.seed)

    db = Database(config.database.path)
    db.connect()
    db.migrate()

    try:
        if db.find_business_by_email(DEMO_EMAIL) is not None:
            print(f"Demo business already exists ({DEMO_EMAIL})")
            return 0

        hasher = PasswordHasher(rounds=config.desk.bcrypt_rounds)
        auth = LocalAuthProvider(db, hasher)
        result = auth.sign_up(DEMO_EMAIL, DEMO_PASSWORD, {"business_name": "Epic Gaming Inc."})
        if result.error or not result.data:
            print(f"Error: {result.error}")
            return 1

        business = db.create_business(
            Business(
                id=str(uuid.uuid4()),
                business_name="Epic Gaming Inc.",
                owner_name="Jane Doe",
                email=DEMO_EMAIL,
                phone="(555) 123-4567",
                auth_user_id=result.data["user"]["id"],
            )
        )

        desk = AgencyDesk.from_backend(db, hasher)
        ctx = TenantContext(tenant_id=business.id, actor=business.owner_name)
        roles = list(AgentRole)

        for i, name in enumerate(DEMO_AGENTS):
            agent = desk.register_agent(
                ctx,
                AgentDraft(
                    agent_name=name,
                    username=f"{name}@example.com",
                    password=AGENT_PASSWORD,
                    role=roles[i % len(roles)],
                ),
            )
            if i == len(DEMO_AGENTS) - 1:
                desk.set_agent_status(ctx, agent.id, active=False)

        settings = TenantSettings()
        codes = list(ReferralCode)
        end = today()
        for i in range(args.entries):
            category = Category.RECHARGE if rng.random() > 0.3 else Category.FREEPLAY
            amount = float(rng.randint(10, 159)) if category is Category.RECHARGE else 0.0
            desk.submit_entry(
                ctx,
                EntryDraft(
                    date=end - timedelta(days=rng.randrange(args.days)),
                    category=category,
                    username=f"player{i + 101}",
                    page_name=settings.page_names[i % len(settings.page_names)],
                    platform=settings.platforms[i % len(settings.platforms)],
                    referral_code=codes[i % len(codes)],
                    amount=amount,
                    points_load=int(amount * rng.uniform(80, 130)) if amount else rng.randint(1000, 5999),
                    redeem_type=(
                        rng.choice(list(RedeemType))
                        if category is Category.RECHARGE
                        else RedeemType.ALREADY_PAID
                    ),
                    payment_method=settings.payment_methods[i % len(settings.payment_methods)],
                    player_history=settings.player_histories[i % len(settings.player_histories)],
                    agent_name=DEMO_AGENTS[i % len(DEMO_AGENTS)],
                ),
            )

        logger.info("demo_seeded", business_id=business.id, entries=args.entries)
        print(f"Seeded {business.business_name} ({DEMO_EMAIL} / {DEMO_PASSWORD})")
        print(f"  agents: {', '.join(DEMO_AGENTS)} (password {AGENT_PASSWORD})")
        print(f"  entries: {args.entries}")
        return 0

    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
