"""Sample data seeder: an admin, a sales team, itineraries and leads."""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from travel_crm.core.config import settings
from travel_crm.models import Itinerary, Lead, Target, User
from travel_crm.schemas.common import (
    LeadSource,
    LeadStatus,
    LeadType,
    TransportMode,
    UserRole,
)

SALES_TEAM = [
    ("Ananya Rao", "ananya@example.com", "9800000001"),
    ("Vikram Shah", "vikram@example.com", "9800000002"),
    ("Meera Iyer", "meera@example.com", "9800000003"),
    ("Rohan Das", "rohan@example.com", "9800000004"),
]

# (name, destination, transport, days, cost_usd, cost_inr)
ITINERARIES = [
    ("Bali Classic", "Bali", TransportMode.driver, 6, "620.00", "0"),
    ("Bali Explorer", "Bali", TransportMode.scooter, 8, "540.00", "0"),
    ("Goa Beach Break", "Goa", TransportMode.self_drive, 4, "0", "28500.00"),
    ("Kerala Backwaters", "Kerala", TransportMode.driver, 5, "0", "36000.00"),
    ("Thailand Islands", "Thailand", TransportMode.driver, 7, "780.00", "0"),
    ("Dubai City Lights", "Dubai", TransportMode.driver, 5, "910.00", "0"),
]

PLACES = ["Bali", "Goa", "Kerala", "Thailand", "Dubai", "Manali"]


async def seed():
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_maker() as session:
        print("Seeding travel CRM sample data")

        # TRUNCATE ... CASCADE clears dependent history tables too
        await session.execute(
            text(
                "TRUNCATE TABLE "
                "notifications, call_logs, reminders, confirmations, "
                "follow_ups, leads, itineraries, targets, users "
                "CASCADE"
            )
        )
        await session.commit()
        print("Cleared existing data")

        # 1. Users
        admin = User(
            full_name="Operations Admin",
            email="admin@example.com",
            phone="9800000000",
            role=UserRole.admin.value,
        )
        agents = [
            User(full_name=name, email=email, phone=phone, role=UserRole.sales.value)
            for name, email, phone in SALES_TEAM
        ]
        session.add(admin)
        session.add_all(agents)
        await session.flush()
        print(f"Created 1 admin and {len(agents)} sales agents")

        # 2. Itineraries
        session.add_all(
            Itinerary(
                name=name,
                destination=destination,
                transport_mode=transport.value,
                days=days,
                cost_usd=Decimal(cost_usd),
                cost_inr=Decimal(cost_inr),
            )
            for name, destination, transport, days, cost_usd, cost_inr in ITINERARIES
        )
        print(f"Created {len(ITINERARIES)} itineraries")

        # 3. Monthly targets for the current month
        today = date.today()
        session.add_all(
            Target(
                user_id=agent.id,
                month=today.month,
                year=today.year,
                target_leads=30,
                target_conversions=6,
                target_revenue=Decimal("600000"),
            )
            for agent in agents
        )
        print(f"Created {len(agents)} targets")

        # 4. Leads, spread across the team in rotation order
        sources = list(LeadSource)
        leads = []
        for i in range(12):
            agent = agents[i % len(agents)]
            hot = i % 5 == 0
            leads.append(
                Lead(
                    client_name=f"Client {i + 1:02d}",
                    contact_number=f"98765{i:05d}",
                    place=PLACES[i % len(PLACES)],
                    no_of_pax=2 + i % 4,
                    expected_budget=Decimal(50000 + i * 7500),
                    travel_date=today + timedelta(days=20 + i * 3) if i % 2 else None,
                    travel_month=None
                    if i % 2
                    else (today + timedelta(days=45)).strftime("%Y-%m"),
                    lead_source=sources[i % len(sources)].value,
                    lead_type=LeadType.hot.value if hot else LeadType.normal.value,
                    status=LeadStatus.hot.value if hot else LeadStatus.allocated.value,
                    assigned_to=agent.id,
                    assigned_by=admin.id,
                )
            )
        session.add_all(leads)
        await session.commit()
        print(f"Created {len(leads)} leads")

        lead_cnt = (await session.execute(select(func.count(Lead.id)))).scalar_one()
        print("\nValidation:")
        print(f"  Leads: {lead_cnt}")
        print("Seeding complete")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
