"""Seed the database with Kreede test data.

Run with: python -m scripts.seed
Creates a desk admin, a few user accounts with memberships, one paid and one
free event, and a day of court bookings.
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select

from kreede.core.auth import hash_password
from kreede.core.config import settings
from kreede.core.database import async_session_factory, engine
from kreede.models import (
    Admin,
    Base,
    Booking,
    BookingPaymentRef,
    Event,
    GuestBooking,
    Membership,
    MembershipStatus,
    PlanId,
    User,
)
from kreede.models.member import PLAN_DEFAULTS

# user_id, name, email, phone, plan (None = no membership)
USERS = [
    ("asha", "Asha Rao", "asha@example.com", "9876543210", PlanId.THREE_MONTHS),
    ("ravi", "Ravi Kumar", "ravi@example.com", "9876543211", PlanId.ONE_MONTH),
    ("meera", "Meera Iyer", "meera@example.com", "9876543212", None),
]

# Seed prices per plan (the desk enters the real amount when creating a membership)
SEED_PRICES = {
    PlanId.ONE_MONTH: Decimal("1500"),
    PlanId.THREE_MONTHS: Decimal("4000"),
    PlanId.SIX_MONTHS: Decimal("7500"),
}


async def seed():
    # Create tables (in dev; production uses migrations)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        result = await db.execute(select(Admin).where(Admin.email == "desk@kreede.in"))
        if result.scalar_one_or_none():
            print("Database already seeded - skipping.")
            return

        db.add(Admin(name="Front Desk", email="desk@kreede.in", hashed_password=hash_password("admin123")))

        for user_id, name, email, phone, plan in USERS:
            db.add(User(user_id=user_id, name=name, email=email, phone=phone))
            if plan is None:
                continue
            duration_months, plan_name, games = PLAN_DEFAULTS[plan]
            db.add(
                Membership(
                    order_id=f"seed_{user_id}",
                    amount=SEED_PRICES[plan],
                    currency=settings.currency,
                    plan_id=plan,
                    plan_name=plan_name,
                    duration_months=duration_months,
                    games=games,
                    games_used=0,
                    status=MembershipStatus.PAID,
                    user_id=user_id,
                    user_email=email,
                    user_name=name,
                )
            )

        saturday = date.today() + timedelta(days=(5 - date.today().weekday()) % 7)
        db.add_all(
            [
                Event(
                    title="Saturday Smash",
                    start_date=saturday,
                    end_date=saturday,
                    start_time="18:00",
                    end_time="21:00",
                    entry_fee=Decimal("300"),
                    link="https://kreede.in/events/saturday-smash",
                    description="Doubles social, all levels.",
                    tags=["doubles", "social"],
                    created_by="seed",
                ),
                Event(
                    title="Open Court Day",
                    start_date=saturday + timedelta(days=1),
                    end_date=saturday + timedelta(days=1),
                    link="https://kreede.in/events/open-day",
                    tags=["free"],
                    created_by="seed",
                ),
            ]
        )

        today = date.today()
        db.add_all(
            [
                Booking(
                    order_id="seed_booking_1",
                    user_id="asha",
                    user_name="Asha Rao",
                    user_email="asha@example.com",
                    booking_date=today,
                    slots=[
                        {"court_id": 1, "start": "06:00", "end": "07:00"},
                        {"court_id": 1, "start": "07:00", "end": "08:00"},
                    ],
                    amount=Decimal(0),
                    currency=settings.currency,
                    payment_ref=BookingPaymentRef.MEMBERSHIP,
                    admin_paid=True,
                ),
                GuestBooking(
                    order_id="seed_guest_1",
                    user_name="Walk-in",
                    phone_number="9000000001",
                    booking_date=today,
                    slots=[{"court_id": 2, "start": "18:00", "end": "19:00"}],
                    amount=Decimal(settings.slot_price),
                    currency=settings.currency,
                    payment_ref=BookingPaymentRef.UNPAID_CASH,
                    admin_paid=False,
                ),
            ]
        )

        await db.commit()

        print("Seeded Kreede:")
        print(f"  {len(USERS)} users, {sum(1 for u in USERS if u[4])} paid memberships")
        print("  2 events, 2 bookings")
        print("  admin: desk@kreede.in / admin123")


if __name__ == "__main__":
    asyncio.run(seed())
