"""Seed the public demo tier lists used as templates on the explore page.

Usage: python scripts/seed_demo.py
Lists that already exist (matched by title) are left alone.
"""

import asyncio
import os
import sys

# Add parent dir to path to find the app modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import async_session_maker, dispose_db, init_db
from models.tier_list import TierList
from schemas import TierItemPayload, TierPayload
from services.tierlists import build_tiers

IMG = "https://images.unsplash.com/photo-{}?w=200"
COVER = "https://images.unsplash.com/photo-{}?w=600"

# title, description, cover photo id, [(tier name, color, [(label, photo id), ...]), ...]
DEMO_TIERLISTS = [
    (
        "Best Video Games Ever",
        "A ranking of the greatest video games of all time",
        "1493711662062-fa541f7f3d24",
        [
            ("S", "#ff7f7f", [("The Legend of Zelda: BOTW", "1612287230202-1ff1d85d1bdf"), ("Elden Ring", "1538481199705-c710c4e965fc")]),
            ("A", "#ffbf7f", [("Red Dead Redemption 2", "1511512578047-dfb367046420"), ("God of War", "1552820728-8b83bb6b2b0d")]),
            ("B", "#ffdf7f", [("Minecraft", "1587573089734-09cb69c0f2b4")]),
            ("C", "#7fff7f", []),
        ],
    ),
    (
        "Top Marvel Movies Ranked",
        "The ultimate Marvel Cinematic Universe tier list",
        "1635805737707-575885ab0820",
        [
            ("S", "#ff7f7f", [("Avengers: Endgame", "1509347528160-9a9e33742cdb"), ("Avengers: Infinity War", "1560169897-fc0cdbdfa4d5")]),
            ("A", "#ffbf7f", [("Spider-Man: No Way Home", "1604200213928-ba3cf4fc8436"), ("Guardians of the Galaxy", "1534809027769-b00d750a6bac")]),
            ("B", "#ffdf7f", [("Thor: Ragnarok", "1505533542167-8c89838bb19e")]),
            ("C", "#7fff7f", []),
        ],
    ),
    (
        "Pizza Toppings Tier List",
        "What belongs on a pizza? Here's my definitive ranking",
        "1565299624946-b28f40a0ae38",
        [
            ("S", "#ff7f7f", [("Pepperoni", "1628840042765-356cda07504e"), ("Mozzarella", "1589881133595-a3c085cb731d")]),
            ("A", "#ffbf7f", [("Mushrooms", "1504545102780-26774c1bb073"), ("Italian Sausage", "1529692236671-f1f6cf9683ba")]),
            ("B", "#ffdf7f", [("Olives", "1563060537863-56f77ea5e3e3")]),
            ("D", "#ff7f7f", [("Pineapple", "1550258987-190a2d41a8ba")]),
        ],
    ),
    (
        "Greatest Anime of All Time",
        "My personal ranking of the best anime series ever made",
        "1578632767115-351597cf2477",
        [
            ("S", "#ff7f7f", [("Attack on Titan", "1607604276583-eef5d076aa5f"), ("Fullmetal Alchemist", "1613376023733-0a73315d9b06")]),
            ("A", "#ffbf7f", [("Death Note", "1578662996442-48f60103fc96"), ("One Piece", "1601850494422-3cf14624b0b3")]),
            ("B", "#ffdf7f", [("Naruto", "1618336753974-aae8e04506aa")]),
            ("C", "#7fff7f", []),
        ],
    ),
    (
        "Best Music Artists 2020s",
        "Ranking the top music artists of the decade",
        "1470225620780-dba8ba36b745",
        [
            ("S", "#ff7f7f", [("The Weeknd", "1493225457124-a3eb161ffa5f"), ("Kendrick Lamar", "1598387993441-a364f854c3e1")]),
            ("A", "#ffbf7f", [("Taylor Swift", "1516450360452-9312f5e86fc7"), ("Bad Bunny", "1571330735066-03aaa9429d89")]),
            ("B", "#ffdf7f", [("Drake", "1459749411175-04bf5292ceea")]),
            ("C", "#7fff7f", []),
        ],
    ),
    (
        "Football Legends Ranked",
        "The greatest football players of all time - who's the GOAT?",
        "1579952363873-27f3bade9f55",
        [
            ("GOAT", "#ffd700", [("Messi", "1551958219-acbc608c6377"), ("Ronaldo", "1574629810360-7efbbe195018")]),
            ("Legend", "#ff7f7f", [("Maradona", "1508098682722-e99c43a406b2"), ("Pele", "1560272564-c83b66b1ad12")]),
            ("Elite", "#ffbf7f", [("Zidane", "1606925797300-0b35e9d1794e")]),
            ("Great", "#7fff7f", []),
        ],
    ),
]

DEMO_TITLES = [entry[0] for entry in DEMO_TIERLISTS]


def build_demo_tier_list(title, description, cover_id, tiers) -> TierList:
    """Ownerless public list: readable and clonable by everyone, editable by nobody."""
    tier_list = TierList(
        title=title,
        description=description,
        cover_image_url=COVER.format(cover_id),
        is_public=True,
    )
    tier_list.tiers = build_tiers(
        TierPayload(
            name=name,
            color=color,
            items=[TierItemPayload(media_url=IMG.format(photo), label=label) for label, photo in items],
        )
        for name, color, items in tiers
    )
    return tier_list


async def seed_demo(session: AsyncSession) -> int:
    created = 0
    for title, description, cover_id, tiers in DEMO_TIERLISTS:
        existing = await session.execute(select(TierList.id).where(TierList.title == title))
        if existing.first():
            print(f"⏭️ Exists: {title}")
            continue
        session.add(build_demo_tier_list(title, description, cover_id, tiers))
        created += 1
        print(f"✅ Created: {title}")
    await session.commit()
    return created


async def main() -> None:
    print("🌱 Seeding demo tier lists...")
    await init_db()
    try:
        async with async_session_maker() as session:
            created = await seed_demo(session)
    finally:
        await dispose_db()
    print(f"🎉 Seeding completed ({created} created).")


if __name__ == "__main__":
    asyncio.run(main())
