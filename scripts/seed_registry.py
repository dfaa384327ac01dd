"""Create tables and seed the site registry with the product brands"""
import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv(project_root / ".env")

from loguru import logger

from product_digest.db import AsyncSessionLocal, SiteRegistry, init_db

SITES = [
    {
        "website_key": "axeb2bai",
        "website_name": "AxeB2B AI",
        "primary_domain": "ai.kimiaxe.com",
        "subdomains": ["chat.kimiaxe.com"],
        "category": "ai",
        "description": "AI chat assistant for business teams",
    },
    {
        "website_key": "axeb2bwallet",
        "website_name": "AxeB2B Wallet",
        "primary_domain": "wallet.kimiaxe.com",
        "subdomains": [],
        "category": "fintech",
        "description": "B2B wallet and top-ups",
    },
    {
        "website_key": "axesms",
        "website_name": "AxeSMS",
        "primary_domain": "sms.kimiaxe.com",
        "subdomains": [],
        "category": "messaging",
        "description": "Bulk SMS and messaging",
    },
    {
        "website_key": "axesocials",
        "website_name": "AxeSocials",
        "primary_domain": "socials.kimiaxe.com",
        "subdomains": [],
        "category": "social",
        "description": "Social media scheduler",
    },
    {
        "website_key": "axexvx",
        "website_name": "AxeXVX",
        "primary_domain": "xvx.kimiaxe.com",
        "subdomains": [],
        "category": "links",
        "description": "Link shortener",
    },
]


async def seed() -> int:
    await init_db()
    added = 0
    async with AsyncSessionLocal() as session:
        for site in SITES:
            if await session.get(SiteRegistry, site["website_key"]) is not None:
                continue
            session.add(SiteRegistry(status="active", **site))
            added += 1
        await session.commit()
    return added


def main():
    added = asyncio.run(seed())
    logger.info(f"Seeded {added} site(s); {len(SITES) - added} already present")


if __name__ == "__main__":
    main()
