import asyncio
from datetime import timedelta
from typing import List

from hardware_pos.core.database import init_db
from hardware_pos.core.config import settings
from hardware_pos.core.security import create_access_token
from hardware_pos.models.product import Product, ProductCategory, Unit
from hardware_pos.models.user import User, UserRole

ADMIN_EMAIL = "admin@hardwarestore.com"

# name, size/package, unit, category, purchase, sale, quantity
DEMO_CATALOG = [
    ("Claw Hammer", "16 oz", Unit.PIECE, ProductCategory.TOOLS, 850.0, 1200.0, 25),
    ("Wood Screws", "2 inch x 100", Unit.BOX, ProductCategory.HARDWARE, 180.0, 260.0, 60),
    ("PVC Pipe", "1/2 inch", Unit.METER, ProductCategory.PLUMBING, 95.0, 140.0, 300),
    ("Copper Wire", "2.5 mm", Unit.ROLL, ProductCategory.ELECTRICAL, 3200.0, 4100.0, 8),
    ("Emulsion Paint", "White", Unit.GALLON, ProductCategory.PAINT, 1500.0, 2100.0, 12),
    ("LED Bulb", "12 W", Unit.PIECE, ProductCategory.ELECTRICAL, 120.0, 190.0, 5),
]


def build_demo_products() -> List[Product]:
    return [
        Product(
            name=name,
            size_package=size,
            unit=unit,
            category=category,
            purchase_price=purchase,
            sale_price=sale,
            quantity=quantity,
        )
        for name, size, unit, category, purchase, sale, quantity in DEMO_CATALOG
    ]


async def seed_data():
    print(f"🌱 Connecting to DB: {settings.DATABASE_NAME}...")
    await init_db()

    admin = await User.find_one(User.email == ADMIN_EMAIL)
    if admin:
        print(f"⚠️  Admin '{ADMIN_EMAIL}' already exists.")
    else:
        admin = User(
            email=ADMIN_EMAIL,
            username="admin",
            first_name="Store",
            last_name="Admin",
            role=UserRole.SUPERADMIN,
        )
        await admin.insert()
        print(f"✅ Admin '{ADMIN_EMAIL}' created.")

    if await Product.find_all().count():
        print("⚠️  Catalog not empty, skipping demo products.")
    else:
        await Product.insert_many(build_demo_products())
        print(f"✅ {len(DEMO_CATALOG)} demo products created.")

    token = create_access_token({"sub": admin.email}, expires_delta=timedelta(days=1))
    print("------------------------------------------")
    print(f"🔑 Bearer token (24h): {token}")
    print("------------------------------------------")


if __name__ == "__main__":
    asyncio.run(seed_data())
