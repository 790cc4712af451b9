import asyncio
import sys
import uuid

from app import database
from app.api.routes.auth import get_password_hash
from app.config import settings
from app.models.user import User, UserRole


async def create_admin(email: str, password: str):
    print("🚀 Connecting to MongoDB...")
    await database.connect()

    try:
        existing_admin = await User.find_one(User.email == email)

        if existing_admin:
            print(f"ℹ️ User '{email}' already exists (role: {existing_admin.role.value}).")
            return

        print(f"🆕 Creating admin user: {email}")
        admin = User(
            user_id=uuid.uuid4().hex,
            name="System Admin",
            email=email,
            password_hash=get_password_hash(password),
            role=UserRole.ADMIN,
        )
        await admin.insert()
        print("✅ Admin user created successfully!")
    finally:
        database.close()


if __name__ == "__main__":
    email = sys.argv[1] if len(sys.argv) > 1 else settings.DEFAULT_ADMIN_EMAIL
    password = sys.argv[2] if len(sys.argv) > 2 else settings.DEFAULT_ADMIN_PASSWORD
    asyncio.run(create_admin(email, password))
