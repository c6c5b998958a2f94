"""Database seeder: fresh schema, the two roles, demo users and posts.

Everything after the role rows goes through the services, so the seeded data
is normalized and hashed exactly as API traffic would be.
"""
import argparse
import asyncio
import random
import time

from sqlalchemy import insert

from app.config import settings
from app.database import open_database
from app.entities import DEFAULT_ROLES, Post, User
from app.models import RoleRecord
from app.repositories import SQLStorage
from app.security import hash_password
from app.services import PostService, UserService

TOPICS = ["python", "fastapi", "postgresql", "docker", "testing", "security",
          "asyncio", "sqlalchemy", "markdown", "devops"]


async def seed(small: bool = False, password: str = "changeme123"):
    num_users = 5 if small else 25
    num_posts = 20 if small else 500

    print(f"Seeding: {len(DEFAULT_ROLES)} roles, {num_users} users, {num_posts} posts")
    start = time.perf_counter()

    async with open_database(settings.DATABASE_URL) as database:
        await database.drop_all()
        await database.create_all()

        async with database.sessions() as session, session.begin():
            await session.execute(
                insert(RoleRecord),
                [{"id": r.id, "role_name": r.role_name} for r in DEFAULT_ROLES],
            )

        storage = SQLStorage(database, timeout=settings.QUERY_TIMEOUT_SECONDS)
        users = UserService(storage)
        posts = PostService(storage)

        # One hash for every demo account; bcrypt at full cost is slow by design.
        hashed = hash_password(password)
        authors = []
        for i in range(num_users):
            author = await users.create(
                User(
                    email=f"User_{i:04d}@Example.com",
                    password=hashed,
                    username=f"user_{i:04d}",
                    first_name="Demo",
                    last_name=f"User{i}",
                )
            )
            authors.append(author)
        print(f"  Created {len(authors)} users (password: {password!r})")

        for i in range(num_posts):
            topic = random.choice(TOPICS)
            await posts.create(
                Post(
                    title=f"Post {i}: Notes on {topic.title()}",
                    body=f"# Notes on {topic}\n\n" + f"Paragraph about {topic}. " * 20,
                    author_id=random.choice(authors).id,
                )
            )
        print(f"  Created {num_posts} posts")

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (20 posts)")
    parser.add_argument("--password", default="changeme123", help="Password for every demo user")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small, password=args.password))


if __name__ == "__main__":
    main()
