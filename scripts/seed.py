"""Database seeder for local development of the forum API."""
import argparse
import asyncio
import random
import time

from forum_api.database import Base, async_session, engine
from forum_api.repositories import SqlCommentRepository, SqlThreadRepository, SqlUserRepository
from forum_api.schemas import NewComment, NewThread

TOPICS = ["python", "fastapi", "postgresql", "docker", "testing", "asyncio",
          "sqlalchemy", "pydantic", "deployment", "security"]


async def seed(small: bool = False, deleted_ratio: float = 0.2):
    num_users = 5 if small else 50
    num_threads = 20 if small else 2000
    max_comments_per_thread = 3 if small else 10

    print(f"Seeding: {num_users} users, {num_threads} threads, up to {max_comments_per_thread} comments each")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        users_repo = SqlUserRepository(session)
        threads_repo = SqlThreadRepository(session)
        comments_repo = SqlCommentRepository(session)

        users = []
        for i in range(num_users):
            users.append(await users_repo.add_user(f"user-{i:04d}", f"user_{i:04d}", f"User {i}"))
        print(f"  Created {len(users)} users")

        total_comments = 0
        total_deleted = 0
        for i in range(num_threads):
            topic = random.choice(TOPICS)
            thread = await threads_repo.add_thread(
                NewThread(title=f"Thread {i}: questions about {topic}", body=f"Let's talk about {topic}. " * 5),
                random.choice(users).id,
            )
            for _ in range(random.randint(0, max_comments_per_thread)):
                comment = await comments_repo.add_comment(
                    NewComment(content=f"A reply about {topic}."),
                    thread.id,
                    random.choice(users).id,
                )
                total_comments += 1
                if random.random() < deleted_ratio:
                    await comments_repo.soft_delete_comment(comment.id)
                    total_deleted += 1

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users}")
    print(f"  Threads: {num_threads}")
    print(f"  Comments: {total_comments} ({total_deleted} soft-deleted)")


def main():
    parser = argparse.ArgumentParser(description="Seed the forum database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (20 threads)")
    parser.add_argument("--deleted-ratio", type=float, default=0.2, help="Share of comments to soft-delete")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small, deleted_ratio=args.deleted_ratio))


if __name__ == "__main__":
    main()
