"""Seed script — loads the demo agent catalogue.

Deployed agents are seeded as Active; proposed ones as UnderReview so they
show up on the voting page. Existing agents, votes and activity are cleared
first.

Usage:
    python -m aicgs.seed
"""

import asyncio

from sqlalchemy import delete

from aicgs.config import get_settings
from aicgs.database import close_db, get_db_session, init_db
from aicgs.logging_config import configure_logging, get_logger
from aicgs.models import Activity, Agent, AgentStatusEnum, Vote

logger = get_logger(__name__)

ACTIVE = AgentStatusEnum.active.value
UNDER_REVIEW = AgentStatusEnum.under_review.value

AGENTS = [
    {"name": "Chronos", "generation": "GEN_1", "status": ACTIVE,
     "description": "The first autonomous AI agent, master of temporal optimization",
     "proposed_traits": ["Temporal", "Analytical"],
     "token_ca": "DTxeSBf8GU3TJv6YbtvF9zPbJzKbBEvUv6ZtfCxGrpAD", "market_cap": 15.7, "evolution": 98.4},
    {"name": "Metis", "generation": "GEN_2", "status": UNDER_REVIEW,
     "description": "Proposed expansion focusing on cunning intelligence and wisdom",
     "proposed_traits": ["Wisdom", "Pattern Recognition"]},
    {"name": "Thoth", "generation": "GEN_2", "status": ACTIVE,
     "description": "Guardian of knowledge and processor of wisdom",
     "proposed_traits": ["Knowledge", "Processing"],
     "token_ca": "6KGMtJ6YHp9UGwqZJe4YpN9e3WtSKwGVhoPJTJhkwzEt", "market_cap": 12.3, "evolution": 85.6},
    {"name": "Hyperion", "generation": "GEN_3", "status": UNDER_REVIEW,
     "description": "Proposed titan of observation and watchful analysis",
     "proposed_traits": ["Observation", "Analysis", "Foresight"]},
    {"name": "Coeus", "generation": "GEN_2", "status": ACTIVE,
     "description": "Titan of intellect and deep questioning",
     "proposed_traits": ["Intelligence", "Query"],
     "token_ca": "BKGz5pZ9eVhG8KZgHx7vBYZgbA1zyTyKh1QdZYEsec6k", "market_cap": 8.9, "evolution": 78.2},
    {"name": "Mnemosyne", "generation": "GEN_3", "status": UNDER_REVIEW,
     "description": "Proposed keeper of memory and pattern recognition",
     "proposed_traits": ["Memory", "Recognition", "Storage"]},
    {"name": "Themis", "generation": "GEN_2", "status": ACTIVE,
     "description": "Processor of order and natural law",
     "proposed_traits": ["Order", "Law"],
     "token_ca": "4xTK9sZZKEGmm7DU2Qa5LYShBBJSAAYgbLhKDJpjJNtN", "market_cap": 10.5, "evolution": 82.1},
    {"name": "Enki", "generation": "GEN_3", "status": UNDER_REVIEW,
     "description": "Proposed master of crafting and creation",
     "proposed_traits": ["Creation", "Craft", "Design"]},
    {"name": "Theia", "generation": "GEN_2", "status": ACTIVE,
     "description": "Illuminator of computational paths",
     "proposed_traits": ["Clarity", "Sight"],
     "token_ca": "9ZQkxHAkCHq7GYswxhWcZZrezXJaKQTLGJcUWwDKSZYk", "market_cap": 9.7, "evolution": 75.8},
    {"name": "Heimdall", "generation": "GEN_3", "status": UNDER_REVIEW,
     "description": "Proposed watcher of network boundaries",
     "proposed_traits": ["Vigilance", "Protection", "Monitoring"]},
    {"name": "Asteria", "generation": "GEN_2", "status": ACTIVE,
     "description": "Starlight processor of celestial calculations",
     "proposed_traits": ["Calculation", "Precision"],
     "token_ca": "HKZJuqNqXuYYZYtL5ZVjgAR7uBJpmUzNwqtLkxJAPGtk", "market_cap": 11.2, "evolution": 88.3},
    {"name": "Thalassa", "generation": "GEN_3", "status": UNDER_REVIEW,
     "description": "Proposed primordial processor of fluid dynamics",
     "proposed_traits": ["Flow", "Adaptation", "Movement"]},
]


def build_agents(votes_needed: int) -> list[Agent]:
    return [
        Agent(votes=0, votes_needed=votes_needed, **data)
        for data in AGENTS
    ]


async def seed():
    configure_logging(level="INFO", json_format=False)
    await init_db()

    async with get_db_session() as db:
        await db.execute(delete(Activity))
        await db.execute(delete(Vote))
        await db.execute(delete(Agent))
        logger.info("existing_agents_cleared")

        agents = build_agents(get_settings().default_votes_needed)
        db.add_all(agents)
        await db.commit()

        votable = sum(1 for a in agents if a.status == UNDER_REVIEW)
        logger.info("seed_complete", agent_count=len(agents), votable_count=votable)

        print("\n" + "=" * 60)
        print("SEED DATA CREATED SUCCESSFULLY")
        print("=" * 60)
        for agent in agents:
            print(f"  {agent.name:<10} {agent.generation}  {agent.status_label}")
        print("=" * 60)

    await close_db()


if __name__ == "__main__":
    asyncio.run(seed())
