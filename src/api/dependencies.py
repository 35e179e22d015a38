"""FastAPI dependency injection factories for repositories and services.

Repository factories take AsyncSession via Depends(get_async_session).
The LLM client is built once per process and shared read-only.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.agents.llm_client import LLMClient
from src.agents.similarity_agent import SimilarityAgent
from src.config.settings import get_settings
from src.db.session import get_async_session
from src.experiments.orchestrator import ExperimentUpdateOrchestrator
from src.repositories.experiments import ExperimentBankRepository, ExperimentRepository
from src.repositories.users import UserRepository

# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


async def get_experiment_repo(
    session: AsyncSession = Depends(get_async_session),
) -> ExperimentRepository:
    return ExperimentRepository(session)


async def get_experiment_bank_repo(
    session: AsyncSession = Depends(get_async_session),
) -> ExperimentBankRepository:
    return ExperimentBankRepository(session)


async def get_user_repo(
    session: AsyncSession = Depends(get_async_session),
) -> UserRepository:
    return UserRepository(session)


# ---------------------------------------------------------------------------
# Reasoning service
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_llm_client() -> LLMClient:
    settings = get_settings()
    return LLMClient(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        max_tokens=settings.LLM_MAX_TOKENS,
    )


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


async def get_update_orchestrator(
    experiment_repo: ExperimentRepository = Depends(get_experiment_repo),
    bank_repo: ExperimentBankRepository = Depends(get_experiment_bank_repo),
    llm_client: LLMClient = Depends(get_llm_client),
) -> ExperimentUpdateOrchestrator:
    settings = get_settings()
    return ExperimentUpdateOrchestrator(
        experiment_repo=experiment_repo,
        bank_repo=bank_repo,
        llm_client=llm_client,
        similarity_agent=SimilarityAgent(max_samples=settings.SIMILARITY_MAX_SAMPLES),
    )
