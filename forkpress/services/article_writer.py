"""Blog article generation using chat-completion LLM APIs"""

from typing import Optional, Protocol
import logging

import anthropic
import openai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from forkpress.config.settings import settings
from forkpress.crawlers.github.repo_source import RepoContext

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a senior developer and tech writer who creates insightful, "
    "well-researched blog content about open source projects."
)


class LLMQuotaExceeded(Exception):
    """Raised when the LLM provider reports rate limiting or quota exhaustion."""


class ChatBackend(Protocol):
    """One chat-completion call against a given model."""

    name: str

    async def complete(self, *, model: str, system: str, prompt: str) -> str: ...


def is_quota_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.RateLimitError, anthropic.RateLimitError)):
        return True
    if getattr(exc, "status_code", None) == 429:
        return True
    msg = str(exc).lower()
    return "quota" in msg and "exceed" in msg


class OpenAIChatBackend:
    """OpenAI-compatible endpoint (OpenAI itself, GitHub Models, Azure inference)"""

    name = "openai"

    def __init__(self, *, api_key: str, base_url: Optional[str] = None, max_tokens: int = 2000, temperature: float = 0.7):
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url or None)
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, *, model: str, system: str, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            if is_quota_error(e):
                raise LLMQuotaExceeded(str(e)) from e
            raise

        return (response.choices[0].message.content or "").strip()


class AnthropicChatBackend:
    """Anthropic Messages API"""

    name = "anthropic"

    def __init__(self, *, api_key: str, max_tokens: int = 2000, temperature: float = 0.7):
        self.client = AsyncAnthropic(api_key=api_key)
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, *, model: str, system: str, prompt: str) -> str:
        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            if is_quota_error(e):
                raise LLMQuotaExceeded(str(e)) from e
            raise

        return "".join(block.text for block in response.content if getattr(block, "type", "") == "text").strip()


class ArticleWriter:
    """Builds the blog prompt for a repository and sends it to a backend"""

    def __init__(self, backend: ChatBackend):
        self.backend = backend

    @property
    def name(self) -> str:
        return self.backend.name

    async def write(self, context: RepoContext, *, model: str) -> str:
        """
        Generate one article

        Args:
            context: Repository plus README excerpt and file list
            model: Model identifier to use for this call

        Returns:
            Article text (possibly empty)

        Raises:
            LLMQuotaExceeded: the model is rate limited
        """
        prompt = self.build_prompt(context)
        return await self.backend.complete(model=model, system=SYSTEM_PROMPT, prompt=prompt)

    @staticmethod
    def build_prompt(context: RepoContext) -> str:
        repo = context.repo
        topics = ", ".join(sorted(repo.topics)) or "None"
        if repo.parent is not None:
            origin = f"FORKED FROM: {repo.parent.name} ({repo.parent.stars} stars)"
        else:
            origin = "ORIGINAL PROJECT"
        file_structure = "\n".join(context.file_tree) if context.file_tree else "Not available"

        repo_context = f"""REPOSITORY: {repo.name}
DESCRIPTION: {repo.description or 'No description'}
PRIMARY LANGUAGE: {repo.language or 'Not specified'}
TOPICS/TAGS: {topics}
STARS: {repo.stars}
{origin}

FILE STRUCTURE:
{file_structure}

README EXCERPT:
{context.readme or 'No README available'}"""

        return f"""You are a tech blogger writing an insightful article about a GitHub repository. Based on the repository data below, write a compelling blog-style analysis.

{repo_context}

Write an in-depth technical blog article (4-5 paragraphs) that:

1. HOOK: Start with a compelling problem statement or use case this project addresses
2. WHAT IT IS: Explain the project's purpose, core functionality, and what makes it unique
3. TECHNICAL DEEP DIVE: Analyze the architecture, key technologies, design patterns, or implementation details you can identify from the file structure and README
4. USE CASES: Describe 2-3 specific scenarios where a developer would benefit from this
5. TAKEAWAY: End with an insight about the broader technology landscape or why this matters

Style guidelines:
- Write as a senior engineer sharing deep technical insights
- Reference specific files, modules, or patterns visible in the codebase
- Explain the "why" behind technical decisions when apparent
- No emojis, no fluff, no generic statements
- Be opinionated - share what's impressive or what could be improved
- If forked, explain what the upstream project is known for and why it's significant

Write the full article, no title or headers:"""


def build_article_writer() -> Optional[ArticleWriter]:
    """
    Create the writer for the configured provider

    Returns:
        ArticleWriter, or None when no credentials are configured
        (generation unavailable; every article uses the fallback)

    Raises:
        ValueError: unsupported LLM_PROVIDER
    """
    provider = settings.LLM_PROVIDER

    if provider == "openai":
        api_key = settings.LLM_API_KEY or settings.GITHUB_TOKEN
        if not api_key:
            logger.warning("No LLM_API_KEY or GITHUB_TOKEN set; articles will use the fallback template")
            return None
        backend = OpenAIChatBackend(
            api_key=api_key,
            base_url=settings.LLM_BASE_URL,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
        )
    elif provider == "anthropic":
        if not settings.LLM_API_KEY:
            logger.warning("No LLM_API_KEY set for anthropic; articles will use the fallback template")
            return None
        backend = AnthropicChatBackend(
            api_key=settings.LLM_API_KEY,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
        )
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")

    return ArticleWriter(backend)
