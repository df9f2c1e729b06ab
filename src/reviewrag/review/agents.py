"""Per-language review agents and the registry that selects them."""

import logging
from pathlib import PurePosixPath

from reviewrag.llm.base import LLMService
from reviewrag.models import PullRequestFile, ReviewComment
from reviewrag.review.parsing import parse_review_comments

logger = logging.getLogger(__name__)

RESPONSE_FORMAT = """For each issue found, provide:
- Line number from the diff (lines marked with + are the new code)
- Severity (high/medium/low)
- Type (issue/suggestion/nitpick)
- Clear explanation of the problem and a specific recommendation

Return your response as a JSON array of objects with this structure:
[
  {
    "lineNumber": 10,
    "severity": "high",
    "type": "issue",
    "comment": "Detailed explanation and recommendation"
  }
]

If no issues are found, return an empty array: []"""


class ReviewAgent:
    """Reviews the changed lines of one file with an LLM.

    Subclasses set ``language``, ``file_extensions``, ``fence`` and the
    ``expertise`` and ``focus`` lists that shape the prompt.
    """

    language = "General"
    file_extensions: tuple[str, ...] = ()
    fence = ""
    expertise: tuple[str, ...] = (
        "Software engineering best practices across languages",
        "Common security vulnerabilities",
        "Readability and maintainability",
    )
    focus: tuple[str, ...] = (
        "**Security Issues**: Injection, hardcoded secrets, unsafe input handling",
        "**Bugs**: Logic errors, missing error handling, edge cases",
        "**Performance**: Inefficient algorithms, unnecessary work",
        "**Code Quality**: Naming, complexity, duplication",
    )

    def __init__(self, llm_service: LLMService) -> None:
        self.llm_service = llm_service

    def build_prompt(self, file: PullRequestFile, codebase_context: str) -> str:
        expertise = "\n".join(f"- {line}" for line in self.expertise)
        focus = "\n".join(f"{i}. {line}" for i, line in enumerate(self.focus, start=1))
        sections = [
            f"You are an expert {self.language} code reviewer with deep knowledge of:\n{expertise}",
            f"Review ONLY THE CHANGES in the following {self.language} file from a pull request.\n"
            "Only comment on lines marked with '+' in the diff (new or modified lines). "
            "Do not comment on removed lines or on unchanged context.",
            f"File Path: {file.path}\nChange Type: {file.change_type}",
            f"Changes (Unified Diff):\n```diff\n{file.unified_diff}\n```",
        ]
        if file.current_content:
            sections.append(
                "Full file content (for context only, do not review):\n"
                f"```{self.fence}\n{file.current_content}\n```"
            )
        if codebase_context:
            sections.append(f"Codebase Context:\n{codebase_context}")
        sections.append(f"Provide a thorough code review focusing on:\n{focus}")
        sections.append(RESPONSE_FORMAT)
        return "\n\n".join(sections)

    async def review_file(
        self, file: PullRequestFile, codebase_context: str
    ) -> list[ReviewComment]:
        """Review one file and return its comments.

        Model failures are logged and produce no comments.
        """
        logger.info(f"🔍 Reviewing {self.language} file: {file.path}")
        prompt = self.build_prompt(file, codebase_context)
        logger.debug(f"Prompt length: {len(prompt)} chars, context: {len(codebase_context)} chars")

        try:
            response = await self.llm_service.generate_response(
                [{"role": "user", "content": prompt}]
            )
        except Exception as e:
            logger.error(f"❌ Error reviewing {self.language} file {file.path}: {e}", exc_info=True)
            return []

        comments = parse_review_comments(response, file.path)
        logger.info(f"✅ Found {len(comments)} review comments for {file.path}")
        return comments


class PythonReviewAgent(ReviewAgent):
    language = "Python"
    file_extensions = (".py", ".pyw", ".pyi")
    fence = "python"
    expertise = (
        "Python best practices and PEP standards (PEP 8, PEP 20, PEP 484)",
        "Common Python security vulnerabilities and patterns",
        "Modern Python features (async/await, type hints, dataclasses)",
        "Popular frameworks (Django, Flask, FastAPI, pandas, numpy)",
        "Testing patterns (pytest, unittest, mocking)",
    )
    focus = (
        "**Security Issues**: SQL injection, insecure deserialization, hardcoded secrets, path traversal",
        "**Bugs**: Logic errors, None handling, type mismatches, incorrect API usage",
        "**Performance**: Inefficient algorithms, unnecessary computations",
        "**Best Practices**: Error handling, logging, documentation",
        "**Python-Specific**: Context managers, generators, decorators, type hints",
    )


class DotNetReviewAgent(ReviewAgent):
    language = "DotNet"
    file_extensions = (".cs", ".csproj", ".cshtml", ".razor")
    fence = "csharp"
    expertise = (
        "C# best practices and coding standards",
        "SOLID principles and design patterns",
        "Common .NET security vulnerabilities (OWASP)",
        "Async/await patterns and threading",
        "LINQ, Entity Framework, ASP.NET Core",
    )
    focus = (
        "**Security Issues**: SQL injection, XSS, CSRF, insecure deserialization, hardcoded secrets",
        "**Bugs**: Null references, race conditions, resource leaks, incorrect async usage",
        "**Performance**: Boxing, string concatenation, excessive allocations, inefficient LINQ",
        "**Best Practices**: Disposal, exception handling, logging",
        "**.NET-Specific**: ConfigureAwait, CancellationToken, modern C# features",
    )


class RustReviewAgent(ReviewAgent):
    language = "Rust"
    file_extensions = (".rs", ".toml")
    fence = "rust"
    expertise = (
        "Rust best practices and idioms",
        "Ownership, borrowing, and lifetime rules",
        "Error handling (Result, Option, panic)",
        "Concurrency and thread safety (Send, Sync)",
        "Cargo and dependency management",
    )
    focus = (
        "**Security Issues**: Unsafe blocks, integer overflows, race conditions",
        "**Memory Safety**: Improper use of unsafe, lifetime issues",
        "**Bugs**: Panic conditions, incorrect error handling, unwrap usage",
        "**Performance**: Unnecessary cloning, blocking operations",
        "**Rust-Specific**: Ownership patterns, trait implementations, macro usage",
    )


class GeneralReviewAgent(ReviewAgent):
    pass


class AgentRegistry:
    """Maps file extensions to review agents, with a general fallback."""

    def __init__(self, agents: list[ReviewAgent], fallback: ReviewAgent) -> None:
        self.fallback = fallback
        self._by_extension: dict[str, ReviewAgent] = {}
        for agent in agents:
            self.register(agent)

    @classmethod
    def default(cls, llm_service: LLMService) -> "AgentRegistry":
        return cls(
            [
                PythonReviewAgent(llm_service),
                DotNetReviewAgent(llm_service),
                RustReviewAgent(llm_service),
            ],
            fallback=GeneralReviewAgent(llm_service),
        )

    def register(self, agent: ReviewAgent) -> None:
        for extension in agent.file_extensions:
            self._by_extension[extension.lower()] = agent

    def agent_for(self, path: str) -> ReviewAgent | None:
        """Pick the agent for a path; None for files without an extension."""
        extension = PurePosixPath(path).suffix.lower()
        if not extension:
            return None
        return self._by_extension.get(extension, self.fallback)

    def languages(self) -> list[str]:
        return sorted({agent.language for agent in self._by_extension.values()})
