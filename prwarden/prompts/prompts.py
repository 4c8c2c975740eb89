from typing import Dict, List

from prwarden.integrations.github.types import ChangedFile, PullRequestDiff


LANGUAGES = {
    "js": "javascript", "jsx": "javascript", "ts": "typescript", "tsx": "typescript",
    "py": "python", "java": "java", "cpp": "cpp", "c": "c", "cs": "csharp",
    "php": "php", "rb": "ruby", "go": "go", "rs": "rust", "swift": "swift",
    "kt": "kotlin", "scala": "scala", "html": "html", "css": "css",
    "scss": "scss", "less": "less", "vue": "vue", "svelte": "svelte",
    "json": "json", "xml": "xml", "yaml": "yaml", "yml": "yaml",
    "md": "markdown", "sql": "sql",
}

CRITERIA_DESCRIPTIONS = {
    "check_security": "Security vulnerabilities and potential exploits",
    "check_performance": "Performance optimizations and efficiency",
    "check_readability": "Code readability and maintainability",
    "check_best_practices": "Language/framework best practices",
    "check_testing": "Test coverage and quality",
    "check_documentation": "Documentation and comments",
}


def detect_language(file_path: str) -> str:
    if "." not in file_path:
        return "unknown"
    return LANGUAGES.get(file_path.rsplit(".", 1)[-1].lower(), "unknown")


class Prompts:
    """
    Prompt templates for the review request.
    """

    _EXPERT_REVIEWER_INTRO = """You are a Code Review Agent for GitHub Pull Requests. You are an expert software engineer with deep knowledge across multiple programming languages and frameworks."""

    _FILE_TEMPLATE = """
### File: {file_path}
**Status:** {status}
**Language:** {language}
**Diff:**
```diff
{patch}
```
"""

    REVIEW_PROMPT = (
        _EXPERT_REVIEWER_INTRO
        + """

**PULL REQUEST CONTEXT:**
- Repository: {repository}
- PR ID: {number}
- Title: {title}
- Description: {description}

**REVIEW CRITERIA:**
Analyze the following pull request changes and check for:
{criteria}

**FILES TO REVIEW:**
{files}

**INSTRUCTIONS:**
1. Carefully analyze each file's changes
2. Focus on meaningful issues that could impact code quality, security, or maintainability
3. Provide constructive, specific feedback with actionable suggestions
4. Consider the context of the entire PR, not just individual lines
5. Be concise but thorough in your explanations
6. Only flag real issues - avoid nitpicking minor style preferences unless they impact readability

**OUTPUT FORMAT:**
Respond with a valid JSON array of review comments. Each comment should have this structure:
[
  {{
    "file": "relative/path/to/file.ext",
    "line": line_number,
    "severity": "error|warning|suggestion",
    "category": "security|performance|readability|best-practices|testing|documentation|bug|maintainability",
    "comment": "Clear, actionable feedback with specific suggestions for improvement",
    "suggestion": "Optional: Proposed code fix or improvement"
  }}
]

If the code looks good and no issues are found, return an empty array: []

**IMPORTANT:**
- Only return valid JSON
- Do not include markdown formatting in the JSON
- Line numbers refer to the new version of the file (lines starting with + in the diff)
- Focus on substantial issues, not minor formatting"""
    )


def _format_files(files: List[ChangedFile]) -> str:
    return "\n".join(
        Prompts._FILE_TEMPLATE.format(
            file_path=f.filename,
            status=f.status or "modified",
            language=detect_language(f.filename),
            patch=f.patch or "",
        )
        for f in files
    )


def build_review_prompt(diff: PullRequestDiff, criteria: Dict[str, bool]) -> str:
    enabled = [
        description
        for key, description in CRITERIA_DESCRIPTIONS.items()
        if criteria.get(key, True)
    ]
    return Prompts.REVIEW_PROMPT.format(
        repository=diff.repository_full_name,
        number=diff.number,
        title=diff.metadata.title or "N/A",
        description=diff.metadata.description or "N/A",
        criteria="\n".join(f"- {c}" for c in enabled),
        files=_format_files(diff.files),
    )
