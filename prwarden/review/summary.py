from collections import Counter
from typing import List

from prwarden.models.review_comment import ReviewComment, Severity

NO_ISSUES_SUMMARY = (
    "🎉 **Code Review Complete**\n\n"
    "This pull request looks good! No issues found during the automated review."
)

SEVERITY_LABELS = [
    (Severity.ERROR, "🔴", "Error(s)"),
    (Severity.WARNING, "🟡", "Warning(s)"),
    (Severity.SUGGESTION, "💡", "Suggestion(s)"),
]

CATEGORY_EMOJI = {
    "security": "🔒",
    "performance": "⚡",
    "readability": "📖",
    "best-practices": "✨",
    "testing": "🧪",
    "documentation": "📝",
    "bug": "🐛",
    "maintainability": "🔧",
}


def category_emoji(category: str) -> str:
    return CATEGORY_EMOJI.get(category, "💬")


def build_summary(comments: List[ReviewComment]) -> str:
    """Markdown summary of the comment list, counted by severity and category."""
    if not comments:
        return NO_ISSUES_SUMMARY

    severities = Counter(c.severity for c in comments)
    categories = Counter(c.category for c in comments)

    parts = ["🤖 **Automated Code Review Summary**\n\n"]
    parts.append(f"Found {len(comments)} item(s) to review:\n\n")
    for severity, emoji, label in SEVERITY_LABELS:
        if severities[severity]:
            parts.append(f"{emoji} **{severities[severity]} {label}**\n")

    parts.append("\n**Categories:**\n")
    for category, count in categories.most_common():
        parts.append(f"{category_emoji(category)} {category}: {count}\n")

    parts.append("\nPlease review the inline comments for detailed feedback.")
    return "".join(parts)
