"""Prompt construction for per-file reviews.

generate_prompt is pure: the same diff and file name always produce the same
prompt. The review cap and guideline wording are module constants so they can
be tuned without touching the template.
"""

from __future__ import annotations

MAX_REVIEWS = 2

SYSTEM_PROMPT = (
    "You are an expert code reviewer and software engineer. Your task is to analyze code snippets "
    "provided by users and offer detailed, constructive feedback."
)

RESPONSE_SCHEMA = """{
  "hasReview": boolean,
  "reviews": [
    {
      "comment": "Concise explanation of the issue or suggestion",
      "suggestion": "Code suggestion if applicable, otherwise null",
      "lineNumber": number,
      "language": "Programming language of the file",
      "severity": "low|medium|high",
      "category": "bug|security|performance|style|best_practice"
    }
  ]
}"""

GUIDELINES = (
    'Set "hasReview" to false if there\'s nothing significant to review.',
    f"Provide no more than {MAX_REVIEWS} reviews, prioritizing by severity and impact.",
    "Do not include reviews if there is nothing to improve.",
    "Make comments clear, specific, and actionable.",
    '"lineNumber" must be a line number in the new version of the file that appears in the patch.',
    "For suggestions, provide only the changed lines of code.",
    "Ensure the JSON is valid and can be parsed by a strict JSON parser.",
    "Do not include any text outside the JSON structure.",
)


def _format_guidelines(guidelines=GUIDELINES) -> str:
    return "\n".join(f"{i}. {rule}" for i, rule in enumerate(guidelines, 1))


def generate_prompt(diff_text: str, file_name: str) -> str:
    """Build the review prompt for one file's patch."""
    return f"""Perform a concise code review on the following patch from file "{file_name}". Identify potential bugs, security risks, and suggest improvements for code quality, performance, or best practices. Respond in the following JSON format:

{RESPONSE_SCHEMA}

Guidelines:
{_format_guidelines()}

Patch:
{diff_text}"""  # noqa: E501
