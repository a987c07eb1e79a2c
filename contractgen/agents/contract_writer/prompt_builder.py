from __future__ import annotations

import re

from contractgen.project_state.models import ContractRequest

EXPLANATION_MARKER = "EXPLANATION:"

REQUIREMENTS = (
    "Include the SPDX license identifier",
    "Add comprehensive comments",
    "Follow security best practices",
    "Make the contract ready for deployment",
    "Include basic error handling",
)

_LINE_BREAK_RE = re.compile(r"\s*[\r\n]+\s*")


def _one_line(text: str) -> str:
    return _LINE_BREAK_RE.sub(" ", text).strip()


def build_prompt(request: ContractRequest) -> str:
    """
    Render a ContractRequest as the user prompt for the contract writer.

    Every parameter gets exactly one "- key: value" line, in insertion order;
    line breaks inside keys, values and the description are folded into spaces.
    """
    lines = [
        "Generate a Solidity smart contract with the following specifications:",
        "",
        f"Contract Type: {request.category.value}",
        f"Description: {_one_line(request.description)}",
        "",
    ]

    if request.parameters:
        lines.append("Parameters:")
        lines.extend(f"- {_one_line(key)}: {_one_line(value)}" for key, value in request.parameters.items())
    else:
        lines.append("Parameters: none")

    lines.append("")
    lines.append("Requirements:")
    lines.extend(f"{i}. {req}" for i, req in enumerate(REQUIREMENTS, start=1))
    lines.append("")
    lines.append(
        "Respond with the complete contract source code, followed by "
        f"'{EXPLANATION_MARKER}' and a brief explanation of how the contract works."
    )
    return "\n".join(lines)
