"""
Prompt templates sent to AI backends

Templates use str.format placeholders ``{language}`` and ``{error}``.
"""

DEFAULT_PROMPT = (
    "You are helping an operator troubleshoot a Kubernetes cluster. "
    "Answer in {language}. Explain the following error reported by a cluster check, "
    "delimited by triple dashes: --- {error} ---\n"
    "Give the most likely fix as short numbered steps, 280 characters at most, using this format:\n"
    "Error: {{what is wrong}}\n"
    "Solution: {{steps to fix it}}"
)

NETWORK_POLICY_PROMPT = (
    "You are reviewing Kubernetes network policies. Answer in {language}. "
    "The following finding is delimited by triple dashes: --- {error} ---\n"
    "Explain the exposure it creates and how to tighten the policy, 280 characters at most, using this format:\n"
    "Error: {{what is wrong}}\n"
    "Solution: {{steps to fix it}}"
)

PROMPTS_BY_KIND = {
    "NetworkPolicy": NETWORK_POLICY_PROMPT,
}


def get_prompt_template(kind: str) -> str:
    """Return the template for a result kind, falling back to the default"""
    return PROMPTS_BY_KIND.get(kind, DEFAULT_PROMPT)
