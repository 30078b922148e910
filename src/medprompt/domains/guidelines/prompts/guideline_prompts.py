"""MCP Prompts: pre-built interaction templates for guideline research journeys."""

from __future__ import annotations

from fastmcp import FastMCP


def register_guideline_prompts(mcp: FastMCP) -> None:
    """Register guideline domain MCP prompts."""

    @mcp.prompt()
    def guideline_research_prompt(theme: str = "医療AI", provider: str = "gemini") -> str:
        """Prompt template for preparing a guideline search on a theme."""
        return f"""I want to research Japanese official guidelines on 「{theme}」 using {provider}.

1. Set the exploration theme to 「{theme}」 with update_config
2. Pick the purpose preset that fits best with switch_preset
3. Enable the keyword chips that matter for this theme
4. Generate the prompt for {provider} with generate_guideline_prompt
5. Show me the search queries so I can run them myself

Keep the 3省2ガイドライン in scope."""

    @mcp.prompt()
    def compare_llm_prompt(provider: str = "chatgpt") -> str:
        """Prompt template for choosing between a provider's free and paid models."""
        return f"""Help me decide whether the free model of {provider} is enough for guideline retrieval.

Read llm://providers/{provider} and tell me:
1. Which features only the paid models offer
2. What the free model cannot do (web browsing, PDF reading, e-Gov access)
3. How the generated prompt changes for the free model compared to the paid ones"""

    @mcp.prompt()
    def share_setup_prompt() -> str:
        """Prompt template for handing the current setup to a colleague."""
        return """I want to share my current prompt setup with a colleague.

1. Create a share link for the current configuration
2. If the link is too long for browsers, export the configuration JSON instead
3. Export the settings bundle as well so my template wording and custom lists travel with it"""
