# /blog_auto/services/generation_helpers/usage.py

from dataclasses import dataclass
from typing import Dict

from ..claude_service import ClaudeUsage


@dataclass
class UsageAccumulator:
    """Running token/cost totals across every Claude call made for one job."""
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0
    calls: int = 0

    def add(self, usage: ClaudeUsage) -> None:
        self.input_tokens += usage.input_tokens
        self.output_tokens += usage.output_tokens
        self.cost_usd += usage.cost_usd
        self.calls += 1

    def as_fields(self) -> Dict:
        """Column values for the `generations` row."""
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cost_usd": round(self.cost_usd, 6),
        }
