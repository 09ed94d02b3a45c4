"""Developer tooling (architecture guardrails)."""
