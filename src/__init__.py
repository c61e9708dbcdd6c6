"""
Package marker for source code under `src`.
`src.pricing_engine` holds the rule engine and guardrails; `src.api` and `src.common` wrap it for hosts.
"""
