"""
Package marker for source code under `src.pricing_engine`.
It groups the rule interpreter, action synthesizer, and guardrail enforcer under a stable import path.
Every module here is pure and synchronous; hosts call it and persist the results themselves.
"""
