"""End-to-end scenario tests for the idempotency primitives.

Each scenario exercises a public operation against real collaborators:
the local filesystem, or a FastAPI app reached through httpx.
"""
