"""Domain layer (pure logic).

- Keep game rules and promo-code rules here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no Telegram.
- Prefer deterministic functions (randomness passed in as an argument).
"""
