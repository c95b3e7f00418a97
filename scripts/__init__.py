"""Seeding and verification commands.

| Script | Purpose |
|--------|---------|
| `seed_firestore.py` | Seeds the full content bundle (emulator or production) |
| `seed_single.py` | Clears and reseeds one named collection |
| `validate_seed.py` | Counts documents per seeded collection |
"""
