"""Environment targeting for seed runs.

Two targets share the same store API:

- emulator: local Firestore emulator, safe to wipe, fast writes
- production: the live project, smaller batches, slower pacing and an
  explicit confirmation before any write
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from .models import DEFAULT_SEED_VERSION

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_DATA_PATH = PROJECT_ROOT / "data" / "seed"
DEFAULT_SCHEMAS_PATH = PROJECT_ROOT / "schemas"

DEFAULT_EMULATOR_HOST = "127.0.0.1:8084"
DEFAULT_EMULATOR_PROJECT = "hcmtemplate"
EMULATOR_UI_URL = "http://127.0.0.1:4004/firestore"

# Probed in order for production when no explicit path is configured
CREDENTIAL_CANDIDATES = (
    "firebase-service-account.json",
    "serviceAccountKey.json",
    "credentials.json",
)


class SeedTarget(str, Enum):
    """Deployment environment a run writes to."""

    EMULATOR = "emulator"
    PRODUCTION = "production"


@dataclass(frozen=True)
class TargetPolicy:
    """Write-safety policy attached to a target."""

    batch_size: int
    chunk_delay: float
    clear_existing: bool
    requires_confirmation: bool


TARGET_POLICIES: dict[SeedTarget, TargetPolicy] = {
    SeedTarget.EMULATOR: TargetPolicy(
        batch_size=25,
        chunk_delay=0.1,
        clear_existing=True,
        requires_confirmation=False,
    ),
    SeedTarget.PRODUCTION: TargetPolicy(
        batch_size=10,
        chunk_delay=0.2,
        clear_existing=False,
        requires_confirmation=True,
    ),
}


@dataclass
class EnvironmentSettings:
    """Connection parameters and policy for one target."""

    target: SeedTarget = SeedTarget.EMULATOR
    project_id: str = DEFAULT_EMULATOR_PROJECT
    emulator_host: str = DEFAULT_EMULATOR_HOST
    credentials_path: Path | None = None
    data_path: Path = field(default_factory=lambda: DEFAULT_DATA_PATH)
    schemas_path: Path = field(default_factory=lambda: DEFAULT_SCHEMAS_PATH)
    seed_version: str = DEFAULT_SEED_VERSION

    @property
    def is_production(self) -> bool:
        return self.target is SeedTarget.PRODUCTION

    @property
    def policy(self) -> TargetPolicy:
        return TARGET_POLICIES[self.target]

    @classmethod
    def from_env(
        cls,
        target: SeedTarget | str | None = None,
        root: Path = PROJECT_ROOT,
    ) -> EnvironmentSettings:
        """Build settings from the process environment and .env file.

        An explicit target wins over SEED_TARGET.
        """
        load_dotenv()

        resolved = SeedTarget(target or os.getenv("SEED_TARGET", SeedTarget.EMULATOR.value))
        project_id = os.getenv("FIREBASE_PROJECT_ID") or os.getenv("VITE_FIREBASE_PROJECT_ID") or ""
        if resolved is SeedTarget.EMULATOR:
            project_id = project_id or DEFAULT_EMULATOR_PROJECT

        data_path = os.getenv("SEED_DATA_PATH")
        return cls(
            target=resolved,
            project_id=project_id,
            emulator_host=os.getenv("FIRESTORE_EMULATOR_HOST", DEFAULT_EMULATOR_HOST),
            credentials_path=find_credentials(root) if resolved is SeedTarget.PRODUCTION else None,
            data_path=Path(data_path) if data_path else DEFAULT_DATA_PATH,
            seed_version=os.getenv("SEED_VERSION", DEFAULT_SEED_VERSION),
        )


def find_credentials(root: Path) -> Path | None:
    """Locate a service-account key file.

    Returns None when nothing is found, in which case Application Default
    Credentials are used.
    """
    candidates = [root / CREDENTIAL_CANDIDATES[0]]
    env_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if env_path:
        candidates.append(root / env_path)
    candidates.extend(root / name for name in CREDENTIAL_CANDIDATES[1:])

    for path in candidates:
        if path.is_file():
            return path
    return None
