"""Run orchestrator: confirm, load, seed and summarize one content bundle.

A run moves through IDLE -> CONFIRMING (production only) -> SEEDING ->
REPORTING -> DONE. A declined confirmation or a store that cannot be
created ends in ABORTED before any write. Units are seeded strictly one
after another in bundle order, and a failed unit never stops the rest.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Mapping, Sequence

from .batch import Clock, RecordValidator, Sleep, elapsed_ms, isoformat, seed_collection, utc_now
from .config import EnvironmentSettings
from .confirmation import ConfirmationProvider, FlagConfirmation
from .document import seed_document
from .errors import ConfirmationDeniedError, StoreInitializationError
from .loader import BundleEntry, build_units
from .models import SeedOptions, SeedResult, SeedSummary, SeedUnit, UnitKind
from .store import DocumentStore, create_store

logger = logging.getLogger(__name__)

StoreFactory = Callable[[EnvironmentSettings], DocumentStore]
Reporter = Callable[[SeedSummary], None]

CONFIRMATION_PROMPT = (
    "You are about to seed data to the PRODUCTION project {project}. "
    "Existing documents with the same ids will be overwritten. Continue?"
)


class RunState(str, Enum):
    """Lifecycle of a seed run."""

    IDLE = "idle"
    CONFIRMING = "confirming"
    SEEDING = "seeding"
    REPORTING = "reporting"
    DONE = "done"
    ABORTED = "aborted"


def build_options(
    settings: EnvironmentSettings,
    batch_size: int | None = None,
    clear_existing: bool | None = None,
    **overrides: object,
) -> SeedOptions:
    """SeedOptions with the target's policy filling anything not overridden."""
    policy = settings.policy
    return SeedOptions(
        batch_size=batch_size if batch_size is not None else policy.batch_size,
        clear_existing=clear_existing if clear_existing is not None else policy.clear_existing,
        chunk_delay=policy.chunk_delay,
        seed_version=settings.seed_version,
        **overrides,  # type: ignore[arg-type]
    )


class SeedRun:
    """One seeding run against one target.

    Example:
        run = SeedRun(EnvironmentSettings.from_env(), confirmation=FlagConfirmation(True))
        summary = run.run_bundle(bundle_entries())
    """

    def __init__(
        self,
        settings: EnvironmentSettings,
        options: SeedOptions | None = None,
        *,
        store_factory: StoreFactory | None = None,
        confirmation: ConfirmationProvider | None = None,
        validators: Mapping[str, RecordValidator] | None = None,
        reporter: Reporter | None = None,
        clock: Clock = utc_now,
        sleep: Sleep = time.sleep,
    ) -> None:
        self.settings = settings
        self.options = options or build_options(settings)
        self.store_factory = store_factory or create_store
        self.confirmation = confirmation or FlagConfirmation(False)
        self.validators = dict(validators or {})
        self.reporter = reporter
        self.clock = clock
        self.sleep = sleep
        self.state = RunState.IDLE

    def confirm(self) -> None:
        """Pass the production gate or abort.

        Raises:
            ConfirmationDeniedError: If production writes were not confirmed
        """
        if not self.settings.policy.requires_confirmation:
            return

        self.state = RunState.CONFIRMING
        prompt = CONFIRMATION_PROMPT.format(project=self.settings.project_id or "<unset>")
        if not self.confirmation.ask(prompt):
            self.state = RunState.ABORTED
            raise ConfirmationDeniedError(
                "Production seeding requires explicit confirmation (--confirm)"
            )
        logger.info("Production seeding confirmed")

    def run_bundle(self, entries: Sequence[BundleEntry]) -> SeedSummary:
        """Confirm, load the bundle from the data directory and seed it."""
        self.confirm()
        loaded = build_units(entries, self.settings.data_path, self.options)
        return self._execute(loaded.units, loaded.load_errors)

    def run(self, units: Sequence[SeedUnit]) -> SeedSummary:
        """Confirm and seed prebuilt units."""
        self.confirm()
        return self._execute(units, [])

    def _open_store(self) -> DocumentStore:
        try:
            return self.store_factory(self.settings)
        except StoreInitializationError:
            self.state = RunState.ABORTED
            raise

    def _execute(self, units: Sequence[SeedUnit], load_errors: list[str]) -> SeedSummary:
        start = time.monotonic()
        store = self._open_store()
        self.state = RunState.SEEDING

        summary = SeedSummary(target=self.settings.target.value, load_errors=list(load_errors))
        logger.info(
            f"Seeding {len(units)} units to {self.settings.target.value} "
            f"(batch_size={self.options.batch_size}, clear_existing={self.options.clear_existing})"
        )

        try:
            for unit in units:
                if not self.options.selects(unit.collection, unit.group):
                    logger.info(f"Skipping {unit.label} (excluded)")
                    continue
                summary.add(self._seed_unit(store, unit))
        finally:
            store.close()

        summary.total_duration_ms = elapsed_ms(start)
        summary.timestamp = isoformat(self.clock())

        self.state = RunState.REPORTING
        if self.reporter is not None:
            self.reporter(summary)
        self.state = RunState.DONE
        return summary

    def _seed_unit(self, store: DocumentStore, unit: SeedUnit) -> SeedResult:
        logger.info(f"Processing {unit.label} -> {unit.collection}")

        if unit.kind is UnitKind.DOCUMENT:
            return seed_document(
                store,
                unit.collection,
                unit.document_id or "",
                unit.data or {},
                unit.label,
                self.options,
                clock=self.clock,
            )

        validator = None
        if self.options.validate_data:
            validator = self.validators.get(unit.collection)
        return seed_collection(
            store,
            unit.collection,
            unit.records,
            self.options,
            label=unit.label,
            validator=validator,
            clock=self.clock,
            sleep=self.sleep,
        )


def run_seed(
    entries: Sequence[BundleEntry],
    settings: EnvironmentSettings,
    options: SeedOptions | None = None,
    **kwargs: object,
) -> SeedSummary:
    """Seed a bundle in one call; see SeedRun for keyword arguments."""
    return SeedRun(settings, options, **kwargs).run_bundle(entries)  # type: ignore[arg-type]
