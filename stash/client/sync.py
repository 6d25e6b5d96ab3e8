"""Client-side working set: progressive load, fuzzy filtering and reveal.

``SyncController`` owns a single ``DisplayState``. Loading happens in two
phases: a bounded fetch of the newest records for a fast first paint, then a
delayed unbounded fetch that replaces the superset. Every mutation is followed
by a full ``reload()``.

Each load runs under a generation number. Results belonging to a superseded
generation are dropped, and so is a bounded result that lands after its own
generation's full result.

The controller never raises store errors to its caller: authorization
failures invoke ``on_session_invalid``, everything else ends up in
``state.error``.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from stash.client.pagination import RevealController
from stash.client.pipeline import filter_records, group_by_domain, is_blank
from stash.config import ClientConfig
from stash.errors import NotFound, Unauthorized, ValidationFailure
from stash.services.common import clean_url, require_url_or_notes
from stash.services.search import build_index

logger = logging.getLogger(__name__)

STATUS_IDLE = "idle"
STATUS_INITIAL_LOADING = "initial_loading"
STATUS_INITIAL_LOADED = "initial_loaded"
STATUS_BACKGROUND_LOADING = "background_loading"
STATUS_FULLY_LOADED = "fully_loaded"
STATUS_FAILED = "failed"

SESSION_INVALID_MESSAGE = "Session expired, please sign in again"


@dataclass
class DisplayState:
    all_records: list = field(default_factory=list)
    filtered: list = field(default_factory=list)
    query: str = ""
    notes_only: bool = False
    visible_count: int = 0
    status: str = STATUS_IDLE
    error: str | None = None

    @property
    def searching(self) -> bool:
        return not is_blank(self.query)

    @property
    def fully_loaded(self) -> bool:
        return self.status == STATUS_FULLY_LOADED


class SyncController:
    def __init__(
        self,
        store,
        scheduler=None,
        on_session_invalid=None,
        initial_limit: int = ClientConfig.INITIAL_LIMIT,
        page_size: int = ClientConfig.PAGE_SIZE,
        reveal_step: int = ClientConfig.REVEAL_STEP,
        background_delay: float = ClientConfig.BACKGROUND_DELAY,
        search_debounce: float = ClientConfig.SEARCH_DEBOUNCE,
        threshold: float = ClientConfig.FUZZY_THRESHOLD,
    ):
        self.store = store
        self.state = DisplayState()
        self.reveal = RevealController(page_size=page_size, step=reveal_step)
        self.on_session_invalid = on_session_invalid
        self.initial_limit = initial_limit
        self.background_delay = background_delay
        self.search_debounce = search_debounce
        self.threshold = threshold

        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler or BackgroundScheduler(daemon=True)
        self._lock = threading.RLock()
        self._index = build_index([], threshold=threshold)
        self._generation = 0
        self._full_generation = 0
        self._background_job = None
        self._search_job = None

        self.background_job_id = f"stash-background-load-{id(self)}"
        self.search_job_id = f"stash-search-{id(self)}"

    # scheduling

    def _schedule(self, func, delay: float, job_id: str, args=()):
        if self._owns_scheduler and not self._scheduler.running:
            self._scheduler.start()
        return self._scheduler.add_job(
            func,
            "date",
            run_date=datetime.now(timezone.utc) + timedelta(seconds=delay),
            args=args,
            id=job_id,
            replace_existing=True,
        )

    @staticmethod
    def _cancel(job) -> None:
        if job is None:
            return
        try:
            job.remove()
        except JobLookupError:
            pass  # already ran

    def shutdown(self) -> None:
        with self._lock:
            self._cancel(self._background_job)
            self._cancel(self._search_job)
            self._background_job = None
            self._search_job = None
        if self._owns_scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    # loading

    def activate(self) -> bool:
        return self.reload()

    def reload(self) -> bool:
        """Refetch the working set from scratch, bounded load first."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._cancel(self._background_job)
            self._background_job = None
            self.state.status = STATUS_INITIAL_LOADING
            self.state.error = None
        return self._load_initial(generation)

    def _load_initial(self, generation: int) -> bool:
        try:
            records = self.store.list_newest_first(limit=self.initial_limit)
        except Unauthorized:
            self._invalidate_session(generation)
            return False
        except Exception as exc:
            logger.warning("Initial bookmark load failed: %s", exc)
            with self._lock:
                if generation != self._generation:
                    return False
                self._replace_superset([])
                self.state.status = STATUS_FAILED
                self.state.error = "Failed to load bookmarks"
            return False

        with self._lock:
            if generation != self._generation or self._full_generation == generation:
                logger.debug("Dropping stale initial load (generation %s)", generation)
                return False
            self._replace_superset(records)
            self.state.status = STATUS_INITIAL_LOADED
            self._background_job = self._schedule(
                self._load_full,
                self.background_delay,
                self.background_job_id,
                args=(generation,),
            )
        return True

    def _load_full(self, generation: int) -> bool:
        with self._lock:
            if generation != self._generation:
                return False
            self.state.status = STATUS_BACKGROUND_LOADING

        try:
            records = self.store.list_all()
        except Unauthorized:
            self._invalidate_session(generation)
            return False
        except Exception as exc:
            logger.warning("Background bookmark load failed: %s", exc)
            with self._lock:
                if generation == self._generation:
                    self.state.status = STATUS_INITIAL_LOADED
                    self.state.error = "Failed to load all bookmarks"
            return False

        with self._lock:
            if generation != self._generation:
                logger.debug("Dropping stale full load (generation %s)", generation)
                return False
            self._full_generation = generation
            self._replace_superset(records)
            self.state.status = STATUS_FULLY_LOADED
        return True

    def _replace_superset(self, records) -> None:
        self.state.all_records = list(records)
        self._index = build_index(self.state.all_records, threshold=self.threshold)
        self._recompute()

    def _recompute(self) -> None:
        state = self.state
        state.filtered = filter_records(
            state.all_records, state.query, state.notes_only, index=self._index
        )
        state.visible_count = self.reveal.reset(
            len(state.filtered), searching=state.searching
        )

    def _invalidate_session(self, generation: int | None = None) -> None:
        with self._lock:
            if generation is not None and generation != self._generation:
                return
            self._generation += 1
            self._cancel(self._background_job)
            self._cancel(self._search_job)
            self._background_job = None
            self._search_job = None
            self.state.status = STATUS_FAILED
            self.state.error = SESSION_INVALID_MESSAGE
        logger.info("Session rejected by the store, signing out")
        if self.on_session_invalid is not None:
            self.on_session_invalid()

    # filtering

    def set_query(self, query: str) -> None:
        """Debounced search: only the last query within the delay is applied."""
        with self._lock:
            self._cancel(self._search_job)
            self._search_job = self._schedule(
                self.apply_query, self.search_debounce, self.search_job_id, args=(query,)
            )

    def apply_query(self, query: str) -> list:
        with self._lock:
            self.state.query = query or ""
            self._recompute()
            return list(self.state.filtered)

    def clear_search(self) -> list:
        with self._lock:
            self._cancel(self._search_job)
            self._search_job = None
        return self.apply_query("")

    def set_notes_only(self, notes_only: bool) -> list:
        with self._lock:
            self.state.notes_only = bool(notes_only)
            self._recompute()
            return list(self.state.filtered)

    # reveal

    def reveal_more(self) -> bool:
        with self._lock:
            revealed = self.reveal.reveal_more(
                len(self.state.filtered), searching=self.state.searching
            )
            self.state.visible_count = self.reveal.visible_count
            return revealed

    def visible_records(self) -> list:
        with self._lock:
            return self.reveal.visible(self.state.filtered)

    def visible_groups(self) -> dict[str, list]:
        return group_by_domain(self.visible_records())

    # mutations

    def _mutate(self, failure_message: str, action):
        try:
            result = action()
        except Unauthorized:
            self._invalidate_session()
            return None
        except (ValidationFailure, NotFound) as exc:
            with self._lock:
                self.state.error = str(exc)
            return None
        except Exception as exc:
            logger.warning("%s: %s", failure_message, exc)
            with self._lock:
                self.state.error = failure_message
            return None
        self.reload()
        return result

    def add(self, url: str | None, notes: str = "", tags: str = ""):
        def action():
            require_url_or_notes(url, notes)
            return self.store.insert(clean_url(url), notes.strip(), tags.strip())

        return self._mutate("Failed to add bookmark", action)

    def update(self, bookmark_id: int, url: str | None, notes: str = "", tags: str = ""):
        def action():
            require_url_or_notes(url, notes)
            return self.store.update(
                bookmark_id, clean_url(url), notes.strip(), tags.strip()
            )

        return self._mutate("Failed to update bookmark", action)

    def delete(self, bookmark_id: int) -> bool:
        def action():
            if not self.store.delete(bookmark_id):
                raise NotFound("Bookmark not found")
            return True

        return bool(self._mutate("Failed to delete bookmark", action))
