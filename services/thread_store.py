"""
ThreadStore for conversation threads and suspended diff sessions.

Switching threads suspends the active thread's diff session into a plain
record and restores the target thread's session verbatim, including
changes that were already accepted or rejected. Threads are persisted as
JSON.
"""

import json
import logging
import os
from datetime import datetime
from typing import List, Optional

from models import ApplicationState, ConversationThread, DiffSession
from utils.validation import validate_change_units

logger = logging.getLogger(__name__)

HISTORY_VERSION = 1


class ThreadStore:
    """
    Manages the conversation threads held in the application state.

    Attributes:
        state: Application state owning the thread list
    """

    def __init__(self, state: ApplicationState):
        self.state = state

    @property
    def threads(self) -> List[ConversationThread]:
        return self.state.threads

    @property
    def active(self) -> Optional[ConversationThread]:
        return self.state.get_active_thread()

    def get(self, thread_id: str) -> Optional[ConversationThread]:
        for thread in self.threads:
            if thread.id == thread_id:
                return thread
        return None

    def create_thread(self, name: Optional[str] = None) -> ConversationThread:
        """Create a thread and make it the active one."""
        thread = ConversationThread(name=name or f"Thread {len(self.threads) + 1}")
        self.threads.append(thread)
        self.state.active_thread_id = thread.id
        return thread

    def ensure_active(self) -> ConversationThread:
        """Return the active thread, creating one if there is none."""
        return self.active or self.create_thread()

    def suspend(self, session: Optional[DiffSession]):
        """
        Store the active thread's diff session.

        A finished or missing session clears the stored record.
        """
        thread = self.active
        if thread is None:
            return
        if session is not None and session.is_active:
            thread.diff_record = session.to_record()
        else:
            thread.diff_record = None

    def clear_diff(self, thread_id: Optional[str] = None):
        thread = self.get(thread_id) if thread_id else self.active
        if thread is not None:
            thread.diff_record = None

    def restore(self, thread_id: Optional[str] = None) -> Optional[DiffSession]:
        """
        Rebuild the diff session stored on a thread.

        A record that no longer parses is dropped with a warning.
        """
        thread = self.get(thread_id) if thread_id else self.active
        if thread is None or not thread.diff_record:
            return None
        try:
            session = DiffSession.from_record(thread.diff_record)
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Dropping unreadable diff state on thread %s: %s", thread.id, e)
            thread.diff_record = None
            return None

        is_valid, message = validate_change_units(session.change_units)
        if not is_valid:
            logger.warning("Dropping invalid diff state on thread %s: %s", thread.id, message)
            thread.diff_record = None
            return None
        return session

    def switch_to(self, thread_id: str, session: Optional[DiffSession]) -> Optional[DiffSession]:
        """
        Make another thread active.

        Args:
            thread_id: Thread to switch to
            session: Diff session currently shown (suspended into the old thread)

        Returns:
            The target thread's restored session, or None

        Raises:
            ValueError: If the thread does not exist
        """
        target = self.get(thread_id)
        if target is None:
            raise ValueError(f"Unknown thread: {thread_id}")
        if target.id == self.state.active_thread_id:
            return session
        self.suspend(session)
        self.state.active_thread_id = target.id
        return self.restore(target.id)

    def to_record(self) -> dict:
        return {
            "version": HISTORY_VERSION,
            "activeThreadId": self.state.active_thread_id,
            "threads": [thread.to_record() for thread in self.threads],
        }

    def save(self, path: str) -> str:
        """
        Write all threads to a JSON file.

        Raises:
            PermissionError: If the file cannot be written
        """
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.to_record(), f, ensure_ascii=False, indent=2)
        except PermissionError:
            raise PermissionError(f"Cannot write thread history: {path}")
        return path

    def load(self, path: str) -> int:
        """
        Replace the threads with those stored in a JSON file.

        Returns:
            Number of threads loaded

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not a thread history
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Thread history not found: {path}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Thread history is not valid JSON: {e}")

        if not isinstance(data, dict) or not isinstance(data.get("threads"), list):
            raise ValueError("Thread history must contain a 'threads' list")

        threads = [ConversationThread.from_record(r) for r in data["threads"]]
        self.state.threads[:] = threads
        active_id = data.get("activeThreadId") or ""
        if not self.get(active_id):
            active_id = threads[0].id if threads else ""
        self.state.active_thread_id = active_id
        return len(threads)

    def export_threads(self, output_dir: str = ".", base_name: str = "inkwell_threads") -> str:
        """
        Export threads to a timestamped JSON file.

        Returns:
            Path to the generated file

        Raises:
            ValueError: If there are no threads to export
        """
        if not self.threads:
            raise ValueError("No threads to export")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{base_name}_{timestamp}_{len(self.threads)}.json"
        return self.save(os.path.join(output_dir, filename))
