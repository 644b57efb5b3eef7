"""
Process Tracker Utility

Tracks child processes launched by ProcessSource so none outlives the
source that started it. Liveness is checked through psutil; zombies count
as terminated.
"""

import logging
from typing import Optional, Set

import psutil

logger = logging.getLogger(__name__)


class ProcessTracker:
    """
    Tracks which launched child processes are still alive.

    Used by ProcessSource after its terminate/kill sequence to confirm
    the child is really gone.
    """

    def __init__(self):
        """Initialize process tracker."""
        self.tracked_pids: Set[int] = set()

    def register(self, pid: int) -> None:
        """Start tracking a launched child."""
        if pid > 0:
            self.tracked_pids.add(pid)
            logger.debug(f"Tracking child process {pid}")

    def unregister(self, pid: Optional[int]) -> None:
        """Stop tracking a child that has been reaped."""
        if pid:
            self.tracked_pids.discard(pid)

    def is_alive(self, pid: Optional[int]) -> bool:
        """
        Check if a PID is currently alive.

        Args:
            pid: Process ID to check (None returns False)

        Returns:
            bool: True if the process exists and is not a zombie
        """
        if not pid:
            return False
        try:
            return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False

    def alive_pids(self) -> Set[int]:
        """Tracked PIDs that are still running."""
        return {pid for pid in self.tracked_pids if self.is_alive(pid)}

    def ensure_terminated(self, pid: Optional[int], timeout: float = 0.5) -> bool:
        """
        Force-kill a tracked child if it survived a shutdown request.

        Args:
            pid: Process ID (None is treated as already gone)
            timeout: Seconds to wait for the kill to take effect

        Returns:
            bool: True if the process is gone afterwards
        """
        if not pid:
            return True
        try:
            if self.is_alive(pid):
                logger.warning(f"Child process {pid} survived shutdown, killing via psutil")
                proc = psutil.Process(pid)
                proc.kill()
                proc.wait(timeout=timeout)
        except psutil.NoSuchProcess:
            pass
        except (psutil.AccessDenied, psutil.TimeoutExpired) as e:
            logger.error(f"Could not terminate child process {pid}: {e}")
            return False
        finally:
            gone = not self.is_alive(pid)
            if gone:
                self.unregister(pid)
        return gone


_default_tracker: Optional[ProcessTracker] = None


def get_process_tracker() -> ProcessTracker:
    """Return the process-wide tracker shared by process sources."""
    global _default_tracker
    if _default_tracker is None:
        _default_tracker = ProcessTracker()
    return _default_tracker
