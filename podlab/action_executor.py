"""
action_executor.py: Module for executing planned actions concurrently with dry-run support
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed, Future
from typing import List, Dict, Any
from .utils import info

logger = logging.getLogger(__name__)


def _log_failure(desc: str):
    def callback(future: Future):
        exc = future.exception()
        if exc is not None:
            logger.warning(f"{desc} failed: {exc}")
    return callback


def run_until_error_concurrent(actions: List[Dict[str, Any]]) -> None:
    """
    Run every action in its own thread and raise the first error by completion
    order. Actions still running when that happens are not cancelled; they
    finish on their own and their failures are only logged.
    :param actions: List of action dictionaries ('desc', 'func', 'args', 'kwargs')
    """
    if not actions:
        return

    pool = ThreadPoolExecutor(max_workers=len(actions), thread_name_prefix="podlab-action")
    futures = {}
    for act in actions:
        future = pool.submit(act['func'], *act.get('args', ()), **act.get('kwargs', {}))
        future.add_done_callback(_log_failure(act['desc']))
        futures[future] = act
    # no new work; submitted actions keep running
    pool.shutdown(wait=False)

    for future in as_completed(futures):
        exc = future.exception()
        if exc is not None:
            raise exc


class ActionExecutor:
    """
    ActionExecutor: Class responsible for executing action plans with dry-run support
    """

    def execute_actions(self, actions: List[Dict[str, Any]], dry_run: bool = False) -> bool:
        """
        Execute a list of actions concurrently with optional dry-run
        :param actions: List of action dictionaries
        :param dry_run: Whether to execute in dry-run mode
        :return: True if the actions were applied, False for a dry run or nothing to do
        Raises the first error raised by any action.
        """
        if not actions:
            info("Nothing to do.")
            return False

        info("Planned actions:")
        for act in actions:
            print(f"  {act['desc']}")

        if dry_run:
            info("DRY RUN: No changes applied")
            return False

        run_until_error_concurrent(actions)
        return True
