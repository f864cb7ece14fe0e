"""Lookup executor - runs scene lookups off the control thread.

Each submitted lookup runs provider.request_scene() on a thread pool. When
it finishes, exactly one completion event tagged with the request id is
posted back through the `post` callable (normally EventQueue.post):

    Scene returned          -> SceneLookupSucceeded(request_id, scene)
    SceneLookupError raised -> SceneLookupFailed(request_id, error)
    anything else raised    -> logged with traceback, then SceneLookupFailed

The executor holds no reference to the coordinator, only the post callable.
"""

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial

from panorama_map.constants import LookupConfig
from panorama_map.core.events import MapEvent, SceneLookupFailed, SceneLookupSucceeded
from panorama_map.core.scene_provider import SceneLookupError, SceneProvider
from panorama_map.model.coordinate import Coordinate
from panorama_map.model.scene import Scene

logger = logging.getLogger(__name__)


def create_lookup_pool(max_workers: int = LookupConfig.MAX_WORKERS) -> ThreadPoolExecutor:
    """Worker pool for scene lookups."""
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="scene-lookup")


class LookupExecutor:
    """Thread-pool backed SceneRequester.

    The pool is either owned (created here, stopped by shutdown()) or shared
    between sessions (passed in, never stopped here). The Streamlit app
    shares one process-wide pool across browser sessions.

    Example:
        executor = LookupExecutor(provider=provider, post=queue.post)
        executor.submit(request_id=1, coordinate=coord)
        ...
        executor.shutdown()
    """

    def __init__(
        self,
        provider: SceneProvider,
        post: Callable[[MapEvent], None],
        max_workers: int = LookupConfig.MAX_WORKERS,
        pool: ThreadPoolExecutor | None = None,
    ) -> None:
        self._provider = provider
        self._post = post
        self._owns_pool = pool is None
        self._pool = pool if pool is not None else create_lookup_pool(max_workers=max_workers)

    def submit(self, request_id: int, coordinate: Coordinate) -> Future[Scene]:
        """Start a lookup. The completion arrives later as a posted event."""
        logger.info(f"[LOOKUP] Submitting request {request_id} for {coordinate!r}")
        future = self._pool.submit(self._provider.request_scene, coordinate)
        future.add_done_callback(partial(self._deliver, request_id, coordinate))
        return future

    def _deliver(self, request_id: int, coordinate: Coordinate, future: Future[Scene]) -> None:
        """Turn a finished future into exactly one completion event."""
        try:
            scene = future.result()
        except SceneLookupError as e:
            logger.info(f"[LOOKUP] Request {request_id} failed: {e}")
            self._post(SceneLookupFailed(request_id=request_id, error=e))
            return
        except Exception as e:
            logger.exception(f"[LOOKUP] Request {request_id} raised unexpectedly")
            error = SceneLookupError(f"Unexpected provider error: {type(e).__name__}: {e}", coordinate=coordinate)
            error.__cause__ = e
            self._post(SceneLookupFailed(request_id=request_id, error=error))
            return

        self._post(SceneLookupSucceeded(request_id=request_id, scene=scene))

    @property
    def owns_pool(self) -> bool:
        return self._owns_pool

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting lookups. In-flight lookups still post their completion.

        A shared pool is left running for the other sessions.
        """
        if not self._owns_pool:
            logger.debug("[LOOKUP] Shared pool left running")
            return
        self._pool.shutdown(wait=wait)
