"""
HTTP Client Module.

Runs JSON GET requests for the remote feed, geocoder and router off the UI
thread. A worker QObject lives on its own QThread; results come back to the
owning thread through a queued signal and are handed to the caller's
callback exactly once.
"""

import itertools
import logging
from typing import Any, Callable, Dict, Optional, Tuple

import requests
from PySide6.QtCore import QCoreApplication, QObject, QThread, Signal, Slot

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "storefinder/0.1"
THREAD_STOP_TIMEOUT_MS = 2000

JsonCallback = Callable[[Optional[Any], Optional[str]], None]


def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 10.0,
) -> Tuple[Optional[Any], Optional[str]]:
    """
    Performs a GET request and decodes the JSON body.

    Args:
        url: Endpoint URL.
        params: Query parameters.
        headers: Extra request headers.
        timeout: Seconds before giving up.

    Returns:
        Tuple of (payload, error). Exactly one of them is None.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)
    try:
        response = requests.get(
            url, params=params, headers=request_headers, timeout=timeout
        )
        response.raise_for_status()
        return response.json(), None
    except requests.exceptions.Timeout:
        logger.warning(f"Request to {url} timed out after {timeout}s")
        return None, f"Request timed out after {timeout}s"
    except requests.exceptions.RequestException as e:
        logger.warning(f"Request to {url} failed: {e}")
        return None, f"Request failed: {e}"
    except ValueError as e:
        logger.warning(f"Invalid JSON from {url}: {e}")
        return None, f"Invalid response: {e}"


class HttpWorker(QObject):
    """
    Worker object that executes requests in a separate thread.

    Signals:
        finished: Args: (job_id: int, payload: object, error: object)
    """

    finished = Signal(int, object, object)

    @Slot(int, str, object, object, float)
    def fetch(
        self,
        job_id: int,
        url: str,
        params: Optional[Dict[str, Any]],
        headers: Optional[Dict[str, str]],
        timeout: float,
    ) -> None:
        payload, error = fetch_json(url, params, headers, timeout)
        self.finished.emit(job_id, payload, error)


class HttpClient(QObject):
    """
    Dispatches JSON requests and routes each result to its callback.

    With ``asynchronous=False`` requests run inline and the callback fires
    before get_json returns, which suits headless use and tests.

    The worker thread is stopped by shutdown(), which also runs when the
    application is about to quit.
    """

    _fetch_requested = Signal(int, str, object, object, float)

    def __init__(self, asynchronous: bool = True, parent: Optional[QObject] = None) -> None:
        """
        Initializes the client.

        Args:
            asynchronous: Run requests on a worker thread.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self.asynchronous = asynchronous
        self._job_ids = itertools.count(1)
        self._callbacks: Dict[int, JsonCallback] = {}
        self._thread: Optional[QThread] = None
        self._worker: Optional[HttpWorker] = None

        if asynchronous:
            self._thread = QThread()
            self._worker = HttpWorker()
            self._worker.moveToThread(self._thread)
            self._fetch_requested.connect(self._worker.fetch)
            self._worker.finished.connect(self._on_finished)
            self._thread.finished.connect(self._worker.deleteLater)
            self._thread.start()

            app = QCoreApplication.instance()
            if app is not None:
                app.aboutToQuit.connect(self.shutdown)
            else:
                logger.debug("No application instance; call shutdown() explicitly")

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]],
        callback: JsonCallback,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Requests a JSON document.

        Args:
            url: Endpoint URL.
            params: Query parameters.
            callback: Receives (payload, error) once.
            headers: Extra request headers.
            timeout: Seconds before giving up.
        """
        if not self.asynchronous:
            payload, error = fetch_json(url, params, headers, timeout)
            callback(payload, error)
            return

        job_id = next(self._job_ids)
        self._callbacks[job_id] = callback
        self._fetch_requested.emit(job_id, url, params, headers, float(timeout))

    @Slot(int, object, object)
    def _on_finished(self, job_id: int, payload: Any, error: Any) -> None:
        callback = self._callbacks.pop(job_id, None)
        if callback is None:
            logger.debug(f"Dropping result of unknown job {job_id}")
            return
        callback(payload, error)

    def pending_count(self) -> int:
        return len(self._callbacks)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.isRunning()

    @Slot()
    def shutdown(self) -> None:
        """Stops the worker thread. Pending callbacks are dropped."""
        thread = self._thread
        self._thread = None
        if thread is not None:
            thread.quit()
            if not thread.wait(THREAD_STOP_TIMEOUT_MS):
                logger.warning("HTTP worker thread did not quit in time. Terminating...")
                thread.terminate()
                thread.wait()
        if self._callbacks:
            logger.debug(f"Dropping {len(self._callbacks)} pending request(s)")
        self._callbacks.clear()
