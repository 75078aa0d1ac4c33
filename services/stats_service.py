"""
Статистика для дашборда сотрудника
Три запроса уходят одновременно и отменяются все вместе
"""
import threading
from concurrent.futures import ThreadPoolExecutor, wait as wait_futures
from typing import Callable, Dict, Optional
from config import Config
from services.errors import BackendError, GENERIC_ERROR


MSG_STATS_FAILED = "Не удалось загрузить статистику."


class StatsBatch:
    """
    Пакет запросов статистики: overall, timeline, top addresses

    on_update вызывается ровно один раз, когда все три запроса завершились,
    если пакет не отменён. После cancel() обновлений нет, даже если
    часть ответов уже пришла.
    """

    def __init__(self, client, token: str, on_update: Callable[[Dict], None],
                 top_limit: Optional[int] = None):
        self.client = client
        self.token = token
        self.on_update = on_update
        self.top_limit = top_limit or Config.TOP_ADDRESSES_LIMIT
        self.is_loading = False
        self._cancelled = threading.Event()
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> 'StatsBatch':
        self.is_loading = True
        self._executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix="stats")
        self._futures = [
            self._executor.submit(self.client.get_overall_stats, self.token),
            self._executor.submit(self.client.get_timeline_stats, self.token, "day"),
            self._executor.submit(self.client.get_top_addresses, self.token, self.top_limit),
        ]
        threading.Thread(target=self._collect, name="stats-collect", daemon=True).start()
        self._executor.shutdown(wait=False)
        return self

    def _collect(self):
        try:
            wait_futures(self._futures)
            if self._cancelled.is_set():
                return

            overall, timeline, top = self._futures
            try:
                update = {
                    "overall": overall.result(),
                    "timeline": timeline.result(),
                    "top_addresses": top.result(),
                    "error": None,
                }
            except BackendError as e:
                print(f"StatsBatch: request failed: {e.status_code} {e.message}")
                update = {"overall": None, "timeline": None, "top_addresses": None,
                          "error": e.message or MSG_STATS_FAILED, "status_code": e.status_code}
            except Exception as e:
                print(f"StatsBatch Error: {e}")
                update = {"overall": None, "timeline": None, "top_addresses": None,
                          "error": GENERIC_ERROR, "status_code": None}

            with self._lock:
                if self._cancelled.is_set():
                    return
                self.is_loading = False
                self.on_update(update)
        finally:
            self._done.set()

    def cancel(self):
        """Отменить пакет: дальнейших обновлений состояния не будет"""
        with self._lock:
            self._cancelled.set()
            self.is_loading = False
        for future in self._futures:
            future.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """True, если пакет завершился за timeout"""
        return self._done.wait(timeout)


def load_dashboard_stats(client, token: str, timeout: Optional[float] = None) -> Dict:
    """
    Загрузить статистику синхронно (для запроса страницы)

    Если не уложились в timeout, пакет отменяется, возвращается ошибка.
    """
    state: Dict = {}
    batch = StatsBatch(client, token, state.update).start()
    if not batch.wait(Config.STATS_TIMEOUT if timeout is None else timeout):
        batch.cancel()
        print("StatsBatch: timed out, batch cancelled")
        return {"overall": None, "timeline": None, "top_addresses": None,
                "error": MSG_STATS_FAILED, "status_code": None}
    return state
