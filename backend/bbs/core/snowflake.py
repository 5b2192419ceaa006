"""
Генератор идентификаторов аккаунтов (Snowflake).

Раскладка 64-битного ID:
    | 41 бит: мс от эпохи | 10 бит: node_id | 12 бит: счётчик в мс |

ID уникальны в пределах генератора и растут во времени, без запросов к БД.
"""
import logging
import threading
import time
from typing import Tuple

from bbs.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 2010-11-04T01:42:54.657Z, эпоха Twitter Snowflake
DEFAULT_EPOCH_MS = 1288834974657

NODE_BITS = 10
STEP_BITS = 12

NODE_MAX = (1 << NODE_BITS) - 1
STEP_MASK = (1 << STEP_BITS) - 1
TIME_SHIFT = NODE_BITS + STEP_BITS
NODE_SHIFT = STEP_BITS


class IdentityIssuer:
    """
    Потокобезопасный генератор Snowflake ID.

    Создаётся один раз при старте приложения и передаётся в сервисы
    через dependency, тесты создают свои независимые экземпляры.
    """

    def __init__(self, node_id: int = 0, epoch_ms: int = DEFAULT_EPOCH_MS):
        """
        :param node_id: Номер узла 0..1023
        :type node_id: int
        :param epoch_ms: Начало отсчёта времени в мс (unix time)
        :type epoch_ms: int
        :raises ConfigError: node_id вне допустимого диапазона
        """
        if not isinstance(node_id, int) or not 0 <= node_id <= NODE_MAX:
            raise ConfigError(f"node_id должен быть в диапазоне 0..{NODE_MAX}, получено {node_id!r}")

        self.node_id = node_id
        self.epoch_ms = epoch_ms

        # Монотонные часы, привязанные к wall clock в момент создания:
        # перевод системного времени назад не даст повторов
        self._wall_start_ms = time.time_ns() // 1_000_000
        self._mono_start_ns = time.monotonic_ns()

        self._lock = threading.Lock()
        self._last_ms = -1
        self._step = 0

        logger.info(f"IdentityIssuer инициализирован: node_id={node_id}")

    def _now_ms(self) -> int:
        elapsed_ms = (time.monotonic_ns() - self._mono_start_ns) // 1_000_000
        return self._wall_start_ms + elapsed_ms - self.epoch_ms

    def next_id(self) -> int:
        """Возвращает новый уникальный ID"""
        with self._lock:
            now = self._now_ms()

            if now == self._last_ms:
                self._step = (self._step + 1) & STEP_MASK
                if self._step == 0:
                    # Счётчик исчерпан, ждём следующую миллисекунду
                    while now <= self._last_ms:
                        now = self._now_ms()
            else:
                self._step = 0

            self._last_ms = now
            return (now << TIME_SHIFT) | (self.node_id << NODE_SHIFT) | self._step

    def decompose(self, snowflake_id: int) -> Tuple[int, int, int]:
        """
        Раскладывает ID на составные части.

        :return: (unix time в мс, node_id, счётчик)
        :rtype: Tuple[int, int, int]
        """
        timestamp_ms = (snowflake_id >> TIME_SHIFT) + self.epoch_ms
        node_id = (snowflake_id >> NODE_SHIFT) & NODE_MAX
        step = snowflake_id & STEP_MASK
        return timestamp_ms, node_id, step
