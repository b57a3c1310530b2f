import logging
from abc import ABC, abstractmethod


class Module(ABC):
    """Pipeline stage: importers, the repeater and exporters."""

    @abstractmethod
    def __init__(self, module_name, global_shared_state, log_level):
        logging.basicConfig(level=log_level)
        self._logger = logging.getLogger(module_name)
        # basicConfig only applies once per process
        self._logger.setLevel(log_level)
        shared_state = {} if global_shared_state is None else global_shared_state
        self._global_shared_state = lambda: shared_state

    @property
    def global_shared_state(self) -> dict:
        return self._global_shared_state()

    def __str__(self):
        return self.__class__.__name__
