from abc import abstractmethod

from base_module.module import Module
from common.error_manager import ErrorManager, ProcessingContext


class RepeatError(Exception):
    pass


class Repeater(Module):

    def __init__(
        self,
        module_name,
        global_shared_state,
        log_level,
        error_manager=None,
    ):
        super().__init__(module_name, global_shared_state, log_level)
        if error_manager is None:
            error_manager = ErrorManager(self._logger, ProcessingContext())
        self._error_manager = error_manager

    @abstractmethod
    def process_repeats(self, dashboard, id_allocator=None) -> dict:
        """Gets the dashboard JSON (not the API envelope) like:
        process_repeats(dashboard['dashboard'])
        expands repeats in place"""
        pass
