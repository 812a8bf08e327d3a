"""Contract shared by the protocol-specific request executors."""

from abc import ABC, abstractmethod

from chainpost.models.request import BaseRequest
from chainpost.models.response import RequestResponse


class RequestExecutor(ABC):
    """
    Executes one resolved request over its protocol.

    Executors are stateless apart from their transport clients and may be
    called concurrently. They never modify the request they are given.
    Transport failures are reported as a response with status code 0;
    only cancellation propagates.
    """

    @abstractmethod
    def can_execute(self, request: BaseRequest) -> bool:
        ...

    @abstractmethod
    async def execute(self, request: BaseRequest) -> RequestResponse:
        ...
