"""
Base use case class.

Each use case wraps one business operation and knows nothing about HTTP.
Routes build the request object, call ``execute`` and translate the domain
exceptions from shortreel.core.exceptions into status codes.

Example:
    >>> use_case = CreateVideoJobUseCase(job_manager, runner)
    >>> response = await use_case.execute(CreateVideoRequest(topic="Volcanoes"))
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class UseCase(ABC, Generic[RequestT, ResponseT]):
    """
    Base use case abstract class.

    Type Parameters:
        RequestT: Type of the input request object
        ResponseT: Type of the output response object
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        """
        Execute the use case and return a response.

        Raises:
            ShortReelError subclasses only. HTTP exceptions are the route's
            responsibility.
        """
        pass
